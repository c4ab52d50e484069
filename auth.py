import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException
from itsdangerous import BadSignature, URLSafeTimedSerializer

from config import get_settings

logger = logging.getLogger(__name__)

# Payload keys accepted as the owner identifier, in priority order.
OWNER_ID_KEYS = ("id", "_id", "userId", "sub")


class Unauthorized(Exception):
    pass


@dataclass(frozen=True)
class Identity:
    owner_id: str


def _serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(settings.token_secret, salt="access-token")


def issue_token(owner_id: str, **claims: object) -> str:
    payload = dict(claims)
    payload["sub"] = str(owner_id)
    return _serializer().dumps(payload)


def identity_from_payload(payload: object) -> Identity:
    if not isinstance(payload, dict):
        raise Unauthorized("Token payload is not an object")
    for key in OWNER_ID_KEYS:
        value = payload.get(key)
        if value not in (None, ""):
            return Identity(owner_id=str(value))
    raise Unauthorized("Token missing user identifier")


def verify_token(token: str, max_age_hours: Optional[int] = None) -> Identity:
    if max_age_hours is None:
        max_age_hours = get_settings().token_max_age_hours
    try:
        payload = _serializer().loads(token, max_age=max_age_hours * 3600)
    except BadSignature as exc:
        # SignatureExpired is a BadSignature subclass.
        raise Unauthorized("Invalid or expired token") from exc
    return identity_from_payload(payload)


def current_identity(authorization: Optional[str] = Header(default=None)) -> Identity:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return verify_token(authorization[len("Bearer ") :].strip())
    except Unauthorized as exc:
        logger.warning(f"auth_rejected: reason={exc}")
        raise HTTPException(status_code=401, detail="Unauthorized") from exc
