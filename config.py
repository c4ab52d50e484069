import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        token_secret: str,
        token_max_age_hours: int,
        estimated_tax_rate: float,
        db_timeout_secs: float,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.token_secret = token_secret
        self.token_max_age_hours = token_max_age_hours
        self.estimated_tax_rate = estimated_tax_rate
        self.db_timeout_secs = db_timeout_secs


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("FINDASH_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default).strip()
    return float(raw) if raw else 0.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "findash.db"
    database_url = os.getenv("FINDASH_DATABASE_URL", f"sqlite:///{default_db}")
    # Every date window is computed against this one reference.
    timezone = os.getenv("FINDASH_TIMEZONE", "UTC")
    token_secret = os.getenv(
        "FINDASH_TOKEN_SECRET",
        "3f1c0a9e5b7d4e26a8c2f0b1d9e7a6c54b3a2918f7e6d5c4b3a29180f7e6d5c4",
    )
    token_max_age_hours = int(os.getenv("FINDASH_TOKEN_MAX_AGE_HOURS", "24"))
    estimated_tax_rate = _float_env("FINDASH_ESTIMATED_TAX_RATE", "0.30")
    db_timeout_secs = float(os.getenv("FINDASH_DB_TIMEOUT_SECS", "5"))
    return Settings(
        database_url=database_url,
        timezone=timezone,
        token_secret=token_secret,
        token_max_age_hours=token_max_age_hours,
        estimated_tax_rate=estimated_tax_rate,
        db_timeout_secs=db_timeout_secs,
    )
