# ehr_api/config.py
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

JWT_ALGORITHM = "HS256"


class ConfigError(RuntimeError):
    """Raised at startup when a required setting is missing or malformed."""


def _split(value: Optional[str]) -> Tuple[str, ...]:
    return tuple(part.strip() for part in (value or "").split(",") if part.strip())


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_previous_secrets: Tuple[str, ...] = ()
    jwt_expire_hours: int = 24
    bcrypt_rounds: int = 10
    db_pool_size: int = 5
    db_pool_timeout: int = 30
    db_query_timeout: int = 30
    upload_dir: str = "public/images"
    cors_origins: Tuple[str, ...] = field(default=("http://localhost:5173",))
    cookie_secure: bool = False
    log_level: str = "INFO"
    port: int = 8081

    def __post_init__(self):
        if not self.jwt_secret:
            raise ConfigError("JWT_SECRET is required")
        if not self.database_url:
            raise ConfigError("DATABASE_URL is required")

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))

        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            db_user = os.getenv("DB_USER", "root")
            db_pass = os.getenv("DB_PASS", "")
            db_host = os.getenv("DB_HOST", "127.0.0.1")
            db_name = os.getenv("DB_NAME", "ehr")
            database_url = f"mysql+mysqlconnector://{db_user}:{db_pass}@{db_host}/{db_name}"

        return cls(
            database_url=database_url,
            jwt_secret=os.getenv("JWT_SECRET", ""),
            jwt_previous_secrets=_split(os.getenv("JWT_PREVIOUS_SECRETS")),
            jwt_expire_hours=_int("JWT_EXPIRE_HOURS", 24),
            bcrypt_rounds=_int("BCRYPT_ROUNDS", 10),
            db_pool_size=_int("DB_POOL_SIZE", 5),
            db_pool_timeout=_int("DB_POOL_TIMEOUT", 30),
            db_query_timeout=_int("DB_QUERY_TIMEOUT", 30),
            upload_dir=os.getenv("UPLOAD_DIR", "public/images"),
            cors_origins=_split(os.getenv("CORS_ORIGINS")) or ("http://localhost:5173",),
            cookie_secure=os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            port=_int("PORT", 8081),
        )
