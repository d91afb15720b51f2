import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_JWT_SECRET = "change-me"
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    http_port: int = 8080

    database_url: str = "sqlite:///./complaint_portal.db"
    redis_url: str = "redis://localhost:6379/0"

    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 24 * 60

    auth_cookie_name: str = "auth_token"
    auth_cookie_secure: bool = False

    cors_allowed_origins: tuple[str, ...] = ("http://localhost:4200",)

    new_complaint_queue: str = "new-complaints"
    status_changed_queue: str = "complaint-status-changed"

    bcrypt_rounds: int = 12
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


def load_settings(env_file: str | None = ".env") -> Settings:
    """Build the process-wide settings from the environment (and ``.env``)."""
    if env_file:
        load_dotenv(env_file)

    app_env = os.getenv("APP_ENV", "development")
    default_log_level = "DEBUG" if app_env.lower() == "development" else "INFO"

    return Settings(
        app_env=app_env,
        http_port=int(os.getenv("HTTP_PORT", "8080")),
        database_url=os.getenv("DATABASE_URL", Settings.database_url),
        redis_url=os.getenv("REDIS_URL", Settings.redis_url),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(24 * 60))),
        auth_cookie_name=os.getenv("AUTH_COOKIE_NAME", "auth_token"),
        auth_cookie_secure=_get_bool(os.getenv("AUTH_COOKIE_SECURE"), default=False),
        cors_allowed_origins=_get_list(os.getenv("CORS_ALLOWED_ORIGINS"), Settings.cors_allowed_origins),
        new_complaint_queue=os.getenv("NEW_COMPLAINT_QUEUE", "new-complaints"),
        status_changed_queue=os.getenv("STATUS_CHANGED_QUEUE", "complaint-status-changed"),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        log_level=os.getenv("LOG_LEVEL", default_log_level).upper(),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.is_production and settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if settings.jwt_algorithm not in HMAC_ALGORITHMS:
        raise RuntimeError("JWT_ALGORITHM must be an HMAC algorithm (HS256, HS384 or HS512).")
