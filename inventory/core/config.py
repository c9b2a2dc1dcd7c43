import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


APP_ENV = os.getenv("APP_ENV", "development")

# Version of the running application; the database must share its major version.
APP_VERSION = "1.2.0"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./inventory.db")
DB_POOL_MAX_SIZE = _get_int(os.getenv("DB_POOL_MAX_SIZE"), 10)
DB_POOL_MIN_IDLE = _get_int(os.getenv("DB_POOL_MIN_IDLE"), 2)
DB_POOL_TIMEOUT_SECONDS = _get_int(os.getenv("DB_POOL_TIMEOUT_SECONDS"), 30)
DB_WORKERS = _get_int(os.getenv("DB_WORKERS"), 8)

BCRYPT_COST = _get_int(os.getenv("BCRYPT_COST"), 13)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _get_int(os.getenv("JWT_EXPIRES_MINUTES"), 60)

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "inventory_session")
SESSION_COOKIE_SECURE = _get_bool(os.getenv("SESSION_COOKIE_SECURE"), default=False)

DEFAULT_LANDING_URL = os.getenv("DEFAULT_LANDING_URL", "/")
SIGN_IN_URL = os.getenv("SIGN_IN_URL", "/auth/sign-in")


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if DB_POOL_MIN_IDLE > DB_POOL_MAX_SIZE:
        raise RuntimeError("DB_POOL_MIN_IDLE cannot exceed DB_POOL_MAX_SIZE.")
