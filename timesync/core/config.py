import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None or not value.strip():
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./timesync.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)
STORAGE_KEY = os.getenv("STORAGE_KEY", "timesync_appointments_v1")

OWNER_NAME = os.getenv("OWNER_NAME", "Alex Engineer")

WORKING_HOURS_START = int(os.getenv("WORKING_HOURS_START", "8"))
WORKING_HOURS_END = int(os.getenv("WORKING_HOURS_END", "22"))
SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "30"))

ORACLE_API_KEY = os.getenv("ORACLE_API_KEY", os.getenv("OPENAI_API_KEY", ""))
ORACLE_MODEL = os.getenv("ORACLE_MODEL", "gpt-4o-mini")
ORACLE_BASE_URL = os.getenv("ORACLE_BASE_URL") or None
ORACLE_TIMEOUT_SECONDS = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "15"))
ORACLE_MAX_RETRIES = int(os.getenv("ORACLE_MAX_RETRIES", "1"))

CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:5173"])

def validate_runtime_config() -> None:
    if WORKING_HOURS_START >= WORKING_HOURS_END:
        raise RuntimeError("WORKING_HOURS_START must be earlier than WORKING_HOURS_END.")
    if SLOT_DURATION_MINUTES <= 0 or 60 % SLOT_DURATION_MINUTES != 0:
        raise RuntimeError("SLOT_DURATION_MINUTES must evenly divide an hour.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite:///./"):
        raise RuntimeError("DATABASE_URL must point at a persistent location in production.")
