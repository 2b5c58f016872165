import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """
    Process-wide settings, read once from the environment (.env supported).
    """

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./healthtrack.db")
        self.timezone_name = os.getenv("APP_TIMEZONE", "UTC")
        self.cache_maxsize = int(os.getenv("CACHE_MAXSIZE", "256"))
        self.cache_ttl_seconds = int(os.getenv("CACHE_TTL_SECONDS", "60"))
        self.reject_duplicate_dose_logs = _flag("REJECT_DUPLICATE_DOSE_LOGS")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.jwt_secret_key = os.getenv("JWT_SECRET_KEY", "super-secret")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_expires_minutes = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))

        # "today" and appointment wall-clock times are both read in this zone
        try:
            self.tz = ZoneInfo(self.timezone_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"APP_TIMEZONE '{self.timezone_name}' is not a known time zone")


settings = Settings()
