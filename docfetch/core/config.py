import os

class Settings:
    # Database
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "data/docfetch.sqlite")

    # Fetching
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "15"))
    USER_AGENT: str = os.getenv("USER_AGENT", "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36")
    ALLOWED_URL_MARKER: str = os.getenv("ALLOWED_URL_MARKER", "docs.google.com")

    # Refresh schedule
    REFRESH_INTERVAL_SECONDS: int = int(os.getenv("REFRESH_INTERVAL_SECONDS", "1800"))
    FETCH_PAUSE_SECONDS: float = float(os.getenv("FETCH_PAUSE_SECONDS", "0"))
    SCHEDULER_ENABLED: bool = os.getenv("SCHEDULER_ENABLED", "1").lower() in ("1", "true", "yes")

    # Timestamps are stored as wall-clock time in this zone
    TIMEZONE: str = os.getenv("TIMEZONE", "UTC")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
