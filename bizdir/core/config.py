from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True)

    # App Settings
    APP_NAME: str = "Business Directory API"
    PROJECT_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: str = "*"  # Comma-separated string or "*"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT_DEFAULT: str = "120/minute"

    DATABASE_URL: str
    CACHE_TYPE: str = "inmemory"  # inmemory or redis
    REDIS_URL: str | None = None
    PLACES_CACHE_DURATION: int = 3600  # seconds

    # Places provider
    GOOGLE_PLACES_API_KEY: str = ""
    PLACES_API_BASE_URL: str = "https://places.googleapis.com/v1"
    PLACES_LEGACY_BASE_URL: str = "https://maps.googleapis.com/maps/api/place"
    PLACES_HTTP_TIMEOUT: float = 8.0
    PLACES_SEARCH_PAGE_SIZE: int = 10
    # low_lat,low_lng,high_lat,high_lng (Kigali); "none" disables the restriction.
    # Empty env values are ignored, so an empty string keeps this default.
    PLACES_SEARCH_RECTANGLE: str = "-1.98,30.03,-1.90,30.12"

    # Nearby import
    IMPORT_DEFAULT_RADIUS: int = 5000
    IMPORT_DEFAULT_TYPE: str = "establishment"
    IMPORT_DEFAULT_CATEGORY_ID: int = 1

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Parse ALLOWED_ORIGINS
    @property
    def allowed_origins_list(self) -> List[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def search_rectangle(self) -> Tuple[float, float, float, float] | None:
        if self.PLACES_SEARCH_RECTANGLE.strip().lower() in ("", "none", "off"):
            return None
        low_lat, low_lng, high_lat, high_lng = (
            float(part) for part in self.PLACES_SEARCH_RECTANGLE.split(",")
        )
        return low_lat, low_lng, high_lat, high_lng

    @property
    def cache_settings_valid(self) -> bool:
        if self.PLACES_CACHE_DURATION <= 0:
            return False
        if self.CACHE_TYPE.lower() == "redis":
            return bool(self.REDIS_URL)
        return self.CACHE_TYPE.lower() == "inmemory"


settings = Settings()

# Validate cache settings on import
if not settings.cache_settings_valid:
    raise ValueError(
        "CACHE_TYPE must be 'inmemory' or 'redis' (redis requires REDIS_URL) "
        "and PLACES_CACHE_DURATION must be positive."
    )
