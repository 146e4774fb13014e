from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BACKEND_BASE_URL: str | None = None
    BACKEND_API_TOKEN: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 30.0

    BUSINESS_TIMEZONE: str = "Europe/Istanbul"
    SLOT_START_HOUR: int = 9
    SLOT_END_HOUR: int = 18
    SLOT_MINUTES: int = 30

    PHOTOS_PER_CATEGORY: int = 4
    DEFAULT_TRAVEL_FEE: Decimal = Decimal("0")


settings = Settings()
