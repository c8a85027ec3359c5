from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_TIMEZONE: str = "UTC"
    WORKING_HOURS_START: str = "09:00"
    WORKING_HOURS_END: str = "24:00"

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    STORE_PATH: str = "./data/bookings.json"

    MAX_SERIES_OCCURRENCES: int = 52


settings = Settings()
