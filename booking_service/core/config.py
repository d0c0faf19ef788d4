from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # "auto" picks the JSON store for dev/local and MongoDB elsewhere
    STORE_PROVIDER: str = "auto"
    JSON_STORE_DIR: str = "./data/bookings"

    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "barbershop_bookings"
    MONGO_TIMEOUT_MS: int = Field(5000, gt=0)

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    BUSINESS_TIMEZONE: str = "UTC"
    WORK_START_HOUR: int = Field(9, ge=0, le=23)
    WORK_END_HOUR: int = Field(17, ge=0, le=23)
    SLOT_MINUTES: int = Field(30, gt=0)

    @model_validator(mode="after")
    def validate_working_hours(self):
        if self.WORK_START_HOUR >= self.WORK_END_HOUR:
            raise ValueError("WORK_START_HOUR must be before WORK_END_HOUR")
        return self


settings = Settings()
