from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(7, alias="REFRESH_TOKEN_EXPIRE_DAYS")

    # Admin may act at any approval stage when enabled
    admin_override_enabled: bool = Field(True, alias="ADMIN_OVERRIDE_ENABLED")
    # Students need a 100% complete profile before submitting outings
    require_complete_profile: bool = Field(True, alias="REQUIRE_COMPLETE_PROFILE")

    bootstrap_admin_email: Optional[str] = Field(None, alias="BOOTSTRAP_ADMIN_EMAIL")
    bootstrap_admin_password: Optional[str] = Field(None, alias="BOOTSTRAP_ADMIN_PASSWORD")
    # Disable once the administrator exists to stop password resets over HTTP
    bootstrap_endpoint_enabled: bool = Field(True, alias="BOOTSTRAP_ENDPOINT_ENABLED")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
