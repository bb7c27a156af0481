from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB settings
    MONGO_URI: str = "mongodb://localhost:27017/lumina"
    MONGO_DB_NAME: Optional[str] = None

    # JWT settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Verification code settings
    CODE_STORE_BACKEND: Literal["mongo", "memory"] = "mongo"
    CODE_TTL_MINUTES: int = 5
    CODE_COOLDOWN_SECONDS: int = 60
    CODE_SWEEP_INTERVAL_MINUTES: int = 10
    # Echo issued codes back to the caller (local demos and e2e tests only)
    EXPOSE_VERIFICATION_CODE: bool = False

    # Mail settings, all optional: without them codes are logged instead of mailed
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    MAIL_FROM_NAME: str = "Lumina"
    MAIL_PORT: int = 587
    MAIL_SERVER: Optional[str] = None
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_BRAND_NAME: str = "Lumina"

    # SMS gateway settings
    SMS_GATEWAY_URL: Optional[str] = None
    SMS_API_TOKEN: Optional[str] = None
    SMS_TIMEOUT_SECONDS: float = 10.0

    # Project settings
    PROJECT_NAME: str = "Lumina API"
    API_PREFIX: str = "/api"
    FRONTEND_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Environment (development, production, testing)
    ENVIRONMENT: str = "development"

    @property
    def frontend_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGINS.split(",") if origin.strip()]

    @property
    def mail_configured(self) -> bool:
        return bool(self.MAIL_SERVER and self.MAIL_USERNAME and self.MAIL_PASSWORD and self.MAIL_FROM)

    # Load environment variables from .env file
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Instantiate settings
settings = Settings()
