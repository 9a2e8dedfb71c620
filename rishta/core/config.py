from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()


def _normalize_database_url(url: str) -> str:
    # Normalize postgres:// -> postgresql:// for SQLAlchemy
    if url.startswith("postgres://"):
        return "postgresql://" + url[10:]
    return url


class Settings(BaseSettings):
    # Database Configuration
    DATABASE_URL: str = _normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./rishta.db"))

    # Authentication Configuration
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-this-to-a-secure-secret-key-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

    # Admin bootstrap (created or promoted on startup when both are set)
    ADMIN_EMAIL: Optional[str] = os.getenv("ADMIN_EMAIL") or None
    ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD") or None

    # Uploads
    UPLOADS_DIR: Optional[str] = os.getenv("UPLOADS_DIR") or None
    PUBLIC_API_URL: str = os.getenv("PUBLIC_API_URL", "")
    MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))  # 5MB
    MAX_PROFILE_IMAGES: int = int(os.getenv("MAX_PROFILE_IMAGES", "4"))

    # Registration: comma separated domains refused on top of the bundled disposable list
    BLOCKED_EMAIL_DOMAINS: str = os.getenv("BLOCKED_EMAIL_DOMAINS", "")

    # API Configuration
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")  # comma separated
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, value):
        # Render/Heroku hand out postgres:// URLs
        return _normalize_database_url(value) if isinstance(value, str) else value

    model_config = SettingsConfigDict(case_sensitive=True)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def blocked_email_domains(self) -> List[str]:
        return [d.strip().lower() for d in self.BLOCKED_EMAIL_DOMAINS.split(",") if d.strip()]


settings = Settings()
