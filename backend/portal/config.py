# backend/portal/config.py
from typing import List, Literal
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./portal.db"  # Default if not in .env

    ENVIRONMENT: Literal["development", "production"] = "production"

    # Storage Paths
    STORAGE_PATH: Path = Path("storage")
    UPLOADS_PATH: Path | None = None  # Will be set based on STORAGE_PATH
    LOGS_PATH: Path | None = None  # Will be set based on STORAGE_PATH
    MEDIA_URL_PREFIX: str = "/uploads"

    # Attachment store
    STORAGE_BACKEND: Literal["local", "cloudinary"] = "local"
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    IMAGE_MAX_BYTES: int = 6 * 1024 * 1024
    IMAGE_MAX_FILES: int = 10
    DOCUMENT_MAX_BYTES: int = 20 * 1024 * 1024

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    AUTH_COOKIE_NAME: str = "portal_token"
    BCRYPT_ROUNDS: int = 12

    # Behaviour switches
    INVALID_CATEGORY_POLICY: Literal["default", "reject"] = "default"
    PASSWORD_RESET_RETURNS_PLAINTEXT: bool = True

    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context) -> None:
        """Post initialization hook to set derived paths"""
        if isinstance(self.STORAGE_PATH, str):
            self.STORAGE_PATH = Path(self.STORAGE_PATH)

        self.UPLOADS_PATH = Path(self.UPLOADS_PATH) if self.UPLOADS_PATH else self.STORAGE_PATH / "uploads"
        self.LOGS_PATH = Path(self.LOGS_PATH) if self.LOGS_PATH else self.STORAGE_PATH / "logs"

        self.create_storage_dirs()

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    def create_storage_dirs(self) -> None:
        """Create necessary storage directories if they don't exist"""
        for path in [self.STORAGE_PATH, self.UPLOADS_PATH, self.LOGS_PATH]:
            path.mkdir(parents=True, exist_ok=True)


settings = Settings()
