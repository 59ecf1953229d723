from pathlib import Path
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Centralized application configuration with type validation.
    Automatically reads variables from the environment and the .env file.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- General Settings ---
    STORAGE_PROVIDER: str = "cloudinary"
    LOG_LEVEL: str = "INFO"

    # --- Cloudinary Settings ---
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None

    # --- Folder Layout ---
    # Some assets live directly under their folder path, others under this root token.
    ROOT_ALIAS: str = "home"
    DEFAULT_FOLDER: str = "hitam_ai"

    # --- Remote Service Limits ---
    BATCH_DELETE_SIZE: int = Field(100, ge=1, le=100)
    SEARCH_PAGE_SIZE: int = Field(500, ge=1, le=500)
    # Workers for the single-item delete fallback within one batch chunk. 1 = sequential.
    DELETE_CONCURRENCY: int = Field(1, ge=1, le=100)

    # --- Response Cache ---
    CACHE_TTL_SECONDS: int = Field(300, ge=0)

    # --- Constants and Computed Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent

    @model_validator(mode="before")
    def validate_storage_provider_settings(cls, values):
        provider = values.get("STORAGE_PROVIDER")
        if not provider:
            # Let BaseSettings apply the default.
            return values

        if provider == "cloudinary":
            required_keys = ["CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"]
            provided = [key for key in required_keys if values.get(key) and str(values.get(key)).strip()]
            # Credentials are all-or-nothing: the SDK can also read CLOUDINARY_URL on its own.
            if provided and len(provided) != len(required_keys):
                missing = ", ".join(sorted(set(required_keys) - set(provided)))
                raise ValueError(f"{missing} required when STORAGE_PROVIDER is 'cloudinary'")
        else:
            raise ValueError("Invalid STORAGE_PROVIDER. Must be 'cloudinary'.")

        return values

    @property
    def LOG_FILE(self) -> Path:
        return self.BASE_DIR / "app.log"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    return Settings()
