# tests/test_config.py
import pytest
from pydantic import ValidationError

from mediafolders.config import Settings


@pytest.fixture
def base_cloudinary_settings_data():
    """Provides a base dictionary for valid Cloudinary settings."""
    return {
        "STORAGE_PROVIDER": "cloudinary",
        "CLOUDINARY_CLOUD_NAME": "demo",
        "CLOUDINARY_API_KEY": "key",
        "CLOUDINARY_API_SECRET": "secret",
    }


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keeps the developer's environment and .env file out of these tests."""
    monkeypatch.chdir(tmp_path)
    for key in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET",
                "STORAGE_PROVIDER", "BATCH_DELETE_SIZE", "CACHE_TTL_SECONDS", "ROOT_ALIAS"):
        monkeypatch.delenv(key, raising=False)


def test_settings_defaults(base_cloudinary_settings_data):
    settings = Settings(**base_cloudinary_settings_data)

    assert settings.CACHE_TTL_SECONDS == 300
    assert settings.BATCH_DELETE_SIZE == 100
    assert settings.ROOT_ALIAS == "home"
    assert settings.DELETE_CONCURRENCY == 1
    assert settings.LOG_FILE.name == "app.log"


def test_settings_read_from_environment(monkeypatch, base_cloudinary_settings_data):
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("ROOT_ALIAS", "root")

    settings = Settings(**base_cloudinary_settings_data)

    assert settings.CACHE_TTL_SECONDS == 60
    assert settings.ROOT_ALIAS == "root"


def test_settings_without_credentials_are_allowed():
    """The SDK can still pick up CLOUDINARY_URL on its own."""
    settings = Settings(STORAGE_PROVIDER="cloudinary")
    assert settings.CLOUDINARY_CLOUD_NAME is None


def test_settings_partial_credentials_raise_error(base_cloudinary_settings_data):
    del base_cloudinary_settings_data["CLOUDINARY_API_SECRET"]

    with pytest.raises(ValueError, match="CLOUDINARY_API_SECRET"):
        Settings(**base_cloudinary_settings_data)


def test_settings_invalid_provider(base_cloudinary_settings_data):
    base_cloudinary_settings_data["STORAGE_PROVIDER"] = "dropbox"

    with pytest.raises(ValueError, match="Invalid STORAGE_PROVIDER"):
        Settings(**base_cloudinary_settings_data)


def test_batch_size_cannot_exceed_service_limit(base_cloudinary_settings_data):
    base_cloudinary_settings_data["BATCH_DELETE_SIZE"] = 250

    with pytest.raises(ValidationError):
        Settings(**base_cloudinary_settings_data)
