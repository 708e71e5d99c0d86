"""
Application configuration.
All values come from environment variables; credentials have no defaults.

Required Environment Variables:
    IMAGE_API_KEY: Bearer credential for the image-editing API
    AUTH_PASSWORD: Shared password for the generation pages
"""
import os
from pathlib import Path
from typing import List


class Settings:
    """Runtime settings read from the environment."""

    ENV_API_KEY = "IMAGE_API_KEY"
    ENV_BASE_URL = "IMAGE_API_BASE_URL"
    ENV_MODEL = "IMAGE_MODEL"
    ENV_SIZE = "IMAGE_SIZE"
    ENV_AUTH_PASSWORD = "AUTH_PASSWORD"
    ENV_DATA_DIR = "DATA_DIR"
    ENV_CONTENT_DIR = "CONTENT_DIR"
    ENV_GENERATION_TIMEOUT = "GENERATION_TIMEOUT"
    ENV_DOWNLOAD_TIMEOUT = "DOWNLOAD_TIMEOUT"
    ENV_PRODUCTION = "PRODUCTION"
    ENV_LOG_LEVEL = "LOG_LEVEL"

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-image-1"
    DEFAULT_SIZE = "1024x1024"
    DEFAULT_DATA_DIR = "data/generated"
    DEFAULT_CONTENT_DIR = "data/content/generated-images"
    DEFAULT_GENERATION_TIMEOUT = 180
    DEFAULT_DOWNLOAD_TIMEOUT = 60

    def __init__(self):
        self.api_key = os.getenv(self.ENV_API_KEY)
        self.base_url = os.getenv(self.ENV_BASE_URL, self.DEFAULT_BASE_URL).rstrip("/")
        self.model = os.getenv(self.ENV_MODEL, self.DEFAULT_MODEL)
        self.size = os.getenv(self.ENV_SIZE, self.DEFAULT_SIZE)
        self.auth_password = os.getenv(self.ENV_AUTH_PASSWORD)
        self.data_dir = Path(os.getenv(self.ENV_DATA_DIR, self.DEFAULT_DATA_DIR))
        self.content_dir = Path(os.getenv(self.ENV_CONTENT_DIR, self.DEFAULT_CONTENT_DIR))
        self.generation_timeout = int(
            os.getenv(self.ENV_GENERATION_TIMEOUT, self.DEFAULT_GENERATION_TIMEOUT)
        )
        self.download_timeout = int(
            os.getenv(self.ENV_DOWNLOAD_TIMEOUT, self.DEFAULT_DOWNLOAD_TIMEOUT)
        )
        self.production = os.getenv(self.ENV_PRODUCTION, "false").strip().lower() in ("1", "true", "yes", "on")
        self.log_level = os.getenv(self.ENV_LOG_LEVEL, "INFO").upper()

    @property
    def metadata_dir(self) -> Path:
        """Legacy metadata mirror, kept under the artifact root."""
        return self.data_dir / "metadata"

    def is_configured(self) -> bool:
        return not self.get_missing_config()

    def get_missing_config(self) -> List[str]:
        """Return list of missing configuration variables."""
        missing = []
        if not self.api_key:
            missing.append(self.ENV_API_KEY)
        if not self.auth_password:
            missing.append(self.ENV_AUTH_PASSWORD)
        return missing

    def validate(self) -> None:
        """
        Fail fast when required credentials are absent.

        Raises:
            ValueError: If any required variable is missing
        """
        missing = self.get_missing_config()
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
