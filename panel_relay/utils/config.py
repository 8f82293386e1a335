from pathlib import Path
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_SCRIPT_MODEL = "gemini-2.5-flash-preview-05-20"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"

class Settings(BaseSettings):
    """Relay configuration, read once per process from the environment or .env."""

    # Credentials are optional here; a missing key is reported per request.
    google_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    gemini_api_base: str = DEFAULT_API_BASE
    script_model: str = DEFAULT_SCRIPT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    request_timeout: Optional[float] = None

    log_level: str = 'INFO'
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    @field_validator('google_api_key', 'gemini_api_key')
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator('gemini_api_base')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    @field_validator('log_file')
    @classmethod
    def create_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v:
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def api_key(self) -> Optional[str]:
        """GOOGLE_API_KEY, falling back to GEMINI_API_KEY."""
        return self.google_api_key or self.gemini_api_key

    def model_for(self, target: str) -> str:
        """Return the model id serving the given target."""
        if target == 'script':
            return self.script_model
        if target == 'image':
            return self.image_model
        raise ValueError(f"No model configured for target: {target}")

@lru_cache()
def get_settings() -> Settings:
    return Settings()

__all__ = ['Settings', 'get_settings']
