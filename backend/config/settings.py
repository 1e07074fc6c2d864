from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List, Literal
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Meme Lab API"
    VERSION: str = "1.0.0"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Provider profile: exactly one is active per deployment
    PROVIDER: Literal["openrouter", "gemini"] = "openrouter"

    # OpenRouter
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_REFERER: Optional[str] = None
    OPENROUTER_TITLE: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = "google/gemini-2.5-flash-image"

    # Google Generative Language API
    GEMINI_API_KEY: Optional[str] = None
    GOOGLE_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-2.5-flash-image"

    # Source image
    DEFAULT_IMAGE_PATH: str = str(BACKEND_DIR / "assets" / "kameraboy.png")
    DEFAULT_IMAGE_URL: Optional[str] = None  # takes precedence over DEFAULT_IMAGE_PATH
    ACCEPT_CLIENT_IMAGE: bool = True

    # Prompting
    DEFAULT_PROMPT: str = "Create a bold, playful variation of this photo."
    APPEND_SAFETY_TO_DEFAULT: bool = True

    # Processing Configuration
    PROVIDER_TIMEOUT_SECONDS: float = 120.0
    MAX_CONCURRENT_PROVIDER_CALLS: int = 5

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

# Global settings instance
settings = Settings()
