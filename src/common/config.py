"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
CONTENT_DIR = PROJECT_ROOT / "content"
BLOG_CONTENT_DIR = CONTENT_DIR / "blog"
DATA_DIR = PROJECT_ROOT / "data"
STATIC_INDEX_PATH = DATA_DIR / "static" / "blog.json"
GENERATED_IMAGES_DIR = PROJECT_ROOT / "public" / "generated" / "images"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(*names: str) -> bool | None:
    """Read the first set environment variable among names as a boolean flag."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value.strip().lower() == "true"
    return None


class APISettings(BaseModel):
    """Remote content API settings."""
    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = 30.0
    max_retries: int = 3


class ContentSettings(BaseModel):
    """Content resolution settings."""
    enable_api_content: bool = False
    default_limit: int = 100
    content_dir: str = str(CONTENT_DIR)
    collection: str = "blog"
    static_index_path: str = str(STATIC_INDEX_PATH)

    @property
    def collection_dir(self) -> Path:
        """Directory holding the MDX files of the configured collection."""
        return Path(self.content_dir) / self.collection


class ImageSettings(BaseModel):
    """Image generation settings for the content-to-image pipeline."""
    openai_model: str = "gpt-image-1"
    size: str = "1536x1024"
    output_dir: str = str(GENERATED_IMAGES_DIR)
    public_prefix: str = "/generated/images/"
    max_sections: int = 3
    max_retries: int = 2
    enhancement_model: str = "gpt-4o"
    enhancement_max_iterations: int = 3
    enhancement_quality_threshold: int = 75


class Settings(BaseModel):
    """Top-level application settings."""
    api: APISettings = Field(default_factory=APISettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)
    log_level: str = "INFO"

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables override values from the file.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        instance = cls(**data)
        instance.apply_env_overrides()
        return instance

    def apply_env_overrides(self) -> None:
        """Apply overrides from the process environment."""
        flag = _env_flag("ENABLE_API_CONTENT", "NEXT_PUBLIC_ENABLE_API_CONTENT")
        if flag is not None:
            self.content.enable_api_content = flag
        if url := os.getenv("API_BASE_URL") or os.getenv("NEXT_PUBLIC_API_BASE_URL"):
            self.api.base_url = url
        if timeout := os.getenv("API_TIMEOUT"):
            self.api.timeout_seconds = float(timeout)
        if content_dir := os.getenv("CONTENT_DIR"):
            self.content.content_dir = content_dir
        if index_path := os.getenv("STATIC_INDEX_PATH"):
            self.content.static_index_path = index_path
        if level := os.getenv("LOG_LEVEL"):
            self.log_level = level.upper()


def get_supabase_credentials() -> tuple[str, str]:
    """Get Supabase project URL and anon key from environment."""
    url = os.getenv("SUPABASE_URL", "") or os.getenv("NEXT_PUBLIC_SUPABASE_URL", "")
    key = os.getenv("SUPABASE_ANON_KEY", "") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "")
    if not url or not key:
        raise ValueError("SUPABASE_URL / SUPABASE_ANON_KEY not set in environment")
    return url, key


def get_openai_api_key() -> str:
    """Get OpenAI API key from environment."""
    key = os.getenv("OPENAI_API_KEY", "")
    if not key:
        raise ValueError("OPENAI_API_KEY not set in environment")
    return key


# Singleton settings instance
settings = Settings.load()
