# Common utilities and shared modules
"""
Shared components used by the api, content and agents packages:
- Project configuration (paths, Settings, credentials)
- Logging configuration
"""

from .config import (
    BLOG_CONTENT_DIR,
    CONTENT_DIR,
    DATA_DIR,
    GENERATED_IMAGES_DIR,
    PROJECT_ROOT,
    STATIC_INDEX_PATH,
    Settings,
    settings,
)
from .logging import setup_logging

__all__ = [
    "BLOG_CONTENT_DIR",
    "CONTENT_DIR",
    "DATA_DIR",
    "GENERATED_IMAGES_DIR",
    "PROJECT_ROOT",
    "STATIC_INDEX_PATH",
    "Settings",
    "settings",
    "setup_logging",
]
