"""Section image generation.

ImageGenerator is the seam the pipeline depends on; OpenAIImageGenerator is
the production implementation. Generated files are written under the
public generated-images directory and returned as site-relative URLs.
"""

from __future__ import annotations

import base64
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from src.common.config import Settings, get_openai_api_key, settings as default_settings

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^a-z0-9\-]+")


@dataclass
class ImageGenerationOptions:
    filename: str = "image"
    size: Optional[str] = None
    quality: Optional[str] = None


@dataclass
class ImageGenerationResult:
    success: bool
    image_url: Optional[str] = None
    processing_time: float = 0.0  # seconds
    error: Optional[str] = None


IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")


def list_images(images_dir: Path | None = None, config: Settings | None = None) -> list[dict]:
    """Generated images, most recently modified first.

    Each entry carries filename, public url, size (bytes) and created /
    modified times (epoch milliseconds). A missing directory is empty.
    """
    config = config or default_settings
    images_dir = Path(images_dir or config.images.output_dir)
    if not images_dir.exists():
        return []

    images = []
    for path in images_dir.iterdir():
        if not path.is_file() or path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        stat = path.stat()
        images.append(
            {
                "filename": path.name,
                "url": config.images.public_prefix + path.name,
                "size": stat.st_size,
                "created": int(stat.st_ctime * 1000),
                "modified": int(stat.st_mtime * 1000),
            }
        )
    return sorted(images, key=lambda image: image["modified"], reverse=True)


def safe_filename(name: str) -> str:
    """Lowercase, dash-separated file stem."""
    stem = _UNSAFE_FILENAME_RE.sub("-", re.sub(r"\s+", "-", name.lower()))
    return stem.strip("-") or "image"


class ImageGenerator(ABC):
    """Turns a natural-language intent into a stored image."""

    @abstractmethod
    def generate(
        self, intent: str, options: ImageGenerationOptions | None = None
    ) -> ImageGenerationResult:
        ...


class OpenAIImageGenerator(ImageGenerator):
    """Image generation through the OpenAI Images API.

    Usage:
        generator = OpenAIImageGenerator()
        result = generator.generate(intent, ImageGenerationOptions(filename="post-intro"))
    """

    def __init__(
        self,
        api_key: str | None = None,
        config: Settings | None = None,
        output_dir: Path | None = None,
    ) -> None:
        self.config = config or default_settings
        self.api_key = api_key
        self.output_dir = Path(output_dir or self.config.images.output_dir)
        self._client = None

    def _get_client(self):
        """Lazy-initialize the OpenAI client."""
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key or get_openai_api_key())
        return self._client

    def generate(
        self, intent: str, options: ImageGenerationOptions | None = None
    ) -> ImageGenerationResult:
        options = options or ImageGenerationOptions()
        images = self.config.images
        client = self._get_client()
        start = time.monotonic()
        last_error = ""

        for attempt in range(images.max_retries + 1):
            try:
                params = {
                    "model": images.openai_model,
                    "prompt": intent,
                    "size": options.size or images.size,
                    "n": 1,
                }
                if options.quality:
                    params["quality"] = options.quality
                response = client.images.generate(**params)
                image_url = self._store(response.data[0], options.filename)
                elapsed = time.monotonic() - start
                logger.info("Generated image %s in %.1fs", image_url, elapsed)
                return ImageGenerationResult(
                    success=True, image_url=image_url, processing_time=elapsed
                )
            except Exception as e:
                last_error = str(e)
                logger.warning(
                    "Image generation attempt %d/%d failed: %s",
                    attempt + 1, images.max_retries + 1, e,
                )
                if attempt < images.max_retries:
                    time.sleep(min(2 ** attempt, 10))

        return ImageGenerationResult(
            success=False,
            processing_time=time.monotonic() - start,
            error=last_error or "Image generation failed",
        )

    def _store(self, image, filename: str) -> str:
        """Write the returned image to disk; return its public URL."""
        if getattr(image, "b64_json", None):
            payload = base64.b64decode(image.b64_json)
        elif getattr(image, "url", None):
            resp = requests.get(image.url, timeout=60)
            resp.raise_for_status()
            payload = resp.content
        else:
            raise RuntimeError("Image response contained neither data nor URL")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        name = f"{safe_filename(filename)}-{int(time.time() * 1000)}.png"
        (self.output_dir / name).write_bytes(payload)
        return self.config.images.public_prefix + name
