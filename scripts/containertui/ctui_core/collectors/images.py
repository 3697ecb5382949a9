"""Image collector."""

from __future__ import annotations

from ctui_core.engine import EngineClient
from ctui_core.models import ImageItem


def collect(engine: EngineClient) -> list[ImageItem]:
    images = engine.list_images()
    # tagged images by name, untagged last
    images.sort(key=lambda image: (not image.repo_tags, image.repo_tags[:1]))
    return [ImageItem(image) for image in images]
