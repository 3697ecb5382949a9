"""Images panel."""

from __future__ import annotations

from rich.text import Text

from ctui_core.collectors import loader_for
from ctui_core.collectors.images import collect
from ctui_core.context import AppContext
from ctui_core.formatting import format_created, human_bytes, join_or_none
from ctui_core.models import IMAGES, ImageItem
from ctui_core.panels import ResourcePanel


class ImagesPanel(ResourcePanel):
    kind = IMAGES
    title = "Images"
    noun = "image"

    def __init__(self, context: AppContext) -> None:
        super().__init__(context, loader_for(collect, context.engine))

    def remove(self, identity: str) -> None:
        self.engine.remove_image(identity)

    def detail_text(self, item: ImageItem) -> Text:
        image = item.image
        theme = self.context.theme
        text = Text()
        text.append(f"{image.repo_tags[0] if image.repo_tags else '<none>'}\n\n", style=f"bold {theme.primary}")
        text.append(f"ID: {image.id}\n")
        text.append(f"Tags: {join_or_none(image.repo_tags)}\n")
        text.append(f"Size: {human_bytes(image.size)}\n")
        text.append(f"Created: {format_created(image.created)}")
        return text
