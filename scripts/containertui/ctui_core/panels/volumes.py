"""Volumes panel."""

from __future__ import annotations

from rich.text import Text

from ctui_core.collectors import loader_for
from ctui_core.collectors.volumes import collect
from ctui_core.context import AppContext
from ctui_core.formatting import format_created
from ctui_core.models import VOLUMES, VolumeItem
from ctui_core.panels import ResourcePanel


class VolumesPanel(ResourcePanel):
    kind = VOLUMES
    title = "Volumes"
    noun = "volume"

    def __init__(self, context: AppContext) -> None:
        super().__init__(context, loader_for(collect, context.engine))

    def label_for(self, item: VolumeItem) -> str:
        return f"volume {item.volume.name}"

    def remove(self, identity: str) -> None:
        self.engine.remove_volume(identity)

    def detail_text(self, item: VolumeItem) -> Text:
        volume = item.volume
        theme = self.context.theme
        text = Text()
        text.append(f"{volume.name}\n\n", style=f"bold {theme.primary}")
        text.append(f"Driver: {volume.driver}\n")
        text.append(f"Mountpoint: {volume.mountpoint}\n")
        text.append(f"Scope: {volume.scope}\n")
        text.append(f"Created: {format_created(volume.created)}")
        if volume.labels:
            text.append("\n\nLabels\n", style=f"bold underline {theme.primary}")
            text.append("\n".join(f"{key}={value}" for key, value in sorted(volume.labels.items())))
        return text
