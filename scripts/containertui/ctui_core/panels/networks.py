"""Networks panel."""

from __future__ import annotations

from rich.text import Text

from ctui_core.collectors import loader_for
from ctui_core.collectors.networks import collect
from ctui_core.context import AppContext
from ctui_core.formatting import join_or_none
from ctui_core.models import NETWORKS, NetworkItem
from ctui_core.panels import ResourcePanel


class NetworksPanel(ResourcePanel):
    kind = NETWORKS
    title = "Networks"
    noun = "network"

    def __init__(self, context: AppContext) -> None:
        super().__init__(context, loader_for(collect, context.engine))

    def label_for(self, item: NetworkItem) -> str:
        return f"network {item.network.name}"

    def remove(self, identity: str) -> None:
        self.engine.remove_network(identity)

    def detail_text(self, item: NetworkItem) -> Text:
        network = item.network
        theme = self.context.theme
        text = Text()
        text.append(f"{network.name}\n\n", style=f"bold {theme.primary}")
        text.append(f"ID: {network.id}\n")
        text.append(f"Driver: {network.driver}\n")
        text.append(f"Scope: {network.scope}\n")
        text.append(f"Internal: {'yes' if network.internal else 'no'}\n")
        text.append(f"Containers: {join_or_none(network.containers)}")
        return text
