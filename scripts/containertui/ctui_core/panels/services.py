"""Compose services panel."""

from __future__ import annotations

from rich.text import Text

from ctui_core.collectors import loader_for
from ctui_core.collectors.services import collect, compose_files
from ctui_core.context import AppContext
from ctui_core.events import Command, DetailLoaded
from ctui_core.models import SERVICES, Service, ServiceItem
from ctui_core.panels import ResourcePanel


class ServicesPanel(ResourcePanel):
    kind = SERVICES
    title = "Services"
    noun = "service"
    removable = False
    prunable = False

    def __init__(self, context: AppContext) -> None:
        super().__init__(context, loader_for(collect, context.engine))

    def _header(self, service: Service) -> Text:
        theme = self.context.theme
        text = Text()
        text.append(f"{service.project} / {service.name}\n\n", style=f"bold {theme.primary}")
        text.append(f"Replicas: {service.replicas}\n")
        text.append("Containers:\n")
        for container in service.containers:
            color = theme.success if container.state == "running" else theme.muted
            text.append(f"  {container.name} ", style=theme.text)
            text.append(f"({container.state})\n", style=color)
        return text

    def describe(self, item: ServiceItem) -> list[Command]:
        service = item.service
        kind = self.kind
        self.view.set_content(self._header(service))

        def read() -> DetailLoaded:
            files = []
            for path in compose_files(service):
                try:
                    files.append((str(path), path.read_text()))
                except OSError as exc:
                    return DetailLoaded(kind, service.key, error=f"{path}: {exc.strerror or exc}")
            return DetailLoaded(kind, service.key, content=(service, files))

        return [read]

    def render_detail(self, content) -> Text:
        service, files = content
        theme = self.context.theme
        text = self._header(service)
        if not files:
            text.append("\nNo compose file found.", style=theme.muted)
        for path, body in files:
            text.append(f"\n{path}\n", style=f"bold underline {theme.primary}")
            text.append(body)
        return text
