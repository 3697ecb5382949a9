"""In-memory engine and helpers shared by the tests."""

from __future__ import annotations

import io
from typing import Any

from rich.console import Console

from ctui_core.config import Config
from ctui_core.context import AppContext
from ctui_core.engine import EngineError, LogStream, group_services
from ctui_core.models import (
    CONTAINERS,
    IMAGES,
    NETWORKS,
    SERVICES,
    VOLUMES,
    Container,
    ContainerStats,
    Image,
    Network,
    Volume,
)
from ctui_core.theme import Theme

# commands that only sleep before producing their event
SLEEPING_COMMANDS = ("expire", "tick")

MB = 1024 * 1024


class ClosableChunks:
    def __init__(self, chunks: list[Any]) -> None:
        self._chunks = iter(chunks)
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._chunks)

    def close(self) -> None:
        self.closed = True


class FakeEngine:
    def __init__(
        self,
        containers: list[Container] | None = None,
        images: list[Image] | None = None,
        volumes: list[Volume] | None = None,
        networks: list[Network] | None = None,
    ) -> None:
        self.containers = list(containers or [])
        self.images = list(images or [])
        self.volumes = list(volumes or [])
        self.networks = list(networks or [])
        self.users: dict[tuple[str, str], list[str]] = {}
        self.failures: dict[str, str] = {}
        self.log_chunks: list[Any] = []
        self.stats: dict[str, ContainerStats] = {}
        self.streams: list[ClosableChunks] = []
        self.calls: list[tuple] = []

    def calls_to(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise EngineError(self.failures[name])

    def _container(self, container_id: str) -> Container:
        for candidate in self.containers:
            if candidate.id == container_id:
                return candidate
        raise EngineError(f"No such container: {container_id}")

    def list_items(self, kind: str) -> list[Any]:
        return {
            CONTAINERS: self.list_containers,
            IMAGES: self.list_images,
            VOLUMES: self.list_volumes,
            NETWORKS: self.list_networks,
            SERVICES: self.list_services,
        }[kind]()

    def list_containers(self) -> list[Container]:
        self._call("list_containers")
        return list(self.containers)

    def list_images(self) -> list[Image]:
        self._call("list_images")
        return list(self.images)

    def list_volumes(self) -> list[Volume]:
        self._call("list_volumes")
        return list(self.volumes)

    def list_networks(self) -> list[Network]:
        self._call("list_networks")
        return list(self.networks)

    def list_services(self) -> list:
        self._call("list_services")
        return group_services(list(self.containers))

    def set_state(self, ids: list[str], action: str) -> None:
        self._call("set_state", tuple(ids), action)
        if action == "remove":
            self.containers = [c for c in self.containers if c.id not in ids]

    def remove_image(self, image_id: str) -> None:
        self._call("remove_image", image_id)
        self.images = [image for image in self.images if image.id != image_id]

    def remove_volume(self, name: str) -> None:
        self._call("remove_volume", name)
        self.volumes = [volume for volume in self.volumes if volume.name != name]

    def remove_network(self, network_id: str) -> None:
        self._call("remove_network", network_id)
        self.networks = [network for network in self.networks if network.id != network_id]

    def used_by(self, kind: str, identity: str) -> list[str]:
        self._call("used_by", kind, identity)
        return list(self.users.get((kind, identity), []))

    def prune(self, kind: str) -> int:
        self._call("prune", kind)
        return 2048

    def inspect_container(self, container_id: str) -> dict[str, Any]:
        self._call("inspect_container", container_id)
        container = self._container(container_id)
        return {
            "Id": container.id,
            "Name": f"/{container.name}",
            "Config": {"Image": container.image, "Cmd": ["sleep", "infinity"], "Env": ["A=1"]},
            "State": {"Status": container.state, "Running": container.state == "running"},
            "Mounts": [],
            "NetworkSettings": {"Ports": {}},
        }

    def container_stats(self, container_id: str) -> ContainerStats:
        self._call("container_stats", container_id)
        self._container(container_id)
        return self.stats.get(container_id, ContainerStats(12.5, 50 * MB, 1024 * MB))

    def stream_logs(self, container_id: str) -> LogStream:
        self._call("stream_logs", container_id)
        chunks = ClosableChunks(list(self.log_chunks))
        self.streams.append(chunks)
        return LogStream(chunks)

    def exec_argv(self, container_id: str) -> tuple[str, ...]:
        return ("docker", "exec", "-it", container_id, "/bin/sh")

    def close(self) -> None:
        self.calls.append(("close",))


def make_context(engine: FakeEngine | None = None, config: Config | None = None) -> AppContext:
    config = config or Config()
    return AppContext(
        engine=engine or FakeEngine(),
        config=config,
        theme=Theme.from_config(config.theme),
        console=Console(file=io.StringIO(), width=120, height=40, color_system=None),
    )


def run_commands(commands: list, limit: int = 100) -> list:
    """Run commands synchronously and return the events they produced."""
    events = []
    for command in commands[:limit]:
        if getattr(command, "__name__", "") in SLEEPING_COMMANDS:
            continue
        event = command()
        if event is not None:
            events.append(event)
    return events


def drive(component: Any, event: Any, limit: int = 100) -> list:
    """Deliver ``event`` and keep feeding resulting events back until quiet.

    Returns every event delivered, the first one included.
    """
    delivered = []
    pending = [event]
    while pending and len(delivered) < limit:
        current = pending.pop(0)
        delivered.append(current)
        pending.extend(run_commands(component.update(current)))
    return delivered


def container(cid: str, name: str, state: str = "running", labels: dict[str, str] | None = None) -> Container:
    return Container(id=cid, name=name, image="alpine:3", state=state, status=state, labels=dict(labels or {}))
