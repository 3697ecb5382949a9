"""Engine records and the list items built from them."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Hashable, Protocol

from ctui_core.formatting import short_id, size_mb

CONTAINERS = "containers"
IMAGES = "images"
VOLUMES = "volumes"
NETWORKS = "networks"
SERVICES = "services"

KINDS = (CONTAINERS, IMAGES, VOLUMES, NETWORKS, SERVICES)


@dataclass
class Container:
    id: str
    name: str
    image: str
    state: str
    status: str = ""
    created: str | int = ""
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ContainerStats:
    cpu_percent: float = 0.0
    memory_usage: int = 0
    memory_limit: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Image:
    id: str
    repo_tags: list[str] = field(default_factory=list)
    size: int = 0
    created: str | int = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Volume:
    name: str
    driver: str = "local"
    mountpoint: str = ""
    scope: str = "local"
    created: str | int = ""
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Network:
    id: str
    name: str
    driver: str = "bridge"
    scope: str = "local"
    internal: bool = False
    containers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Service:
    project: str
    name: str
    containers: list[Container] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)
    working_dir: str = ""

    @property
    def key(self) -> str:
        return f"{self.project}/{self.name}"

    @property
    def replicas(self) -> int:
        return sum(1 for c in self.containers if c.state == "running")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Item(Protocol):
    """What the list, selection and resource view need from an item."""

    selected: bool
    working: bool

    @property
    def identity(self) -> Hashable: ...

    @property
    def title(self) -> str: ...

    @property
    def description(self) -> str: ...

    def filter_value(self) -> str: ...


@dataclass
class ContainerItem:
    container: Container
    selected: bool = False
    working: bool = False

    @property
    def identity(self) -> str:
        return self.container.id

    @property
    def title(self) -> str:
        return self.container.name

    @property
    def description(self) -> str:
        return f"{self.container.image} - {self.container.state}"

    def filter_value(self) -> str:
        return self.container.name


@dataclass
class ImageItem:
    image: Image
    selected: bool = False
    working: bool = False

    @property
    def identity(self) -> str:
        return self.image.id

    @property
    def title(self) -> str:
        repo_tag = self.image.repo_tags[0] if self.image.repo_tags else "<none>"
        return f"{repo_tag} ({size_mb(self.image.size)})"

    @property
    def description(self) -> str:
        return f"ID: {short_id(self.image.id)}"

    def filter_value(self) -> str:
        return self.title


@dataclass
class VolumeItem:
    volume: Volume
    selected: bool = False
    working: bool = False

    @property
    def identity(self) -> str:
        return self.volume.name

    @property
    def title(self) -> str:
        return f"{self.volume.name} ({self.volume.driver})"

    @property
    def description(self) -> str:
        return f"Mountpoint: {self.volume.mountpoint}"

    def filter_value(self) -> str:
        return self.volume.name


@dataclass
class NetworkItem:
    network: Network
    selected: bool = False
    working: bool = False

    @property
    def identity(self) -> str:
        return self.network.id

    @property
    def title(self) -> str:
        return f"{self.network.name} ({self.network.driver})"

    @property
    def description(self) -> str:
        return f"ID: {short_id(self.network.id)} | Scope: {self.network.scope}"

    def filter_value(self) -> str:
        return self.network.name


@dataclass
class ServiceItem:
    service: Service
    selected: bool = False
    working: bool = False

    @property
    def identity(self) -> str:
        return self.service.key

    @property
    def title(self) -> str:
        return self.service.name

    @property
    def description(self) -> str:
        return f"Replicas: {self.service.replicas} | Containers: {len(self.service.containers)}"

    def filter_value(self) -> str:
        return f"{self.service.project} {self.service.name}"
