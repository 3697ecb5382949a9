"""Container engine access through the Docker SDK."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Protocol

import docker
from docker.errors import DockerException

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
    Service,
    Volume,
)

logger = logging.getLogger(__name__)

CONTAINER_ACTIONS = ("start", "stop", "pause", "unpause", "restart", "remove")

COMPOSE_PROJECT_LABEL = "com.docker.compose.project"
COMPOSE_SERVICE_LABEL = "com.docker.compose.service"
COMPOSE_CONFIG_FILES_LABEL = "com.docker.compose.project.config_files"
COMPOSE_WORKING_DIR_LABEL = "com.docker.compose.project.working_dir"

LOG_TAIL_LINES = 200


class EngineError(Exception):
    """Any failure talking to the container engine."""


@contextmanager
def engine_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (DockerException, OSError) as exc:
        logger.warning("%s failed: %s", action, exc)
        raise EngineError(f"{action}: {exc}") from exc


class LogStream:
    """Line-oriented reader over a followed log stream."""

    def __init__(self, chunks: Any) -> None:
        self._chunks = chunks
        self._pending = ""
        self._closed = False

    def read_lines(self) -> list[str] | None:
        """Block for the next chunk. Returns None once the stream is exhausted."""
        if self._closed:
            return None
        with engine_errors("read logs"):
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._closed = True
                tail, self._pending = self._pending, ""
                return [tail] if tail else None
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8", errors="replace")
        *lines, self._pending = (self._pending + chunk).split("\n")
        return [line.rstrip("\r") for line in lines]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._chunks, "close", None)
        if close is not None:
            with engine_errors("close log stream"):
                close()


class EngineClient(Protocol):
    def list_items(self, kind: str) -> list[Any]: ...

    def list_containers(self) -> list[Container]: ...

    def list_images(self) -> list[Image]: ...

    def list_volumes(self) -> list[Volume]: ...

    def list_networks(self) -> list[Network]: ...

    def list_services(self) -> list[Service]: ...

    def set_state(self, ids: list[str], action: str) -> None: ...

    def remove_image(self, image_id: str) -> None: ...

    def remove_volume(self, name: str) -> None: ...

    def remove_network(self, network_id: str) -> None: ...

    def used_by(self, kind: str, identity: str) -> list[str]: ...

    def prune(self, kind: str) -> int: ...

    def inspect_container(self, container_id: str) -> dict[str, Any]: ...

    def container_stats(self, container_id: str) -> ContainerStats: ...

    def stream_logs(self, container_id: str) -> LogStream: ...

    def exec_argv(self, container_id: str) -> tuple[str, ...]: ...


def _container_from_attrs(attrs: dict[str, Any]) -> Container:
    names = attrs.get("Names") or []
    name = names[0].lstrip("/") if names else str(attrs.get("Id", ""))[:12]
    return Container(
        id=str(attrs.get("Id", "")),
        name=name,
        image=str(attrs.get("Image", "")),
        state=str(attrs.get("State", "")),
        status=str(attrs.get("Status", "")),
        created=attrs.get("Created", ""),
        labels=dict(attrs.get("Labels") or {}),
    )


def stats_from_sample(sample: dict[str, Any]) -> ContainerStats:
    """Reduce one ``container.stats(stream=False)`` sample the way ``docker stats`` does."""
    cpu = sample.get("cpu_stats") or {}
    precpu = sample.get("precpu_stats") or {}
    cpu_usage = cpu.get("cpu_usage") or {}
    cpu_delta = cpu_usage.get("total_usage", 0) - (precpu.get("cpu_usage") or {}).get("total_usage", 0)
    system_delta = cpu.get("system_cpu_usage", 0) - precpu.get("system_cpu_usage", 0)
    cpu_percent = 0.0
    if system_delta > 0 and cpu_delta > 0:
        online = cpu.get("online_cpus") or len(cpu_usage.get("percpu_usage") or [1])
        cpu_percent = cpu_delta / system_delta * online * 100.0

    memory = sample.get("memory_stats") or {}
    return ContainerStats(
        cpu_percent=cpu_percent,
        memory_usage=int(memory.get("usage") or 0),
        memory_limit=int(memory.get("limit") or 0),
    )


def group_services(containers: list[Container]) -> list[Service]:
    """Group compose-managed containers into services by their labels."""
    services: dict[tuple[str, str], Service] = {}
    for container in containers:
        project = container.labels.get(COMPOSE_PROJECT_LABEL)
        name = container.labels.get(COMPOSE_SERVICE_LABEL)
        if not project or not name:
            continue
        service = services.get((project, name))
        if service is None:
            files = container.labels.get(COMPOSE_CONFIG_FILES_LABEL, "")
            service = Service(
                project=project,
                name=name,
                config_files=[f for f in files.split(",") if f],
                working_dir=container.labels.get(COMPOSE_WORKING_DIR_LABEL, ""),
            )
            services[(project, name)] = service
        service.containers.append(container)
    return sorted(services.values(), key=lambda s: (s.project, s.name))


class DockerEngine:
    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_env(cls) -> DockerEngine:
        with engine_errors("connect to engine"):
            client = docker.from_env()
            client.ping()
        return cls(client)

    def close(self) -> None:
        with engine_errors("close engine client"):
            self._client.close()

    def list_items(self, kind: str) -> list[Any]:
        listers = {
            CONTAINERS: self.list_containers,
            IMAGES: self.list_images,
            VOLUMES: self.list_volumes,
            NETWORKS: self.list_networks,
            SERVICES: self.list_services,
        }
        if kind not in listers:
            raise ValueError(f"unknown resource kind: {kind}")
        return listers[kind]()

    def _container_attrs(self) -> list[dict[str, Any]]:
        with engine_errors("list containers"):
            return [c.attrs for c in self._client.containers.list(all=True, sparse=True)]

    def list_containers(self) -> list[Container]:
        containers = [_container_from_attrs(attrs) for attrs in self._container_attrs()]
        return sorted(containers, key=lambda c: c.name.lower())

    def list_images(self) -> list[Image]:
        with engine_errors("list images"):
            images = self._client.images.list()
        return [
            Image(
                id=image.id,
                repo_tags=list(image.tags),
                size=int(image.attrs.get("Size") or 0),
                created=image.attrs.get("Created", ""),
            )
            for image in images
        ]

    def list_volumes(self) -> list[Volume]:
        with engine_errors("list volumes"):
            volumes = self._client.volumes.list()
        return sorted(
            (
                Volume(
                    name=volume.name,
                    driver=volume.attrs.get("Driver", ""),
                    mountpoint=volume.attrs.get("Mountpoint", ""),
                    scope=volume.attrs.get("Scope", ""),
                    created=volume.attrs.get("CreatedAt", ""),
                    labels=dict(volume.attrs.get("Labels") or {}),
                )
                for volume in volumes
            ),
            key=lambda v: v.name,
        )

    def list_networks(self) -> list[Network]:
        with engine_errors("list networks"):
            networks = self._client.networks.list(greedy=True)
        return sorted(
            (
                Network(
                    id=network.id,
                    name=network.name,
                    driver=network.attrs.get("Driver", ""),
                    scope=network.attrs.get("Scope", ""),
                    internal=bool(network.attrs.get("Internal")),
                    containers=sorted(
                        (info or {}).get("Name", cid[:12])
                        for cid, info in (network.attrs.get("Containers") or {}).items()
                    ),
                )
                for network in networks
            ),
            key=lambda n: n.name,
        )

    def list_services(self) -> list[Service]:
        return group_services(self.list_containers())

    def set_state(self, ids: list[str], action: str) -> None:
        """Apply ``action`` to every container, then report all failures at once."""
        if action not in CONTAINER_ACTIONS:
            raise ValueError(f"unknown container action: {action}")
        failures = []
        for container_id in ids:
            try:
                with engine_errors(f"{action} {container_id[:12]}"):
                    container = self._client.containers.get(container_id)
                    getattr(container, action)()
            except EngineError as exc:
                failures.append(str(exc))
        if failures:
            raise EngineError("; ".join(failures))

    def remove_image(self, image_id: str) -> None:
        with engine_errors("remove image"):
            self._client.images.remove(image=image_id)

    def remove_volume(self, name: str) -> None:
        with engine_errors("remove volume"):
            self._client.volumes.get(name).remove()

    def remove_network(self, network_id: str) -> None:
        with engine_errors("remove network"):
            self._client.networks.get(network_id).remove()

    def used_by(self, kind: str, identity: str) -> list[str]:
        """Names of containers that keep the resource in use."""
        if kind == NETWORKS:
            with engine_errors("inspect network"):
                attrs = self._client.networks.get(identity).attrs
            return sorted(
                (info or {}).get("Name", cid[:12]) for cid, info in (attrs.get("Containers") or {}).items()
            )

        users = []
        for attrs in self._container_attrs():
            container = _container_from_attrs(attrs)
            if kind == IMAGES and attrs.get("ImageID") == identity:
                users.append(container.name)
            elif kind == VOLUMES and any(
                mount.get("Type") == "volume" and mount.get("Name") == identity
                for mount in attrs.get("Mounts") or []
            ):
                users.append(container.name)
        return sorted(users)

    def prune(self, kind: str) -> int:
        """Prune unused resources of one kind and return the bytes reclaimed."""
        with engine_errors(f"prune {kind}"):
            if kind == CONTAINERS:
                result = self._client.containers.prune()
            elif kind == IMAGES:
                result = self._client.images.prune(filters={"dangling": True})
            elif kind == VOLUMES:
                result = self._client.volumes.prune()
            elif kind == NETWORKS:
                result = self._client.networks.prune()
            else:
                raise ValueError(f"cannot prune {kind}")
        return int((result or {}).get("SpaceReclaimed") or 0)

    def inspect_container(self, container_id: str) -> dict[str, Any]:
        with engine_errors("inspect container"):
            return self._client.containers.get(container_id).attrs

    def container_stats(self, container_id: str) -> ContainerStats:
        with engine_errors("container stats"):
            sample = self._client.containers.get(container_id).stats(stream=False)
        return stats_from_sample(sample or {})

    def stream_logs(self, container_id: str) -> LogStream:
        with engine_errors("stream logs"):
            container = self._client.containers.get(container_id)
            chunks = container.logs(stream=True, follow=True, tail=LOG_TAIL_LINES)
        return LogStream(chunks)

    def exec_argv(self, container_id: str) -> tuple[str, ...]:
        return ("docker", "exec", "-it", container_id, "/bin/sh")
