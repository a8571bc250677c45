"""Throwaway store containers for integration tests."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

if TYPE_CHECKING:
    from docker.client import DockerClient
    from docker.models.containers import Container
else:
    DockerClient = Any  # type: ignore[misc,assignment]
    Container = Any  # type: ignore[misc,assignment]


def get_docker_client() -> DockerClient:
    import docker

    return docker.from_env()


def _published_host(client: DockerClient) -> str:
    # Local sockets publish on localhost; a remote daemon on its own host
    base_url = client.api.base_url
    if base_url.startswith(("unix://", "npipe://", "http+docker://")):
        return "localhost"
    return urlparse(base_url).hostname or "localhost"


@dataclass
class StoreContainer:
    """A running key-value store and the address it is published on."""

    container: Container
    host: str
    scheme: str
    container_port: int

    @property
    def url(self) -> str:
        """Client URL, e.g. ``redis://localhost:49153``."""
        self.container.reload()
        key = f"{self.container_port}/tcp"
        bindings = self.container.attrs["NetworkSettings"]["Ports"].get(key)
        if not bindings:
            raise RuntimeError(f"{key} not published by {self.container.short_id}")
        return f"{self.scheme}://{self.host}:{bindings[0]['HostPort']}"

    def wait_for_log(self, needle: str, timeout: float = 30.0) -> None:
        """Block until ``needle`` appears in the container output."""
        deadline = time.monotonic() + timeout
        while needle not in self.container.logs().decode("utf-8", "replace"):
            if time.monotonic() >= deadline:
                raise TimeoutError(f"{self.container.short_id} never logged {needle!r}")
            time.sleep(0.2)


@contextmanager
def store_container(
    client: DockerClient,
    image: str,
    *,
    scheme: str,
    port: int,
    command: list[str] | None = None,
    ready_log: str | None = None,
) -> Iterator[StoreContainer]:
    """Run ``image`` with ``port`` published on a random host port.

    The container is force-removed with its volumes on exit.
    """
    container = client.containers.run(
        image, detach=True, ports={f"{port}/tcp": None}, command=command
    )
    store = StoreContainer(
        container=container, host=_published_host(client), scheme=scheme, container_port=port
    )
    try:
        if ready_log:
            store.wait_for_log(ready_log)
        yield store
    finally:
        container.remove(force=True, v=True)


async def wait_until_ready(probe: Callable[[], Awaitable[Any]], timeout: float = 30.0) -> None:
    """Retry ``probe`` until it stops raising or ``timeout`` passes."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            await probe()
            return
        except Exception:
            if time.monotonic() >= deadline:
                raise
            await asyncio.sleep(0.5)
