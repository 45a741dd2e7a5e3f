"""Resource descriptor construction.

A resource identifies the emitting service. It always carries ``service.name``
(required) plus optional namespace/version, merged on top of the SDK default
resource (which honors ``OTEL_RESOURCE_ATTRIBUTES``). Extra attributes come from
resource options::

    build_resource(
        service,
        [with_host(), with_container(), with_attributes(attribute("pod.name", "api-0"))],
    )
"""

from __future__ import annotations

import os
import platform
import re
import socket
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional, Sequence

from loguru import logger
from opentelemetry.sdk.resources import (
    CONTAINER_ID,
    HOST_NAME,
    OS_DESCRIPTION,
    OS_TYPE,
    SERVICE_NAME,
    SERVICE_NAMESPACE,
    SERVICE_VERSION,
    ProcessResourceDetector,
    Resource,
)
from opentelemetry.util.types import AttributeValue

from otelemetry.core.exceptions import ConfigError
from otelemetry.records import KeyValue

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from otelemetry.config import Service

Attributes = Dict[str, AttributeValue]

HOST_ARCH = "host.arch"

_IDENTITY_KEYS = (SERVICE_NAME, SERVICE_NAMESPACE, SERVICE_VERSION)
_CONTAINER_ID_RE = re.compile(r"([0-9a-f]{64})")
_CGROUP_PATHS = ("/proc/self/cgroup", "/proc/self/mountinfo")


class ResourceOption:
    """A named contributor of resource attributes, evaluated at construction time."""

    __slots__ = ("name", "_detect", "_require_attributes")

    def __init__(
        self,
        name: str,
        detect: Callable[[], Attributes],
        require_attributes: bool = False,
    ) -> None:
        self.name = name
        self._detect = detect
        self._require_attributes = require_attributes

    def apply(self) -> Attributes:
        attributes = dict(self._detect())
        if self._require_attributes and not attributes:
            raise ConfigError(f"resource option {self.name!r} carries no attributes")
        for key in attributes:
            if not isinstance(key, str) or not key.strip():
                raise ConfigError(
                    f"resource option {self.name!r} has an empty attribute key"
                )
        return attributes

    def __repr__(self) -> str:
        return f"ResourceOption({self.name!r})"


def with_attributes(*attributes: KeyValue) -> ResourceOption:
    """Explicit attributes; at least one pair is required."""
    pairs = tuple(attributes)
    return ResourceOption(
        "attributes",
        lambda: {key: value for key, value in pairs},
        require_attributes=True,
    )


def with_host() -> ResourceOption:
    def _detect() -> Attributes:
        attrs: Attributes = {HOST_NAME: socket.gethostname()}
        arch = platform.machine()
        if arch:
            attrs[HOST_ARCH] = arch.lower()
        return attrs

    return ResourceOption("host", _detect)


def with_os() -> ResourceOption:
    return ResourceOption(
        "os",
        lambda: {OS_TYPE: platform.system().lower(), OS_DESCRIPTION: platform.platform()},
    )


def with_process() -> ResourceOption:
    return ResourceOption(
        "process", lambda: dict(ProcessResourceDetector().detect().attributes)
    )


def with_container(paths: Iterable[str] = _CGROUP_PATHS) -> ResourceOption:
    """Container id from cgroup data; contributes nothing outside a container."""
    candidates = tuple(paths)

    def _detect() -> Attributes:
        container_id = _read_container_id(candidates)
        return {CONTAINER_ID: container_id} if container_id else {}

    return ResourceOption("container", _detect)


def _read_container_id(paths: Sequence[str]) -> Optional[str]:
    for path in paths:
        if not os.path.exists(path):
            continue
        try:
            with open(path, encoding="utf-8") as handle:
                for line in handle:
                    match = _CONTAINER_ID_RE.search(line)
                    if match:
                        return match.group(1)
        except OSError as exc:
            logger.debug("Unable to read {}: {}", path, exc)
    return None


def build_resource(
    service: "Service", options: Optional[Sequence[ResourceOption]] = None
) -> Resource:
    """
    Create the resource descriptor for ``service``.

    Args:
        service (Service): Service identity; ``name`` must be non-empty.
        options (Optional[Sequence[ResourceOption]]): Extra attribute sources.
            ``None`` means no extras; an explicit empty sequence is rejected.

    Returns:
        Resource: The merged resource.

    Raises:
        ConfigError: On a missing service name or invalid/conflicting options.
    """
    if not (service.name or "").strip():
        raise ConfigError("service name is required")

    identity: Attributes = {SERVICE_NAME: service.name}
    if service.namespace:
        identity[SERVICE_NAMESPACE] = service.namespace
    if service.version:
        identity[SERVICE_VERSION] = service.version

    extras: Attributes = {}
    if options is not None:
        options = list(options)
        if not options:
            raise ConfigError("resource options were given but empty")
        for option in options:
            if not isinstance(option, ResourceOption):
                raise ConfigError(f"invalid resource option: {option!r}")
            extras.update(option.apply())

    # Options may fill identity fields the service leaves unset, never override them.
    for key in _IDENTITY_KEYS:
        if key in extras and key in identity and extras[key] != identity[key]:
            raise ConfigError(
                f"resource option sets {key}={extras[key]!r}, "
                f"conflicting with service identity {identity[key]!r}"
            )

    resource = Resource.create(identity)
    if extras:
        resource = resource.merge(Resource(extras))
    return resource


__all__ = [
    "ResourceOption",
    "build_resource",
    "with_attributes",
    "with_container",
    "with_host",
    "with_os",
    "with_process",
]
