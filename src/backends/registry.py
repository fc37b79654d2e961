"""
Backend Registry.

Backends form a closed set of kinds. Adapters register themselves against
a kind, and names from configuration are resolved through this table once
at startup.
"""

from enum import Enum
from typing import Any, Callable, Iterable, TypeVar

import structlog

from src.backends.base import StorageBackend
from src.core.exceptions import BackendNotRegisteredError, UnknownBackendError

logger = structlog.get_logger(__name__)

B = TypeVar("B", bound=type[StorageBackend])


class BackendKind(str, Enum):
    """Storage engines the benchmark knows about."""

    SCYLLADB = "scylladb"
    CLICKHOUSE = "clickhouse"
    TIMESCALEDB = "timescaledb"
    COCKROACHDB = "cockroachdb"
    MEMORY = "memory"


_REGISTRY: dict[BackendKind, type[StorageBackend]] = {}


def register_backend(kind: BackendKind) -> Callable[[B], B]:
    """
    Class decorator registering an adapter for a backend kind.

    Usage:
        @register_backend(BackendKind.TIMESCALEDB)
        class TimescaleDBBackend(StorageBackend):
            ...
    """

    def decorator(cls: B) -> B:
        if kind in _REGISTRY and _REGISTRY[kind] is not cls:
            logger.warning(
                "Replacing registered backend adapter",
                kind=kind.value,
                previous=_REGISTRY[kind].__name__,
                adapter=cls.__name__,
            )
        _REGISTRY[kind] = cls
        return cls

    return decorator


def resolve_kind(name: str | BackendKind) -> BackendKind:
    """
    Resolve a configured backend name to its kind.

    Raises:
        UnknownBackendError: If the name is not a known backend kind
    """
    if isinstance(name, BackendKind):
        return name
    try:
        return BackendKind(name.strip().lower())
    except ValueError:
        raise UnknownBackendError(name, [k.value for k in BackendKind]) from None


def get_backend_class(name: str | BackendKind) -> type[StorageBackend]:
    """
    Look up the adapter class for a backend.

    Raises:
        UnknownBackendError: If the name is not a known backend kind
        BackendNotRegisteredError: If no adapter is registered for the kind
    """
    kind = resolve_kind(name)
    try:
        return _REGISTRY[kind]
    except KeyError:
        raise BackendNotRegisteredError(kind.value) from None


def create_backend(name: str | BackendKind, **kwargs: Any) -> StorageBackend:
    """Instantiate the registered adapter for a backend."""
    return get_backend_class(name)(**kwargs)


def create_backends(names: Iterable[str]) -> dict[str, StorageBackend]:
    """Instantiate adapters for several backends, keyed by kind name."""
    backends: dict[str, StorageBackend] = {}
    for name in names:
        kind = resolve_kind(name)
        backends[kind.value] = create_backend(kind)
    return backends


def registered_backends() -> list[str]:
    """Get the names of all kinds with a registered adapter."""
    return sorted(kind.value for kind in _REGISTRY)
