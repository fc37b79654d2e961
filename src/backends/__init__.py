"""
Storage Backends Module.

The adapter interface every benchmarked storage engine implements, the
registry resolving configured names to adapters, and an in-memory
reference adapter.
"""

from src.backends.base import StorageBackend
from src.backends.registry import (
    BackendKind,
    create_backend,
    create_backends,
    get_backend_class,
    register_backend,
    registered_backends,
    resolve_kind,
)
from src.backends.memory import InMemoryBackend

__all__ = [
    "StorageBackend",
    "BackendKind",
    "register_backend",
    "resolve_kind",
    "get_backend_class",
    "create_backend",
    "create_backends",
    "registered_backends",
    "InMemoryBackend",
]
