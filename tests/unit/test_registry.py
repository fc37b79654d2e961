"""
Unit Tests for the Backend Registry.
"""

import pytest

from src.backends import registry
from src.backends.memory import InMemoryBackend
from src.backends.registry import (
    BackendKind,
    create_backend,
    create_backends,
    get_backend_class,
    register_backend,
    registered_backends,
    resolve_kind,
)
from src.core.exceptions import BackendNotRegisteredError, UnknownBackendError


@pytest.fixture
def isolated_registry(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Registry copy so registrations made by a test do not leak."""
    table = dict(registry._REGISTRY)
    monkeypatch.setattr(registry, "_REGISTRY", table)
    return table


class TestResolveKind:
    """Test name resolution."""

    @pytest.mark.parametrize("name", ["memory", "MEMORY", " Memory "])
    def test_names_are_normalized(self, name: str) -> None:
        assert resolve_kind(name) is BackendKind.MEMORY

    def test_kind_passes_through(self) -> None:
        assert resolve_kind(BackendKind.CLICKHOUSE) is BackendKind.CLICKHOUSE

    def test_unknown_name(self) -> None:
        with pytest.raises(UnknownBackendError) as exc_info:
            resolve_kind("mongodb")

        assert isinstance(exc_info.value, ValueError)
        assert "timescaledb" in exc_info.value.available


class TestRegistry:
    """Test adapter registration and lookup."""

    def test_memory_is_registered(self) -> None:
        assert "memory" in registered_backends()
        assert get_backend_class("memory") is InMemoryBackend

    def test_known_kind_without_adapter(self, isolated_registry: dict) -> None:
        isolated_registry.pop(BackendKind.SCYLLADB, None)

        with pytest.raises(BackendNotRegisteredError) as exc_info:
            get_backend_class("scylladb")

        assert exc_info.value.kind == "scylladb"

    def test_register_adapter(self, isolated_registry: dict) -> None:
        @register_backend(BackendKind.CLICKHOUSE)
        class FakeClickHouse(InMemoryBackend):
            name = "clickhouse"

        assert get_backend_class(BackendKind.CLICKHOUSE) is FakeClickHouse
        assert "clickhouse" in registered_backends()

    def test_create_backend_passes_kwargs(self) -> None:
        backend = create_backend("memory", latency_seconds=0.5)

        assert isinstance(backend, InMemoryBackend)
        assert backend.latency_seconds == 0.5

    def test_create_backends_keyed_by_kind(self) -> None:
        backends = create_backends(["Memory"])

        assert list(backends) == ["memory"]
        assert isinstance(backends["memory"], InMemoryBackend)

    def test_create_backends_rejects_unknown(self) -> None:
        with pytest.raises(UnknownBackendError):
            create_backends(["memory", "oracle"])
