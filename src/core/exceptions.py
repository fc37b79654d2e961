"""
Benchmark Engine Exceptions.

Configuration mistakes raise these at construction time. Failures of the
backends under test never do: they are counted in the result records.
"""


class BenchmarkError(Exception):
    """Base class for benchmark engine errors."""

    pass


class UnknownScenarioError(BenchmarkError, KeyError):
    """Requested workload scenario is not in the catalog."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown scenario '{name}'. Available: {', '.join(available)}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownBackendError(BenchmarkError, ValueError):
    """Requested backend name is not a known backend kind."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown backend '{name}'. Available: {', '.join(available)}")


class BackendNotRegisteredError(BenchmarkError):
    """Backend kind is known but no adapter has been registered for it."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No adapter registered for backend '{kind}'")


class BackendConnectionError(BenchmarkError):
    """Backend could not be connected; the backend is excluded from the run."""

    def __init__(self, backend: str, reason: str):
        self.backend = backend
        self.reason = reason
        super().__init__(f"{backend} connection failed: {reason}")
