"""
Core Infrastructure Module.

Provides foundational patterns shared by the workload and benchmark layers:
- Engine exception hierarchy
"""

from src.core.exceptions import (
    BackendConnectionError,
    BackendNotRegisteredError,
    BenchmarkError,
    UnknownBackendError,
    UnknownScenarioError,
)

__all__ = [
    "BenchmarkError",
    "UnknownScenarioError",
    "UnknownBackendError",
    "BackendNotRegisteredError",
    "BackendConnectionError",
]
