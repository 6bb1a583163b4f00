"""Abstract interfaces for history and baseline storage."""

import re
from abc import ABC, abstractmethod
from datetime import datetime

from perfguard.models.metrics import PerformanceDataPoint

DEFAULT_MAX_ENTRIES = 100

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")


def sanitize_test_name(test_name: str) -> str:
    """Build a file-safe name by replacing every non-alphanumeric character with '_'."""
    return _UNSAFE_CHARS.sub("_", test_name)


def restamp(point: PerformanceDataPoint) -> PerformanceDataPoint:
    """Return a copy of ``point`` with its timestamp set to now."""
    return point.model_copy(update={"timestamp": datetime.now().isoformat()})


class HistoryStore(ABC):
    """Chronological log of data points per test name, capped at a retention limit."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize the store.

        Args:
            max_entries: Number of most recent points retained per test name.
        """
        if max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self._max_entries = max_entries

    @property
    def max_entries(self) -> int:
        """Retention limit per test name."""
        return self._max_entries

    @abstractmethod
    def append(self, test_name: str, point: PerformanceDataPoint) -> None:
        """Append a point, dropping the oldest entries beyond the retention limit.

        Raises:
            StorageError: If the history cannot be persisted.
        """
        ...

    @abstractmethod
    def all(self, test_name: str) -> list[PerformanceDataPoint]:
        """Return the full retained history in chronological order."""
        ...

    def recent(self, test_name: str, count: int) -> list[PerformanceDataPoint]:
        """Return the last ``count`` points in chronological order."""
        if count <= 0:
            return []
        return self.all(test_name)[-count:]

    @abstractmethod
    def test_names(self) -> list[str]:
        """List the test names that have history."""
        ...


class BaselineStore(ABC):
    """One reference data point per test name."""

    @abstractmethod
    def get(self, test_name: str) -> PerformanceDataPoint | None:
        """Return the baseline for a test name, or None if never set."""
        ...

    @abstractmethod
    def all(self) -> dict[str, PerformanceDataPoint]:
        """Return every stored baseline keyed by test name."""
        ...

    @abstractmethod
    def set_if_absent(self, test_name: str, point: PerformanceDataPoint) -> bool:
        """Store ``point`` only if no baseline exists yet.

        Returns:
            True if the point was written.
        """
        ...

    @abstractmethod
    def force_set(self, test_name: str, point: PerformanceDataPoint) -> PerformanceDataPoint:
        """Overwrite the baseline, stamping it with the current time.

        Returns:
            The stored point.

        Raises:
            StorageError: If the baselines cannot be persisted.
        """
        ...
