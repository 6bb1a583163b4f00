"""In-memory history and baseline storage.

Useful for tests and for one-off analyses that should not touch disk.
"""

from perfguard.models.metrics import PerformanceDataPoint
from perfguard.persistence.base import (
    DEFAULT_MAX_ENTRIES,
    BaselineStore,
    HistoryStore,
    restamp,
)


class InMemoryHistoryStore(HistoryStore):
    """History kept in a dictionary of lists."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        super().__init__(max_entries)
        self._history: dict[str, list[PerformanceDataPoint]] = {}

    def append(self, test_name: str, point: PerformanceDataPoint) -> None:
        history = [*self._history.get(test_name, []), point]
        self._history[test_name] = history[-self._max_entries:]

    def all(self, test_name: str) -> list[PerformanceDataPoint]:
        return list(self._history.get(test_name, []))

    def test_names(self) -> list[str]:
        return sorted(self._history)


class InMemoryBaselineStore(BaselineStore):
    """Baselines kept in a dictionary."""

    def __init__(self) -> None:
        self._baselines: dict[str, PerformanceDataPoint] = {}

    def get(self, test_name: str) -> PerformanceDataPoint | None:
        return self._baselines.get(test_name)

    def all(self) -> dict[str, PerformanceDataPoint]:
        return dict(self._baselines)

    def set_if_absent(self, test_name: str, point: PerformanceDataPoint) -> bool:
        if test_name in self._baselines:
            return False
        self._baselines[test_name] = point
        return True

    def force_set(self, test_name: str, point: PerformanceDataPoint) -> PerformanceDataPoint:
        stored = restamp(point)
        self._baselines[test_name] = stored
        return stored
