"""Persistence module for storing performance history and baselines."""

from perfguard.persistence.base import (
    DEFAULT_MAX_ENTRIES,
    BaselineStore,
    HistoryStore,
    sanitize_test_name,
)
from perfguard.persistence.memory import InMemoryBaselineStore, InMemoryHistoryStore
from perfguard.persistence.storage import (
    BASELINE_FILE,
    DEFAULT_HISTORY_DIR,
    FileBaselineStore,
    FileHistoryStore,
)

__all__ = [
    "BASELINE_FILE",
    "DEFAULT_HISTORY_DIR",
    "DEFAULT_MAX_ENTRIES",
    "BaselineStore",
    "FileBaselineStore",
    "FileHistoryStore",
    "HistoryStore",
    "InMemoryBaselineStore",
    "InMemoryHistoryStore",
    "sanitize_test_name",
]
