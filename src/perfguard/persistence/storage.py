"""File-backed history and baseline storage.

Layout under the history directory:
    <sanitized-test-name>_history.json   JSON array, chronological
    baseline-metrics.json                JSON object keyed by test name

Every write replaces the whole file through a temporary file in the same
directory, so readers never observe a partially written file.
"""

import contextlib
import logging
import os
import tempfile
import warnings
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from perfguard.exceptions import CorruptDataWarning, StorageError
from perfguard.models.metrics import PerformanceDataPoint
from perfguard.persistence.base import (
    DEFAULT_MAX_ENTRIES,
    BaselineStore,
    HistoryStore,
    restamp,
    sanitize_test_name,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DIR = "performance-history"
BASELINE_FILE = "baseline-metrics.json"
HISTORY_SUFFIX = "_history.json"

_HISTORY_ADAPTER = TypeAdapter(list[PerformanceDataPoint])
_BASELINE_ADAPTER = TypeAdapter(dict[str, PerformanceDataPoint])


def atomic_write(path: Path, content: bytes) -> None:
    """Replace ``path`` with ``content`` in a single rename.

    Raises:
        StorageError: If the directory or file cannot be written.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        msg = f"Failed to write {path}: {e}"
        raise StorageError(msg) from e


def _read_bytes(path: Path) -> bytes | None:
    """Read a file, returning None if it does not exist."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        msg = f"Failed to read {path}: {e}"
        raise StorageError(msg) from e


def _report_corrupt(path: Path, error: Exception) -> None:
    logger.warning("Ignoring corrupt data in %s, starting fresh: %s", path, error)
    warnings.warn(
        f"Ignoring corrupt data in {path}",
        CorruptDataWarning,
        stacklevel=3,
    )


class FileHistoryStore(HistoryStore):
    """Stores per-test history as JSON arrays on the filesystem."""

    def __init__(
        self,
        history_dir: Path,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        """Initialize the history store.

        Args:
            history_dir: Directory holding the history files.
            max_entries: Number of most recent points retained per test name.
        """
        super().__init__(max_entries)
        self._history_dir = history_dir

    @property
    def history_dir(self) -> Path:
        """Directory holding the history files."""
        return self._history_dir

    def path_for(self, test_name: str) -> Path:
        """Return the history file path for a test name."""
        return self._history_dir / f"{sanitize_test_name(test_name)}{HISTORY_SUFFIX}"

    def _load(self, path: Path) -> list[PerformanceDataPoint]:
        raw = _read_bytes(path)
        if raw is None:
            return []
        try:
            return _HISTORY_ADAPTER.validate_json(raw)
        except ValidationError as e:
            _report_corrupt(path, e)
            return []

    def append(self, test_name: str, point: PerformanceDataPoint) -> None:
        """Append a point and persist the truncated history.

        Args:
            test_name: Test the point belongs to.
            point: The data point to record.

        Raises:
            StorageError: If the history file cannot be written.
        """
        path = self.path_for(test_name)
        history = self._load(path)
        history.append(point)

        # Keep the most recent entries only
        if len(history) > self._max_entries:
            history = history[-self._max_entries:]

        atomic_write(path, _HISTORY_ADAPTER.dump_json(history, indent=2, by_alias=True))
        logger.debug("Recorded data point %d for %s", len(history), test_name)

    def all(self, test_name: str) -> list[PerformanceDataPoint]:
        """Load the full retained history for a test name.

        Returns:
            Points in chronological order, or an empty list if none exist.
        """
        return self._load(self.path_for(test_name))

    def test_names(self) -> list[str]:
        """List test names with history, read from the stored points."""
        if not self._history_dir.exists():
            return []

        names: set[str] = set()
        for history_file in self._history_dir.glob(f"*{HISTORY_SUFFIX}"):
            history = self._load(history_file)
            if history:
                names.add(history[-1].test_name)
        return sorted(names)


class FileBaselineStore(BaselineStore):
    """Stores all baselines in a single JSON object on the filesystem."""

    def __init__(self, history_dir: Path) -> None:
        """Initialize the baseline store.

        Args:
            history_dir: Directory holding the baseline file.
        """
        self._baseline_path = history_dir / BASELINE_FILE

    @property
    def baseline_path(self) -> Path:
        """Path of the baseline file."""
        return self._baseline_path

    def _load(self) -> dict[str, PerformanceDataPoint]:
        raw = _read_bytes(self._baseline_path)
        if raw is None:
            return {}
        try:
            return _BASELINE_ADAPTER.validate_json(raw)
        except ValidationError as e:
            _report_corrupt(self._baseline_path, e)
            return {}

    def _save(self, baselines: dict[str, PerformanceDataPoint]) -> None:
        atomic_write(
            self._baseline_path,
            _BASELINE_ADAPTER.dump_json(baselines, indent=2, by_alias=True),
        )

    def get(self, test_name: str) -> PerformanceDataPoint | None:
        """Return the baseline for a test name, or None if never set."""
        return self._load().get(test_name)

    def all(self) -> dict[str, PerformanceDataPoint]:
        """Return every stored baseline keyed by test name."""
        return self._load()

    def set_if_absent(self, test_name: str, point: PerformanceDataPoint) -> bool:
        """Store ``point`` as the baseline unless one already exists.

        Returns:
            True if the point was written.

        Raises:
            StorageError: If the baseline file cannot be written.
        """
        baselines = self._load()
        if test_name in baselines:
            return False

        baselines[test_name] = point
        self._save(baselines)
        logger.info("Baseline established for %s", test_name)
        return True

    def force_set(self, test_name: str, point: PerformanceDataPoint) -> PerformanceDataPoint:
        """Overwrite the baseline for a test name.

        Returns:
            The stored point, stamped with the current time.

        Raises:
            StorageError: If the baseline file cannot be written.
        """
        baselines = self._load()
        stored = restamp(point)
        baselines[test_name] = stored
        self._save(baselines)
        logger.info("New baseline set for %s", test_name)
        return stored
