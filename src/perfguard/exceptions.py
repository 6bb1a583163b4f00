"""Custom exception hierarchy for perfguard.

All exceptions inherit from PerfGuardError for easy catching at the top level.
Storage failures propagate to the caller; corrupt history is reported as a
warning instead of an exception.
"""


class PerfGuardError(Exception):
    """Base exception for all perfguard errors."""


class ConfigurationError(PerfGuardError):
    """Configuration-related errors."""


class StorageError(PerfGuardError):
    """History or baseline data could not be read or written."""


class AuditParseError(PerfGuardError):
    """Failed to convert an audit report into a metrics snapshot."""


class ThresholdViolationError(PerfGuardError, AssertionError):
    """One or more metrics fell outside their required thresholds."""

    def __init__(self, message: str, violations: list[str]) -> None:
        """Initialize the error.

        Args:
            message: Error message.
            violations: One entry per failing metric.
        """
        super().__init__(message)
        self.violations = violations


class CorruptDataWarning(UserWarning):
    """Previously persisted data could not be parsed and was ignored."""
