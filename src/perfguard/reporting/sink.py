"""Report sinks.

A sink receives rendered attachments (markdown, CSV, text) and key/value
parameters, mirroring what test-report tools accept.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PARAMETERS_FILE = "parameters.json"

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class Attachment:
    """A rendered artifact handed to a sink."""

    name: str
    content: str
    content_type: str
    extension: str


class ReportSink(ABC):
    """Destination for rendered report artifacts."""

    @abstractmethod
    def attach(
        self,
        name: str,
        content: str,
        content_type: str = "text/markdown",
        extension: str = ".md",
    ) -> None:
        """Accept a rendered attachment."""
        ...

    @abstractmethod
    def parameter(self, name: str, value: str) -> None:
        """Accept a key/value parameter."""
        ...


class MemoryReportSink(ReportSink):
    """Keeps attachments and parameters in memory."""

    def __init__(self) -> None:
        self.attachments: list[Attachment] = []
        self.parameters: dict[str, str] = {}

    def attach(
        self,
        name: str,
        content: str,
        content_type: str = "text/markdown",
        extension: str = ".md",
    ) -> None:
        self.attachments.append(Attachment(name, content, content_type, extension))

    def parameter(self, name: str, value: str) -> None:
        self.parameters[name] = value

    def find(self, name: str) -> Attachment | None:
        """Return the most recent attachment with the given name."""
        for attachment in reversed(self.attachments):
            if attachment.name == name:
                return attachment
        return None


class DirectoryReportSink(ReportSink):
    """Writes each attachment to its own file in a directory."""

    def __init__(self, output_dir: Path) -> None:
        """Initialize the sink.

        Args:
            output_dir: Directory the attachments are written to.
        """
        self._output_dir = output_dir
        self._parameters: dict[str, str] = {}

    @property
    def output_dir(self) -> Path:
        """Directory the attachments are written to."""
        return self._output_dir

    def path_for(self, name: str, extension: str) -> Path:
        """Return the file path used for an attachment name."""
        stem = _FILENAME_UNSAFE.sub("-", name.strip().lower()).strip("-") or "attachment"
        return self._output_dir / f"{stem}{extension}"

    def attach(
        self,
        name: str,
        content: str,
        content_type: str = "text/markdown",
        extension: str = ".md",
    ) -> None:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name, extension)
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s attachment %s", content_type, path)

    def parameter(self, name: str, value: str) -> None:
        self._parameters[name] = value
        self._output_dir.mkdir(parents=True, exist_ok=True)
        (self._output_dir / PARAMETERS_FILE).write_text(
            json.dumps(self._parameters, indent=2), encoding="utf-8"
        )
