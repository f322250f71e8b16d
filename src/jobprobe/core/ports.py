"""Port interfaces for the probe's external collaborators.

These protocols define the contracts that session adapters must implement.
The core depends only on these interfaces, not on how a remote session is
established or how files are transferred.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from jobprobe.core.models import TaskMetadata


class FileNotFound(Enum):
    """Marker returned when a requested file does not exist."""

    MARKER = "file-not-found"


FILE_NOT_FOUND = FileNotFound.MARKER


@runtime_checkable
class SchedulerPort(Protocol):
    """Port for querying scheduler entries.

    Examples: InMemorySession, LocalSession.
    """

    def fetch_task_metadata(self, identity: str) -> TaskMetadata:
        """Return metadata for the scheduler entry matching identity.

        Raises:
            MultipleMatchError: If identity matches more than one entry.
            TransportError: If the scheduler could not be queried, or no
                entry matches.
        """
        ...


@runtime_checkable
class RemoteFilePort(Protocol):
    """Port for reading files from the monitored host."""

    def fetch_lines(self, path: str) -> list[str] | FileNotFound:
        """Return the lines of a file, or FILE_NOT_FOUND if it does not exist.

        Raises:
            TransportError: If the file could not be read for any other reason.
        """
        ...


@runtime_checkable
class ProbeSessionPort(SchedulerPort, RemoteFilePort, Protocol):
    """An established session to the monitored host."""

    def close(self) -> None:
        """Release the session. Safe to call more than once."""
        ...
