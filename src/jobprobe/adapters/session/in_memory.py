"""In-memory session adapter.

Serves task metadata and file contents from dictionaries. Suitable for
testing and for embedding the probe where the data was collected elsewhere.
"""

from collections.abc import Mapping

from jobprobe.core.exceptions import MultipleMatchError, TransportError
from jobprobe.core.models import TaskMetadata
from jobprobe.core.ports import FILE_NOT_FOUND, FileNotFound


class InMemorySession:
    """In-memory implementation of ProbeSessionPort.

    Args:
        tasks: Task entries keyed by identity. A list value with more than
               one entry simulates an ambiguous identity.
        files: File contents keyed by path.
        failing_paths: Paths whose retrieval raises TransportError.
    """

    def __init__(
        self,
        tasks: Mapping[str, TaskMetadata | list[TaskMetadata]] | None = None,
        files: Mapping[str, str] | None = None,
        failing_paths: set[str] | None = None,
    ) -> None:
        self._tasks = dict(tasks or {})
        self._files = dict(files or {})
        self._failing_paths = set(failing_paths or ())
        self.requested_paths: list[str] = []
        self.closed = False

    def add_file(self, path: str, content: str) -> None:
        self._files[path] = content

    def fetch_task_metadata(self, identity: str) -> TaskMetadata:
        """Return the task entry registered under identity."""
        self._ensure_open()
        entry = self._tasks.get(identity)
        matches = entry if isinstance(entry, list) else [entry] if entry else []
        if len(matches) > 1:
            raise MultipleMatchError(
                f"{len(matches)} scheduler entries match {identity!r}"
            )
        if not matches:
            raise TransportError(f"No scheduler entry matches {identity!r}")
        return matches[0]

    def fetch_lines(self, path: str) -> list[str] | FileNotFound:
        """Return the lines of a registered file."""
        self._ensure_open()
        self.requested_paths.append(path)
        if path in self._failing_paths:
            raise TransportError(f"Transfer of {path} failed")
        content = self._files.get(path)
        if content is None:
            return FILE_NOT_FOUND
        return content.splitlines()

    def close(self) -> None:
        self.closed = True

    def _ensure_open(self) -> None:
        if self.closed:
            raise TransportError("Session is closed")
