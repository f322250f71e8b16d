"""Local filesystem session adapter.

Reads job logs from the local filesystem and scheduler metadata from a JSON
export, for probes that run on the monitored host itself.

The metadata file maps task identities to one entry or a list of entries:

    {
      "\\Jobs\\Nightly": {
        "name": "Nightly import",
        "last_run_time": "2024-01-15T10:30:00",
        "last_result": 0,
        "enabled": true,
        "next_run_time": "2024-01-16T10:30:00"
      }
    }
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from jobprobe.core.exceptions import (
    MalformedLogError,
    MultipleMatchError,
    TransportError,
)
from jobprobe.core.models import TaskMetadata
from jobprobe.core.ports import FILE_NOT_FOUND, FileNotFound


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise MalformedLogError(f"Invalid timestamp in task metadata: {value!r}") from e


def _task_from_dict(identity: str, data: dict[str, Any]) -> TaskMetadata:
    try:
        return TaskMetadata(
            name=str(data.get("name") or identity),
            last_run_time=_parse_datetime(data.get("last_run_time")),
            last_result=int(data.get("last_result", 0)),
            enabled=bool(data.get("enabled", True)),
            next_run_time=_parse_datetime(data.get("next_run_time")),
        )
    except (TypeError, ValueError) as e:
        raise MalformedLogError(f"Invalid task metadata for {identity!r}: {e}") from e


class LocalSession:
    """Filesystem implementation of ProbeSessionPort.

    Args:
        metadata_path: JSON file holding scheduler entries by identity.
        encoding: Text encoding of the log files.
    """

    def __init__(self, metadata_path: str | Path, encoding: str = "utf-8") -> None:
        self._metadata_path = Path(metadata_path)
        self._encoding = encoding

    def _load_metadata(self) -> dict[str, Any]:
        try:
            data = json.loads(self._metadata_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise TransportError(
                f"Cannot read task metadata {self._metadata_path}: {e}"
            ) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise MalformedLogError(
                f"Task metadata {self._metadata_path} is not valid JSON: {e}"
            ) from e
        if not isinstance(data, dict):
            raise MalformedLogError(
                f"Task metadata {self._metadata_path} must be a JSON object"
            )
        return data

    def fetch_task_metadata(self, identity: str) -> TaskMetadata:
        """Return the entry for identity from the metadata file."""
        entry = self._load_metadata().get(identity)
        matches = entry if isinstance(entry, list) else [entry] if entry else []
        if len(matches) > 1:
            raise MultipleMatchError(
                f"{len(matches)} scheduler entries match {identity!r}"
            )
        if not matches:
            raise TransportError(f"No scheduler entry matches {identity!r}")
        if not isinstance(matches[0], dict):
            raise MalformedLogError(
                f"Scheduler entry for {identity!r} must be a JSON object"
            )
        return _task_from_dict(identity, matches[0])

    def fetch_lines(self, path: str) -> list[str] | FileNotFound:
        """Return the lines of a local file, FILE_NOT_FOUND if it is absent."""
        try:
            text = Path(path).read_text(encoding=self._encoding, errors="replace")
        except FileNotFoundError:
            return FILE_NOT_FOUND
        except OSError as e:
            raise TransportError(f"Cannot read {path}: {e}") from e
        return text.splitlines()

    def close(self) -> None:
        """Nothing to release for local files."""
