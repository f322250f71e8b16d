"""Probe configuration."""

import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jobprobe.core.exceptions import InputValidationError
from jobprobe.core.models import SensorKind

_REQUIRED_KEYS = ("task_identity", "sensor_name")


@dataclass(frozen=True)
class ProbeConfig:
    """What to probe and where the job writes its logs.

    Attributes:
        task_identity: Scheduler identity of the job's task entry.
        sensor_name: Name used for the sensor in the summary text.
        kind: Sensor kind; SCHEDULED_JOB_WITH_LOG also reads the job's logs.
        namespace: Dotted job namespace; its last segment is the log source.
        log_directory: Directory on the monitored host holding the logs.
        primary_log_name: Primary log file name; defaults to
                          "{namespace}.xml".
    """

    task_identity: str
    sensor_name: str
    kind: SensorKind = SensorKind.GENERIC
    namespace: str = ""
    log_directory: str = ""
    primary_log_name: str = ""

    def __post_init__(self) -> None:
        if not self.task_identity:
            raise InputValidationError("task_identity must not be empty")
        if not self.sensor_name:
            raise InputValidationError("sensor_name must not be empty")
        if self.kind is SensorKind.SCHEDULED_JOB_WITH_LOG:
            if not self.namespace:
                raise InputValidationError(
                    "namespace is required for a sensor that reads job logs"
                )
            if not self.log_directory:
                raise InputValidationError(
                    "log_directory is required for a sensor that reads job logs"
                )

    @property
    def reads_logs(self) -> bool:
        return self.kind is SensorKind.SCHEDULED_JOB_WITH_LOG

    def log_path(self, filename: str) -> str:
        """Path of a log file inside the log directory."""
        return posixpath.join(self.log_directory, filename)

    @property
    def primary_log_path(self) -> str:
        return self.log_path(self.primary_log_name or f"{self.namespace}.xml")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProbeConfig":
        """Build a config from a plain mapping (e.g., a parsed JSON file).

        Raises:
            InputValidationError: If a required key is missing or the kind
                name is unknown.
        """
        missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
        if missing:
            raise InputValidationError(
                f"Missing required configuration keys: {', '.join(missing)}"
            )
        kind_name = str(data.get("kind", SensorKind.GENERIC.value))
        try:
            kind = SensorKind(kind_name.lower())
        except ValueError:
            valid = ", ".join(k.value for k in SensorKind)
            raise InputValidationError(
                f"Unknown sensor kind {kind_name!r}; expected one of: {valid}"
            ) from None
        return cls(
            task_identity=str(data["task_identity"]),
            sensor_name=str(data["sensor_name"]),
            kind=kind,
            namespace=str(data.get("namespace", "")),
            log_directory=str(data.get("log_directory", "")),
            primary_log_name=str(data.get("primary_log_name", "")),
        )
