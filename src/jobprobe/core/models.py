"""Core domain models for scheduled-job probing."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum


@dataclass(frozen=True)
class EventRecord:
    """A single entry from a job's structured event log.

    Attributes:
        record_id: Position of the record within its log (monotonic).
        event_id: Numeric event type (e.g., 200 for job start).
        source: Component that wrote the record.
        correlation_id: Token linking the records of one job run.
        timestamp: When the record was written, if known.
        error_code: Error code carried by exception records.
        message: Free-text message.
        data_object: Serialized context data (usually a stack trace).
    """

    record_id: int
    event_id: int
    source: str = ""
    correlation_id: str = ""
    timestamp: datetime | None = None
    error_code: int | None = None
    message: str | None = None
    data_object: str | None = None


@dataclass(frozen=True)
class TaskMetadata:
    """Execution metadata of one scheduler entry.

    Attributes:
        name: Display name of the scheduled task.
        last_run_time: When the task last started, None if it never ran.
        last_result: Result code the scheduler recorded for the last run.
        enabled: Whether the scheduler entry is enabled.
        next_run_time: When the task will run next, if scheduled.
    """

    name: str
    last_run_time: datetime | None
    last_result: int
    enabled: bool
    next_run_time: datetime | None = None


class Verdict(Enum):
    """States of the last-run determination."""

    UNINITIALIZED = "uninitialized"
    PRELIMINARY_SUCCESS = "preliminary_success"
    PRELIMINARY_FAILURE = "preliminary_failure"
    CONFIRMED_SUCCESS = "confirmed_success"
    FAILURE = "failure"

    @property
    def is_preliminary(self) -> bool:
        return self in (Verdict.PRELIMINARY_SUCCESS, Verdict.PRELIMINARY_FAILURE)

    @property
    def is_terminal(self) -> bool:
        return self in (Verdict.CONFIRMED_SUCCESS, Verdict.FAILURE)


class RunResult(IntEnum):
    """Sentinel result codes reported for the last job run.

    Genuine failures report the error code of the inner exception instead.
    """

    SUCCESS = 0
    NOT_EVALUATED = -1
    PRELIMINARY_SUCCESS = -2
    INNER_EXCEPTION_REQUIRED = -3
    UNKNOWN_FAILURE = -4


class SensorKind(Enum):
    """Selects the fixed channel set a sensor reserves."""

    GENERIC = "generic"
    SCHEDULED_JOB_WITH_LOG = "scheduled_job_with_log"

    @property
    def capacity(self) -> int:
        """Number of channel slots reserved for this kind."""
        return 4 if self is SensorKind.SCHEDULED_JOB_WITH_LOG else 3
