"""Scheduled-job health probe producing PRTG sensor reports."""

from jobprobe.adapters.session.in_memory import InMemorySession
from jobprobe.adapters.session.local import LocalSession
from jobprobe.core.channels import ChannelAttribute, MetricChannel
from jobprobe.core.config import ProbeConfig
from jobprobe.core.correlator import END_EVENT_ID, START_EVENT_ID, LogCorrelator
from jobprobe.core.encoding.prtg import encode_json, encode_xml
from jobprobe.core.exceptions import (
    ChannelCapacityError,
    EvaluationPreconditionError,
    InputValidationError,
    MalformedLogError,
    MandatoryEvidenceMissingError,
    MultipleMatchError,
    ProbeError,
    TransportError,
)
from jobprobe.core.models import (
    EventRecord,
    RunResult,
    SensorKind,
    TaskMetadata,
    Verdict,
)
from jobprobe.core.ports import FILE_NOT_FOUND
from jobprobe.core.probe import collect, run_probe
from jobprobe.core.report import ChannelResult, PrtgError, PrtgReport
from jobprobe.core.sensor import Sensor

__all__ = [
    "END_EVENT_ID",
    "FILE_NOT_FOUND",
    "START_EVENT_ID",
    "ChannelAttribute",
    "ChannelCapacityError",
    "ChannelResult",
    "EvaluationPreconditionError",
    "EventRecord",
    "InMemorySession",
    "InputValidationError",
    "LocalSession",
    "LogCorrelator",
    "MalformedLogError",
    "MandatoryEvidenceMissingError",
    "MetricChannel",
    "MultipleMatchError",
    "ProbeConfig",
    "ProbeError",
    "PrtgError",
    "PrtgReport",
    "RunResult",
    "Sensor",
    "SensorKind",
    "TaskMetadata",
    "TransportError",
    "Verdict",
    "collect",
    "encode_json",
    "encode_xml",
    "run_probe",
]
