"""Sensor aggregate: merges scheduler and log results into metric channels."""

from datetime import datetime

from jobprobe.core.channels import ChannelAttribute, MetricChannel
from jobprobe.core.correlator import STACK_TRACE_SEPARATOR, LogCorrelator
from jobprobe.core.exceptions import (
    ChannelCapacityError,
    EvaluationPreconditionError,
    InputValidationError,
)
from jobprobe.core.models import SensorKind, TaskMetadata
from jobprobe.core.report import ChannelResult, PrtgReport

HOURS_SINCE_LAST_RUN = "Hours since last run"
LAST_TASK_RESULT = "Last task result"
TASK_ENABLED = "Task enabled"
LAST_JOB_RESULT = "Last job result"

YES_NO_LOOKUP = "prtg.standardlookups.yesno.stateyesok"
LAST_RUN_RESULT_LOOKUP = "jobprobe.lastrunresult"

SUCCESS_TEMPLATE = (
    'Task "{name}" last ran {hours} hour(s) ago with result {last_result}. '
    "Next run: {next_run}."
)
FAILURE_TEMPLATE = (
    'Task "{name}" failed with code {code}: {details}. '
    "Inner exception log: {filename}"
)


def _template_channels(kind: SensorKind) -> list[MetricChannel]:
    channels = [
        MetricChannel(
            HOURS_SINCE_LAST_RUN,
            {
                ChannelAttribute.UNIT: "TimeHours",
                ChannelAttribute.FLOAT: "1",
                ChannelAttribute.DECIMAL_MODE: "Auto",
            },
        ),
        MetricChannel(
            LAST_TASK_RESULT,
            {
                ChannelAttribute.UNIT: "Count",
                ChannelAttribute.LIMIT_MODE: "1",
                ChannelAttribute.LIMIT_MAX_ERROR: "0",
            },
        ),
        MetricChannel(TASK_ENABLED, {ChannelAttribute.VALUE_LOOKUP: YES_NO_LOOKUP}),
    ]
    if kind is SensorKind.SCHEDULED_JOB_WITH_LOG:
        channels.append(
            MetricChannel(
                LAST_JOB_RESULT,
                {
                    ChannelAttribute.VALUE_LOOKUP: LAST_RUN_RESULT_LOOKUP,
                    ChannelAttribute.LIMIT_MODE: "1",
                    ChannelAttribute.LIMIT_MAX_ERROR: "0",
                    ChannelAttribute.LIMIT_MIN_ERROR: "0",
                },
            )
        )
    return channels


def hours_since(last_run: datetime, now: datetime) -> float | int:
    """Elapsed hours, 2 decimals below one hour and whole hours above."""
    hours = (now - last_run).total_seconds() / 3600
    if hours < 1:
        return round(hours, 2)
    return int(round(hours))


class Sensor:
    """A fixed set of metric channels describing one scheduled job.

    The channel set is chosen by the sensor kind: three scheduler channels
    for GENERIC, plus a job-result channel for SCHEDULED_JOB_WITH_LOG.

    Args:
        name: Sensor name, used in the summary text.
        kind: Which channel template to reserve.
        correlator: Log correlator; required for SCHEDULED_JOB_WITH_LOG.
        use_template: Install the kind's channel template at construction.
                      Without it the slots are reserved but empty.
    """

    def __init__(
        self,
        name: str,
        kind: SensorKind = SensorKind.GENERIC,
        correlator: LogCorrelator | None = None,
        use_template: bool = True,
    ) -> None:
        if not name:
            raise InputValidationError("sensor name must not be empty")
        if kind is SensorKind.SCHEDULED_JOB_WITH_LOG and correlator is None:
            raise InputValidationError(f"{kind.value} sensor requires a log correlator")
        self.name = name
        self.kind = kind
        self.correlator = correlator
        self._slots: list[MetricChannel | None] = [None] * kind.capacity
        self._by_name: dict[str, MetricChannel] = {}
        self._task: TaskMetadata | None = None
        if use_template:
            for channel in _template_channels(kind):
                self.add_channel(channel)

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def channels(self) -> list[MetricChannel]:
        """Channels in slot order, empty slots skipped."""
        return [c for c in self._slots if c is not None]

    def channel(self, name: str) -> MetricChannel | None:
        return self._by_name.get(name)

    def add_channel(self, channel: MetricChannel) -> None:
        """Place a channel in the next free slot.

        A channel whose name is already present is ignored.

        Raises:
            ChannelCapacityError: If every slot is taken.
        """
        if channel.name in self._by_name:
            return
        try:
            index = self._slots.index(None)
        except ValueError:
            raise ChannelCapacityError(
                f"Sensor {self.name!r} has no free slot for {channel.name!r} "
                f"(capacity {self.capacity})"
            ) from None
        self._slots[index] = channel
        self._by_name[channel.name] = channel

    def _set(self, name: str, value: object) -> None:
        channel = self._by_name.get(name)
        if channel is not None:
            channel.set_value(str(value))

    def merge_task_and_log_data(
        self, task: TaskMetadata, now: datetime | None = None
    ) -> None:
        """Populate the channels from scheduler metadata and the job log.

        Args:
            task: Metadata of the scheduler entry.
            now: Reference time for the elapsed-hours channel; defaults to
                 the current time in the same timezone as last_run_time.
        """
        self._task = task
        if task.last_run_time is not None:
            if now is None:
                now = datetime.now(task.last_run_time.tzinfo)
            self._set(HOURS_SINCE_LAST_RUN, hours_since(task.last_run_time, now))
        self._set(LAST_TASK_RESULT, task.last_result)
        self._set(TASK_ENABLED, 1 if task.enabled else 0)
        if self.kind is SensorKind.SCHEDULED_JOB_WITH_LOG and self.correlator:
            self._set(LAST_JOB_RESULT, int(self.correlator.last_run_result()))

    def _success_text(self) -> str:
        task = self._task
        hours_channel = self._by_name.get(HOURS_SINCE_LAST_RUN)
        hours = hours_channel.value if hours_channel and hours_channel.value else "?"
        next_run = "not scheduled"
        if task is not None and task.next_run_time is not None:
            next_run = task.next_run_time.isoformat(sep=" ")
        return SUCCESS_TEMPLATE.format(
            name=task.name if task else self.name,
            hours=hours,
            last_result=task.last_result if task else "?",
            next_run=next_run,
        )

    def _failure_text(self, correlator: LogCorrelator) -> str:
        details = STACK_TRACE_SEPARATOR.join(
            part
            for part in (
                correlator.inner_exception_message,
                correlator.inner_exception_stack_trace,
            )
            if part
        )
        filename = correlator.inner_exception_filename
        if filename is None:
            try:
                filename = correlator.inner_exception_log_filename()
            except (EvaluationPreconditionError, InputValidationError):
                filename = "unknown"
        return FAILURE_TEMPLATE.format(
            name=self._task.name if self._task else self.name,
            code=int(correlator.last_run_result()),
            details=details or "no inner exception details",
            filename=filename,
        )

    def render(self) -> PrtgReport:
        """Render populated channels and a one-line summary.

        Returns:
            The bare OK report when no channel holds a value; otherwise every
            populated channel in slot order with a summary text.
        """
        populated = [c for c in self.channels if c.is_populated]
        if not populated:
            return PrtgReport.ok()
        correlator = self.correlator
        if (
            self.kind is SensorKind.GENERIC
            or correlator is None
            or correlator.is_success()
        ):
            text = self._success_text()
        else:
            text = self._failure_text(correlator)
        return PrtgReport(
            channels=tuple(ChannelResult.from_channel(c) for c in populated),
            text=text,
        )
