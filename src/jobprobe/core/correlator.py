"""Last-run determination from a job's event logs.

The correlator finds the most recent start event of a job in its primary
event log, looks for the matching end event, and derives a preliminary
verdict. Inner-exception evidence from a secondary log, fetched only when
needed, turns a preliminary verdict into a failure with a concrete cause.

Verdict transitions::

    UNINITIALIZED -> PRELIMINARY_SUCCESS -> CONFIRMED_SUCCESS
                                         -> FAILURE(code)
    UNINITIALIZED -> PRELIMINARY_FAILURE -> FAILURE(code)
"""

import logging
from collections.abc import Iterable

from jobprobe.core.eventlog import parse_event_log
from jobprobe.core.exceptions import (
    EvaluationPreconditionError,
    InputValidationError,
    MalformedLogError,
)
from jobprobe.core.importer import repair_inner_exception_lines
from jobprobe.core.models import EventRecord, RunResult, Verdict

logger = logging.getLogger(__name__)

START_EVENT_ID = 200
END_EVENT_ID = 201
STACK_TRACE_SEPARATOR = " -- "
TIMESTAMP_TOKEN_LENGTH = 12


class LogCorrelator:
    """Derives the verdict of a job's most recent run.

    One instance serves one probe invocation. The primary log is parsed once
    at construction; the verdict is computed lazily and only ever moves
    forward.

    Example:
        ```python
        correlator = LogCorrelator("com.example.nightly", primary_xml)
        if correlator.inner_exception_required():
            name = correlator.inner_exception_log_filename()
            correlator.import_inner_exception(fetch(name))
        result = correlator.last_run_result()
        ```
    """

    def __init__(self, namespace: str, primary_log: str) -> None:
        """Parse the primary log and bind the job namespace.

        Args:
            namespace: Dotted job identifier. Its last segment is the source
                       name the job's start events are written under.
            primary_log: XML text of the primary event log.

        Raises:
            InputValidationError: If namespace or primary_log is empty.
            MalformedLogError: If the log does not parse or has no records.
        """
        if not namespace:
            raise InputValidationError("namespace must not be empty")
        if not primary_log or not primary_log.strip():
            raise InputValidationError("primary event log must not be empty")

        self.namespace = namespace
        self.parent, _, self.leaf = namespace.rpartition(".")
        self._primary: tuple[EventRecord, ...] = parse_event_log(primary_log)
        if not self._primary:
            raise MalformedLogError("primary event log contains no event records")

        self._secondary: tuple[EventRecord, ...] | None = None
        self._verdict = Verdict.UNINITIALIZED
        self._last_correlation_id: str | None = None
        self.failure_code: int | None = None
        self.inner_exception_message: str | None = None
        self.inner_exception_stack_trace: str | None = None
        self.inner_exception_filename: str | None = None

    @property
    def verdict(self) -> Verdict:
        return self._verdict

    @property
    def last_correlation_id(self) -> str | None:
        return self._last_correlation_id

    @property
    def primary_events(self) -> tuple[EventRecord, ...]:
        return self._primary

    @property
    def secondary_events(self) -> tuple[EventRecord, ...] | None:
        return self._secondary

    def is_success(self) -> bool:
        """Return True if the verdict is a preliminary or confirmed success."""
        return self._verdict in (
            Verdict.PRELIMINARY_SUCCESS,
            Verdict.CONFIRMED_SUCCESS,
        )

    def evaluate(self) -> Verdict:
        """Advance the verdict as far as the available evidence allows.

        Terminal verdicts are never re-evaluated. Calling this repeatedly
        without new evidence returns the same verdict.

        Raises:
            EvaluationPreconditionError: If the primary log has no start event
                for this job.
            MalformedLogError: If imported secondary evidence has no records.
        """
        if self._verdict.is_terminal:
            return self._verdict
        if self._verdict is Verdict.UNINITIALIZED:
            self._transition(self._preliminary_verdict())
        if self._secondary is not None and self._verdict.is_preliminary:
            self._resolve_from_secondary(self._secondary)
        return self._verdict

    def _transition(self, verdict: Verdict) -> None:
        logger.debug(
            "Verdict for %s: %s -> %s",
            self.namespace,
            self._verdict.value,
            verdict.value,
        )
        self._verdict = verdict

    def _latest_start_event(self) -> EventRecord:
        starts = [
            e
            for e in self._primary
            if e.source == self.leaf and e.event_id == START_EVENT_ID
        ]
        if not starts:
            raise EvaluationPreconditionError(
                f"No start event (id {START_EVENT_ID}) from source "
                f"{self.leaf!r} in the primary event log"
            )
        return max(starts, key=lambda e: e.record_id)

    def _preliminary_verdict(self) -> Verdict:
        start = self._latest_start_event()
        if self._last_correlation_id is None:
            self._last_correlation_id = start.correlation_id
        has_end = any(
            e.correlation_id == self._last_correlation_id
            and e.event_id == END_EVENT_ID
            for e in self._primary
        )
        if has_end:
            return Verdict.PRELIMINARY_SUCCESS
        return Verdict.PRELIMINARY_FAILURE

    def _resolve_from_secondary(self, records: tuple[EventRecord, ...]) -> None:
        try:
            filename: str | None = self.inner_exception_log_filename()
        except InputValidationError:
            logger.warning(
                "Cannot derive inner exception log name for %s from %r",
                self.namespace,
                self._last_correlation_id,
            )
            filename = None

        ordered = sorted(records, key=lambda e: e.record_id, reverse=True)
        if len(ordered) == 1:
            cause = ordered[0]
            self.inner_exception_stack_trace = None
        else:
            newest, cause = ordered[0], ordered[1]
            self.inner_exception_stack_trace = STACK_TRACE_SEPARATOR.join(
                [newest.data_object or "", newest.message or ""]
            )
        self.failure_code = cause.error_code
        self.inner_exception_message = cause.message
        self.inner_exception_filename = filename
        self._transition(Verdict.FAILURE)

    def inner_exception_required(self) -> bool:
        """Return True while a preliminary verdict awaits secondary evidence.

        A preliminary success still asks for the inner-exception log: a
        sub-process may have logged an error without affecting the job's
        start/end pair.
        """
        return self._verdict.is_preliminary and self._secondary is None

    def confirm_last_run_result(self) -> None:
        """Promote a preliminary success to a confirmed success.

        Used when the inner-exception log is absent and its absence is
        acceptable. Has no effect in any other state.
        """
        if self._verdict is Verdict.PRELIMINARY_SUCCESS:
            self._transition(Verdict.CONFIRMED_SUCCESS)

    def last_run_result(self) -> int:
        """Return the numeric result of the last run.

        Evaluates first if no evaluation has happened yet.

        Returns:
            0 for confirmed success, a negative RunResult sentinel for
            undetermined states, or the inner exception's error code.
        """
        if self._verdict is Verdict.UNINITIALIZED:
            self.evaluate()

        if self._verdict is Verdict.CONFIRMED_SUCCESS:
            return RunResult.SUCCESS
        if self._verdict is Verdict.PRELIMINARY_SUCCESS:
            return RunResult.PRELIMINARY_SUCCESS
        if self._verdict is Verdict.PRELIMINARY_FAILURE:
            return RunResult.INNER_EXCEPTION_REQUIRED
        if self._verdict is Verdict.FAILURE:
            if self.failure_code is None:
                return RunResult.UNKNOWN_FAILURE
            return self.failure_code
        return RunResult.NOT_EVALUATED

    def inner_exception_log_filename(self) -> str:
        """Derive the inner-exception log name for the last run.

        The second hyphen-separated field of the correlation id is a
        12-character timestamp token, e.g. ``run-202401151030-01`` yields
        ``{namespace}.20240115_1030.xml``.

        Raises:
            EvaluationPreconditionError: If no start event was located yet.
            InputValidationError: If the correlation id has no timestamp token.
        """
        if self._last_correlation_id is None:
            raise EvaluationPreconditionError(
                "Correlation id unknown; evaluate the primary log first"
            )
        fields = self._last_correlation_id.split("-")
        token = fields[1] if len(fields) > 1 else ""
        if len(token) != TIMESTAMP_TOKEN_LENGTH:
            raise InputValidationError(
                f"Correlation id {self._last_correlation_id!r} has no "
                f"{TIMESTAMP_TOKEN_LENGTH}-character timestamp field"
            )
        return f"{self.namespace}.{token[:8]}_{token[8:]}.xml"

    def import_inner_exception(self, lines: Iterable[str]) -> Verdict:
        """Import inner-exception evidence and re-evaluate.

        Args:
            lines: Raw lines of the inner-exception log file.

        Returns:
            The verdict after re-evaluation.

        Raises:
            InputValidationError: If no lines were given.
            MalformedLogError: If the repaired content does not parse or
                holds no records; the correlator is left unchanged.
        """
        text = repair_inner_exception_lines(lines)
        records = parse_event_log(text)
        if not records:
            raise MalformedLogError("inner exception log contains no event records")
        self._secondary = records
        logger.debug(
            "Imported %d inner exception record(s) for %s",
            len(self._secondary),
            self.namespace,
        )
        return self.evaluate()
