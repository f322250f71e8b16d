"""BDD step definitions for last-run determination scenarios."""

from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from jobprobe.core.correlator import LogCorrelator
from tests.builders import build_event_log, end_event, exception_event, start_event


@dataclass
class CorrelatorScenarioContext:
    """Shared state between steps in a correlator scenario."""

    namespace: str = ""
    primary_events: list[dict[str, Any]] = field(default_factory=list)
    inner_lines: list[str] = field(default_factory=list)
    correlator: LogCorrelator | None = None

    def get_correlator(self) -> LogCorrelator:
        if self.correlator is None:
            self.correlator = LogCorrelator(
                self.namespace, build_event_log(self.primary_events)
            )
        return self.correlator


@pytest.fixture
def ctx() -> CorrelatorScenarioContext:
    """Fresh scenario context for each test."""
    return CorrelatorScenarioContext()


@given(parsers.parse('a job with namespace "{namespace}"'))
def step_namespace(ctx: CorrelatorScenarioContext, namespace: str) -> None:
    ctx.namespace = namespace


@given(
    parsers.parse(
        'the primary log has a start event {start:d} and an end event {end:d} '
        'for "{correlation_id}"'
    )
)
def step_finished_run(
    ctx: CorrelatorScenarioContext, start: int, end: int, correlation_id: str
) -> None:
    ctx.primary_events += [
        start_event(start, correlation_id),
        end_event(end, correlation_id),
    ]


@given(
    parsers.parse('the primary log has only a start event {start:d} for "{correlation_id}"')
)
def step_unfinished_run(
    ctx: CorrelatorScenarioContext, start: int, correlation_id: str
) -> None:
    ctx.primary_events.append(start_event(start, correlation_id))


@given("an inner exception log with records:")
def step_inner_log(
    ctx: CorrelatorScenarioContext, datatable: list[list[str]]
) -> None:
    header, *rows = datatable
    events = []
    for row in rows:
        values = {key: value for key, value in zip(header, row) if value}
        record_id = int(values.pop("record_id"))
        events.append(exception_event(record_id, **values))
    ctx.inner_lines = build_event_log(events).splitlines()


@when("the correlator evaluates the log")
def step_evaluate(ctx: CorrelatorScenarioContext) -> None:
    ctx.get_correlator().evaluate()


@when("the last run result is confirmed twice")
def step_confirm_twice(ctx: CorrelatorScenarioContext) -> None:
    correlator = ctx.get_correlator()
    correlator.confirm_last_run_result()
    correlator.confirm_last_run_result()


@when("the inner exception log is imported")
def step_import(ctx: CorrelatorScenarioContext) -> None:
    ctx.get_correlator().import_inner_exception(ctx.inner_lines)


@then(parsers.parse('the verdict is "{verdict}"'))
def step_verdict(ctx: CorrelatorScenarioContext, verdict: str) -> None:
    assert ctx.get_correlator().verdict.value == verdict


@then(
    parsers.re(r"the last run result is (?P<code>-?\d+)$"),
    converters={"code": int},
)
def step_result(ctx: CorrelatorScenarioContext, code: int) -> None:
    assert ctx.get_correlator().last_run_result() == code


@then("the inner exception log is still required")
def step_required(ctx: CorrelatorScenarioContext) -> None:
    assert ctx.get_correlator().inner_exception_required() is True


@then(parsers.parse('the inner exception log is named "{filename}"'))
def step_filename(ctx: CorrelatorScenarioContext, filename: str) -> None:
    assert ctx.get_correlator().inner_exception_log_filename() == filename


@then(parsers.parse('the inner exception message is "{message}"'))
def step_message(ctx: CorrelatorScenarioContext, message: str) -> None:
    assert ctx.get_correlator().inner_exception_message == message


@then("there is no stack trace")
def step_no_stack_trace(ctx: CorrelatorScenarioContext) -> None:
    assert ctx.get_correlator().inner_exception_stack_trace is None


@then(parsers.parse('the stack trace is "{stack_trace}"'))
def step_stack_trace(ctx: CorrelatorScenarioContext, stack_trace: str) -> None:
    assert ctx.get_correlator().inner_exception_stack_trace == stack_trace
