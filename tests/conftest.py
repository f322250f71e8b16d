"""Shared test fixtures for all test modules."""

from collections.abc import Callable
from datetime import datetime

import pytest

try:
    import httpx
except ImportError:
    httpx = None

from jobprobe.adapters.session.in_memory import InMemorySession
from jobprobe.core.config import ProbeConfig
from jobprobe.core.models import SensorKind, TaskMetadata
from tests.builders import (
    INNER_LOG_PATH,
    LOG_DIRECTORY,
    NAMESPACE,
    PRIMARY_LOG_PATH,
    TASK_IDENTITY,
    build_event_log,
    end_event,
    exception_event,
    start_event,
)


@pytest.fixture
def successful_run_log() -> str:
    """Primary log whose latest run has both start and end events."""
    return build_event_log([start_event(1), end_event(2)])


@pytest.fixture
def unfinished_run_log() -> str:
    """Primary log whose latest run started but never ended."""
    return build_event_log(
        [
            start_event(1, "run-202401141030-01"),
            end_event(2, "run-202401141030-01"),
            start_event(3),
        ]
    )


@pytest.fixture
def single_exception_log() -> str:
    """Inner exception log with one record."""
    return build_event_log([exception_event(1, error_code=42, message="X")])


@pytest.fixture
def task_metadata() -> TaskMetadata:
    return TaskMetadata(
        name="Nightly import",
        last_run_time=datetime(2024, 1, 15, 10, 30),
        last_result=0,
        enabled=True,
        next_run_time=datetime(2024, 1, 16, 10, 30),
    )


@pytest.fixture
def probe_now() -> datetime:
    """Reference time three hours after the task's last run."""
    return datetime(2024, 1, 15, 13, 30)


@pytest.fixture
def log_config() -> ProbeConfig:
    return ProbeConfig(
        task_identity=TASK_IDENTITY,
        sensor_name="Nightly import",
        kind=SensorKind.SCHEDULED_JOB_WITH_LOG,
        namespace=NAMESPACE,
        log_directory=LOG_DIRECTORY,
    )


@pytest.fixture
def generic_config() -> ProbeConfig:
    return ProbeConfig(task_identity=TASK_IDENTITY, sensor_name="Nightly import")


@pytest.fixture
def session_factory(
    task_metadata: TaskMetadata,
) -> Callable[..., InMemorySession]:
    """Factory fixture for sessions pre-loaded with the nightly task.

    Usage:
        session = session_factory(primary=log_text, inner=inner_text)
    """

    def _session(
        primary: str | None = None,
        inner: str | None = None,
        failing_paths: set[str] | None = None,
    ) -> InMemorySession:
        files: dict[str, str] = {}
        if primary is not None:
            files[PRIMARY_LOG_PATH] = primary
        if inner is not None:
            files[INNER_LOG_PATH] = inner
        return InMemorySession(
            tasks={TASK_IDENTITY: task_metadata},
            files=files,
            failing_paths=failing_paths,
        )

    return _session


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(config, session_factory)
            async with asgi_test_client(app) as client:
                response = await client.get("/prtg")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
