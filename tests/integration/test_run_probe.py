"""Integration tests for run_probe() against in-memory and local sessions."""

import json
import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from jobprobe.adapters.session.in_memory import InMemorySession
from jobprobe.adapters.session.local import LocalSession
from jobprobe.core.config import ProbeConfig
from jobprobe.core.models import SensorKind, TaskMetadata
from jobprobe.core.probe import run_probe
from jobprobe.core.report import PrtgError, PrtgReport
from tests.builders import (
    INNER_LOG_PATH,
    PRIMARY_LOG_PATH,
    TASK_IDENTITY,
    build_event_log,
    exception_event,
)

SessionFactory = Callable[..., InMemorySession]


class TestRunProbeGeneric:
    """Tests for sensors that only read scheduler metadata."""

    @pytest.mark.tier(2)
    def test_reports_scheduler_channels(
        self,
        generic_config: ProbeConfig,
        session_factory: SessionFactory,
        probe_now: datetime,
    ) -> None:
        session = session_factory()

        report = run_probe(generic_config, session, probe_now)

        assert isinstance(report, PrtgReport)
        assert [c.value for c in report.channels] == ["3", "0", "1"]
        assert session.requested_paths == []
        assert session.closed is True

    @pytest.mark.tier(2)
    def test_ambiguous_task_gives_error_document(
        self, generic_config: ProbeConfig, task_metadata: TaskMetadata
    ) -> None:
        session = InMemorySession(tasks={TASK_IDENTITY: [task_metadata] * 2})

        result = run_probe(generic_config, session)

        assert isinstance(result, PrtgError)
        assert result.text.startswith("MultipleMatchError:")
        assert session.closed is True


class TestRunProbeWithLog:
    """Tests for sensors that also correlate the job's event logs."""

    @pytest.mark.tier(2)
    def test_clean_run_without_inner_log_is_confirmed(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        successful_run_log: str,
        probe_now: datetime,
    ) -> None:
        """An absent inner log after a clean run is acceptable."""
        session = session_factory(primary=successful_run_log)

        report = run_probe(log_config, session, probe_now)

        assert isinstance(report, PrtgReport)
        assert report.channels[3].value == "0"
        assert session.requested_paths == [PRIMARY_LOG_PATH, INNER_LOG_PATH]

    @pytest.mark.tier(2)
    def test_clean_run_with_inner_log_reports_failure(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        successful_run_log: str,
        single_exception_log: str,
        probe_now: datetime,
    ) -> None:
        session = session_factory(primary=successful_run_log, inner=single_exception_log)

        report = run_probe(log_config, session, probe_now)

        assert isinstance(report, PrtgReport)
        assert report.channels[3].value == "42"
        assert "failed with code 42: X." in report.text

    @pytest.mark.tier(2)
    def test_unfinished_run_imports_inner_log(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        unfinished_run_log: str,
        probe_now: datetime,
    ) -> None:
        inner = build_event_log(
            [
                exception_event(1, error_code=7, message="M1"),
                exception_event(2, data_object="D", message="M2"),
            ]
        )
        session = session_factory(primary=unfinished_run_log, inner=inner)

        report = run_probe(log_config, session, probe_now)

        assert isinstance(report, PrtgReport)
        assert len(report.channels) == 4
        assert report.channels[3].value == "7"
        assert report.text.endswith(
            "Inner exception log: com.example.nightly.20240115_1030.xml"
        )

    @pytest.mark.tier(2)
    def test_unfinished_run_without_inner_log_is_an_error(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        unfinished_run_log: str,
    ) -> None:
        session = session_factory(primary=unfinished_run_log)

        result = run_probe(log_config, session)

        assert isinstance(result, PrtgError)
        assert result.text.startswith("MandatoryEvidenceMissingError:")
        assert session.closed is True

    @pytest.mark.tier(2)
    def test_transport_failure_is_never_treated_as_absent(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        successful_run_log: str,
    ) -> None:
        session = session_factory(
            primary=successful_run_log, failing_paths={INNER_LOG_PATH}
        )

        result = run_probe(log_config, session)

        assert isinstance(result, PrtgError)
        assert result.text.startswith("TransportError:")

    @pytest.mark.tier(2)
    def test_missing_primary_log_is_an_error(
        self, log_config: ProbeConfig, session_factory: SessionFactory
    ) -> None:
        result = run_probe(log_config, session_factory())

        assert isinstance(result, PrtgError)
        assert "Primary event log not found" in result.text

    @pytest.mark.tier(2)
    def test_malformed_primary_log_is_an_error(
        self, log_config: ProbeConfig, session_factory: SessionFactory
    ) -> None:
        result = run_probe(log_config, session_factory(primary="not xml"))

        assert isinstance(result, PrtgError)
        assert result.text.startswith("MalformedLogError:")
        assert "<" not in result.text

    @pytest.mark.tier(2)
    def test_failure_is_logged(
        self,
        log_config: ProbeConfig,
        session_factory: SessionFactory,
        unfinished_run_log: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.ERROR, logger="jobprobe.core.probe"):
            run_probe(log_config, session_factory(primary=unfinished_run_log))

        assert any("Probe for" in r.getMessage() for r in caplog.records)


class TestRunProbeLocal:
    """End-to-end run against files on disk."""

    @pytest.mark.tier(2)
    def test_local_session_end_to_end(
        self,
        tmp_path: Path,
        successful_run_log: str,
        probe_now: datetime,
    ) -> None:
        metadata = tmp_path / "tasks.json"
        metadata.write_text(
            json.dumps(
                {
                    "nightly": {
                        "name": "Nightly import",
                        "last_run_time": "2024-01-15T13:00:00",
                        "last_result": 0,
                        "enabled": True,
                    }
                }
            ),
            encoding="utf-8",
        )
        (tmp_path / "com.example.nightly.xml").write_text(
            successful_run_log, encoding="utf-8"
        )
        config = ProbeConfig(
            task_identity="nightly",
            sensor_name="Nightly import",
            kind=SensorKind.SCHEDULED_JOB_WITH_LOG,
            namespace="com.example.nightly",
            log_directory=str(tmp_path),
        )

        report = run_probe(config, LocalSession(metadata), probe_now)

        assert isinstance(report, PrtgReport)
        assert [c.value for c in report.channels] == ["0.5", "0", "1", "0"]
        assert report.text.endswith("Next run: not scheduled.")

    @pytest.mark.tier(2)
    @pytest.mark.parametrize(
        "content",
        [b'{"nightly": "oops"}', b'{"nightly": "\xff"}'],
        ids=["entry-not-object", "not-utf8"],
    )
    def test_malformed_metadata_yields_error_document(
        self, tmp_path: Path, content: bytes
    ) -> None:
        metadata = tmp_path / "tasks.json"
        metadata.write_bytes(content)

        result = run_probe(ProbeConfig("nightly", "Nightly"), LocalSession(metadata))

        assert isinstance(result, PrtgError)
        assert result.text.startswith("MalformedLogError:")
