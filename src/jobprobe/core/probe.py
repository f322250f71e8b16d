"""Top-level probe run: collect, correlate, render."""

import logging
from datetime import datetime

from jobprobe.core.config import ProbeConfig
from jobprobe.core.correlator import LogCorrelator
from jobprobe.core.exceptions import MandatoryEvidenceMissingError, ProbeError
from jobprobe.core.models import Verdict
from jobprobe.core.ports import FILE_NOT_FOUND, ProbeSessionPort
from jobprobe.core.report import PrtgError, PrtgReport
from jobprobe.core.sensor import Sensor

logger = logging.getLogger(__name__)


def _load_correlator(config: ProbeConfig, session: ProbeSessionPort) -> LogCorrelator:
    """Build a correlator and resolve its verdict as far as the logs allow."""
    primary_path = config.primary_log_path
    lines = session.fetch_lines(primary_path)
    if lines is FILE_NOT_FOUND:
        raise MandatoryEvidenceMissingError(
            f"Primary event log not found: {primary_path}"
        )

    correlator = LogCorrelator(config.namespace, "\n".join(lines))
    correlator.evaluate()
    if not correlator.inner_exception_required():
        return correlator

    inner_path = config.log_path(correlator.inner_exception_log_filename())
    logger.info("Fetching inner exception log %s", inner_path)
    inner_lines = session.fetch_lines(inner_path)
    if inner_lines is FILE_NOT_FOUND:
        if correlator.verdict is Verdict.PRELIMINARY_FAILURE:
            raise MandatoryEvidenceMissingError(
                f"Last run of {config.namespace} did not finish and its inner "
                f"exception log {inner_path} was not found"
            )
        correlator.confirm_last_run_result()
    else:
        correlator.import_inner_exception(inner_lines)
    return correlator


def collect(
    config: ProbeConfig,
    session: ProbeSessionPort,
    now: datetime | None = None,
) -> PrtgReport:
    """Run the probe and return the report, letting errors propagate.

    Args:
        config: What to probe.
        session: Established session to the monitored host.
        now: Reference time for elapsed-hours computation.

    Returns:
        The rendered report.
    """
    task = session.fetch_task_metadata(config.task_identity)
    correlator = _load_correlator(config, session) if config.reads_logs else None
    sensor = Sensor(config.sensor_name, config.kind, correlator)
    sensor.merge_task_and_log_data(task, now)
    return sensor.render()


def run_probe(
    config: ProbeConfig,
    session: ProbeSessionPort,
    now: datetime | None = None,
) -> PrtgReport | PrtgError:
    """Run the probe and return exactly one report or error document.

    The session is closed whatever the outcome.

    Args:
        config: What to probe.
        session: Established session to the monitored host.
        now: Reference time for elapsed-hours computation.

    Returns:
        A PrtgReport on success, a PrtgError if any probe error occurred.
    """
    try:
        return collect(config, session, now)
    except ProbeError as e:
        logger.exception("Probe for %s failed", config.task_identity)
        return PrtgError.from_exception(e)
    finally:
        session.close()
