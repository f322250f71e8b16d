"""Example ASGI application serving a job probe report.

Run with:
    uvicorn examples.asgi_probe:app

Endpoints:
    /prtg        - PRTG XML report for the nightly import job
    /prtg.json   - the same report as PRTG JSON

The task metadata is read from examples/tasks.json and the job's logs from
examples/logs/. Point a PRTG "HTTP Data Advanced" sensor at /prtg.json.
"""

import logging
from pathlib import Path

from jobprobe.adapters.frameworks.asgi import create_asgi_app
from jobprobe.adapters.session.local import LocalSession
from jobprobe.core.config import ProbeConfig

HERE = Path(__file__).parent

logging.basicConfig(level=logging.INFO)

config = ProbeConfig.from_mapping(
    {
        "task_identity": "\\Jobs\\NightlyImport",
        "sensor_name": "Nightly import",
        "kind": "scheduled_job_with_log",
        "namespace": "com.example.nightly",
        "log_directory": str(HERE / "logs"),
    }
)

app = create_asgi_app(config, lambda: LocalSession(HERE / "tasks.json"))
