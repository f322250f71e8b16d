"""FastAPI adapter serving probe reports."""

from fastapi import APIRouter, Response

from jobprobe.adapters.frameworks.asgi import (
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    SessionFactory,
    probe_document,
)
from jobprobe.core.config import ProbeConfig
from jobprobe.core.encoding.prtg import encode_json, encode_xml


def create_probe_router(
    config: ProbeConfig,
    session_factory: SessionFactory,
) -> APIRouter:
    """Create a FastAPI router with /prtg and /prtg.json endpoints.

    Args:
        config: What to probe.
        session_factory: Callable returning a new ProbeSessionPort.

    Returns:
        APIRouter with the report endpoints configured.
    """
    router = APIRouter()

    @router.get("/prtg")
    async def get_prtg_xml() -> Response:
        """Return the probe report as PRTG XML."""
        document = await probe_document(config, session_factory)
        return Response(content=encode_xml(document), media_type=XML_CONTENT_TYPE)

    @router.get("/prtg.json")
    async def get_prtg_json() -> Response:
        """Return the probe report as PRTG JSON."""
        document = await probe_document(config, session_factory)
        return Response(content=encode_json(document), media_type=JSON_CONTENT_TYPE)

    return router
