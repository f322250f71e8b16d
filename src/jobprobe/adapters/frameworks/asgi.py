"""ASGI generic adapter serving probe reports.

This adapter provides a framework-agnostic ASGI application that can be used
with any ASGI server (uvicorn, hypercorn, daphne) so a monitoring collector
can pull the report over HTTP.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from jobprobe.core.config import ProbeConfig
from jobprobe.core.encoding.prtg import encode_json, encode_xml
from jobprobe.core.exceptions import ProbeError
from jobprobe.core.ports import ProbeSessionPort
from jobprobe.core.probe import run_probe
from jobprobe.core.report import PrtgError, PrtgReport

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]
SessionFactory = Callable[[], ProbeSessionPort]

XML_CONTENT_TYPE = "application/xml; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    # @tra: Adapter.ASGI.SendResponse.Headers
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    # @tra: Adapter.ASGI.SendResponse.Body
    await send({"type": "http.response.body", "body": body.encode()})


async def probe_document(
    config: ProbeConfig, session_factory: SessionFactory
) -> PrtgReport | PrtgError:
    """Open a session and run the probe in a worker thread.

    A ProbeError raised while opening the session becomes an error document,
    like any error raised during the run itself.
    """

    def _run() -> PrtgReport | PrtgError:
        # @tra: Adapter.ASGI.Probe.SessionError
        try:
            session = session_factory()
        except ProbeError as e:
            logger.exception(
                "Opening probe session for %s failed", config.task_identity
            )
            return PrtgError.from_exception(e)
        return run_probe(config, session)

    return await asyncio.to_thread(_run)


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], Coroutine[Any, Any, str]],
    content_type: str,
    log_message: str,
) -> None:
    """Execute an endpoint function with error handling and send response.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Async function that returns response body.
        content_type: Content-Type header for success response.
        log_message: Message to log on error.
    """
    # @tra: Adapter.ASGI.Endpoint.InternalError
    try:
        body = await endpoint_func()
        await _send_response(send, 200, content_type, body)
    except Exception:
        logger.exception(log_message)
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, JSON_CONTENT_TYPE, error_body)


def create_asgi_app(config: ProbeConfig, session_factory: SessionFactory) -> ASGIApp:
    """Create an ASGI app with /prtg (XML) and /prtg.json endpoints.

    Every request opens a fresh session and runs one probe.

    Args:
        config: What to probe.
        session_factory: Callable returning a new ProbeSessionPort.

    Returns:
        ASGI application callable.
    """

    async def xml_body() -> str:
        return encode_xml(await probe_document(config, session_factory))

    async def json_body() -> str:
        return encode_json(await probe_document(config, session_factory))

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]

        # @tra: Adapter.ASGI.PrtgEndpointHTTPStatus
        # @tra: Adapter.ASGI.PrtgEndpointContentType
        # @tra: Adapter.ASGI.PrtgEndpointXML
        if path == "/prtg":
            await _handle_endpoint(
                send, xml_body, XML_CONTENT_TYPE, "Error serving /prtg"
            )
        # @tra: Adapter.ASGI.PrtgJsonEndpointContentType
        # @tra: Adapter.ASGI.PrtgJsonEndpointJSON
        elif path == "/prtg.json":
            await _handle_endpoint(
                send, json_body, JSON_CONTENT_TYPE, "Error serving /prtg.json"
            )
        # @tra: Adapter.ASGI.NotFound
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
