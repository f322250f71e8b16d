"""Encoders for probe report documents.

Produces the XML and JSON layouts accepted by PRTG custom sensors.
"""

import json
from typing import Any
from xml.sax.saxutils import escape

from jobprobe.core.report import PrtgError, PrtgReport


def encode_xml(document: PrtgReport | PrtgError) -> str:
    """Encode a report or error document as PRTG XML.

    Args:
        document: The report or error produced by a probe run.

    Returns:
        XML text with a <prtg> root element.
    """
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<prtg>"]
    if isinstance(document, PrtgError):
        lines.append(f"  <error>{document.error}</error>")
        lines.append(f"  <text>{escape(document.text)}</text>")
        lines.append("</prtg>")
        return "\n".join(lines) + "\n"

    for channel in document.channels:
        lines.append("  <result>")
        lines.append(f"    <channel>{escape(channel.name)}</channel>")
        lines.append(f"    <value>{escape(channel.value)}</value>")
        for name, value in channel.attributes:
            lines.append(f"    <{name}>{escape(value)}</{name}>")
        lines.append("  </result>")
    lines.append(f"  <text>{escape(document.text)}</text>")
    lines.append("</prtg>")
    return "\n".join(lines) + "\n"


def encode_json(document: PrtgReport | PrtgError) -> str:
    """Encode a report or error document as PRTG JSON.

    Args:
        document: The report or error produced by a probe run.

    Returns:
        JSON text with a top-level "prtg" object.
    """
    body: dict[str, Any]
    if isinstance(document, PrtgError):
        body = {"error": document.error, "text": document.text}
    else:
        results = []
        for channel in document.channels:
            obj: dict[str, Any] = {"channel": channel.name, "value": channel.value}
            for name, value in channel.attributes:
                obj[name.lower()] = value
            results.append(obj)
        body = {"result": results, "text": document.text}
    return json.dumps({"prtg": body})
