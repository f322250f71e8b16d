"""Parser for the XML event logs written by scheduled jobs."""

import xml.etree.ElementTree as ET
from datetime import datetime

from jobprobe.core.exceptions import MalformedLogError
from jobprobe.core.models import EventRecord

EVENT_TAG = "Event"


def _text(element: ET.Element, tag: str) -> str | None:
    """Return the stripped text of a child element, None if absent or empty."""
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _raw_text(element: ET.Element, tag: str) -> str | None:
    """Return the unmodified text of a child element, None if absent or empty."""
    child = element.find(tag)
    if child is None or not child.text:
        return None
    return child.text


def _parse_int(element: ET.Element, tag: str) -> int | None:
    raw = _text(element, tag)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise MalformedLogError(f"<{tag}> is not an integer: {raw!r}") from e


def _require_int(element: ET.Element, tag: str) -> int:
    value = _parse_int(element, tag)
    if value is None:
        raise MalformedLogError(f"Event record is missing <{tag}>")
    return value


def _parse_timestamp(raw: str | None) -> datetime | None:
    if raw is None:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _parse_record(element: ET.Element) -> EventRecord:
    return EventRecord(
        record_id=_require_int(element, "RecordId"),
        event_id=_require_int(element, "EventId"),
        source=_text(element, "Source") or "",
        correlation_id=_text(element, "CorrelationId") or "",
        timestamp=_parse_timestamp(_text(element, "TimeCreated")),
        error_code=_parse_int(element, "ErrorCode"),
        message=_raw_text(element, "Message"),
        data_object=_raw_text(element, "DataObject"),
    )


def parse_event_log(text: str) -> tuple[EventRecord, ...]:
    """Parse event-log XML into records, in document order.

    Args:
        text: Full XML document. The root element name is not checked;
              every <Event> element below the root becomes one record.

    Returns:
        Tuple of EventRecord objects. Empty if the document has no events.

    Raises:
        MalformedLogError: If the text is not well-formed XML or an event
            lacks an integer RecordId or EventId.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedLogError(f"Event log is not well-formed XML: {e}") from e
    return tuple(_parse_record(element) for element in root.iter(EVENT_TAG))
