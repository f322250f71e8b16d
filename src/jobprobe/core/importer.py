"""Repair of inner-exception log content.

Jobs write their inner-exception log with the message text copied verbatim,
so a multi-line message ends up as several physical lines with unescaped
characters. This module stitches those lines back into one logical line per
element so the result parses as a regular event log.
"""

from collections.abc import Iterable

from jobprobe.core.exceptions import InputValidationError

MESSAGE_CLOSE_TAG = "</Message>"
MAX_MESSAGE_LENGTH = 250
ELLIPSIS = "..."


def _sanitize_message(text: str) -> str:
    """Truncate a merged message and neutralize characters XML would reject."""
    text = text[:MAX_MESSAGE_LENGTH]
    text = text.replace("&apos;", "'").replace("&", ".").replace("\x00", "")
    return text + ELLIPSIS


def _starts_logical_line(stripped: str) -> bool:
    # Blank lines, the XML declaration and tag lines.
    return not stripped or stripped.startswith("<")


def repair_inner_exception_lines(lines: Iterable[str]) -> str:
    """Reassemble raw inner-exception lines into parseable XML text.

    Args:
        lines: Physical lines of the file, with or without line terminators.

    Returns:
        The repaired text, one logical line per element, joined with newlines.

    Raises:
        InputValidationError: If no lines were given.
    """
    logical: list[str] = []
    current: str | None = None

    for raw in lines:
        line = raw.rstrip("\r\n")
        stripped = line.strip()
        if stripped.startswith(MESSAGE_CLOSE_TAG):
            current = _sanitize_message(current or "") + stripped
        elif stripped.endswith(MESSAGE_CLOSE_TAG) and not _starts_logical_line(
            stripped
        ):
            # Continuation line ending in the closing tag.
            head = line.rstrip()[: -len(MESSAGE_CLOSE_TAG)]
            current = _sanitize_message((current or "") + head) + MESSAGE_CLOSE_TAG
        elif _starts_logical_line(stripped):
            if current is not None:
                logical.append(current)
            current = line
        elif current is None:
            current = line
        else:
            current += line

    if current is None:
        raise InputValidationError("Inner exception log is empty")
    logical.append(current)
    return "\n".join(logical)
