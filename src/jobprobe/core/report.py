"""Report documents produced by a probe run."""

from dataclasses import dataclass, field

from jobprobe.core.channels import MetricChannel

OK_TEXT = "OK"
LINE_BREAK_TOKEN = " | "


@dataclass(frozen=True)
class ChannelResult:
    """A rendered channel.

    Attributes:
        name: Channel name.
        value: Channel value as text.
        attributes: (name, value) pairs of the non-empty attributes.
    """

    name: str
    value: str
    attributes: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_channel(cls, channel: MetricChannel) -> "ChannelResult":
        return cls(
            name=channel.name,
            value=channel.value or "",
            attributes=tuple(channel.attributes()),
        )


@dataclass(frozen=True)
class PrtgReport:
    """A successful probe result: channel entries plus one status line."""

    channels: tuple[ChannelResult, ...] = field(default_factory=tuple)
    text: str = OK_TEXT

    @classmethod
    def ok(cls) -> "PrtgReport":
        """The bare report emitted when no channel was populated."""
        return cls(channels=(), text=OK_TEXT)


@dataclass(frozen=True)
class PrtgError:
    """A failed probe result: error marker plus a message."""

    text: str
    error: int = 1

    @classmethod
    def from_exception(cls, exc: BaseException) -> "PrtgError":
        """Build an error document from an exception.

        Line breaks collapse to a separator token and angle brackets become
        square brackets so the message is safe inside markup.
        """
        return cls(text=sanitize_error_text(f"{type(exc).__name__}: {exc}"))


def sanitize_error_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = LINE_BREAK_TOKEN.join(text.split("\n"))
    return text.replace("<", "[").replace(">", "]")
