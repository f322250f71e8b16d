"""Error taxonomy for the probe.

Every error raised by the core derives from ProbeError so that the top-level
runner can turn any of them into a single error document.
"""


class ProbeError(Exception):
    """Base class for all probe errors."""


class InputValidationError(ProbeError, ValueError):
    """A required value is empty, missing, or not in the accepted set."""


class MultipleMatchError(ProbeError):
    """A scheduler identity resolved to more than one entry."""


class MandatoryEvidenceMissingError(ProbeError):
    """A log file that must exist for a verdict could not be found."""


class MalformedLogError(ProbeError):
    """Log content does not parse as the expected event-log format."""


class TransportError(ProbeError):
    """A collaborator call failed, as opposed to reporting a missing file."""


class EvaluationPreconditionError(ProbeError):
    """The correlator cannot evaluate because a required record is absent."""


class ChannelCapacityError(ProbeError):
    """A sensor has no free channel slot left."""
