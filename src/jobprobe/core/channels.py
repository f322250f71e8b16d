"""Metric channels: named values with optional display attributes."""

from collections.abc import Iterator, Mapping
from enum import Enum

from jobprobe.core.exceptions import InputValidationError

CUSTOM_UNIT = "Custom"
RESERVED_NAMES = frozenset({"Channel", "Value"})


class ChannelAttribute(Enum):
    """Optional attributes a channel may carry, in rendering order."""

    UNIT = "Unit"
    CUSTOM_UNIT = "CustomUnit"
    SPEED_SIZE = "SpeedSize"
    VOLUME_SIZE = "VolumeSize"
    SPEED_TIME = "SpeedTime"
    MODE = "Mode"
    FLOAT = "Float"
    DECIMAL_MODE = "DecimalMode"
    WARNING = "Warning"
    SHOW_CHART = "ShowChart"
    SHOW_TABLE = "ShowTable"
    LIMIT_MAX_ERROR = "LimitMaxError"
    LIMIT_MAX_WARNING = "LimitMaxWarning"
    LIMIT_MIN_WARNING = "LimitMinWarning"
    LIMIT_MIN_ERROR = "LimitMinError"
    LIMIT_ERROR_MSG = "LimitErrorMsg"
    LIMIT_WARNING_MSG = "LimitWarningMsg"
    LIMIT_MODE = "LimitMode"
    VALUE_LOOKUP = "ValueLookup"
    NOTIFY_CHANGED = "NotifyChanged"


_ATTRIBUTES_BY_NAME: dict[str, ChannelAttribute] = {
    attr.value: attr for attr in ChannelAttribute
}


def resolve_attribute(name: str | ChannelAttribute) -> ChannelAttribute:
    """Map an attribute name to its ChannelAttribute member.

    Raises:
        InputValidationError: If the name is reserved or unknown.
    """
    if isinstance(name, ChannelAttribute):
        return name
    if name in RESERVED_NAMES:
        raise InputValidationError(f"{name!r} is not a generic channel attribute")
    try:
        return _ATTRIBUTES_BY_NAME[name]
    except KeyError:
        raise InputValidationError(f"Unknown channel attribute: {name!r}") from None


class MetricChannel:
    """A named metric slot with a value and descriptive attributes.

    Args:
        name: Channel name, unique within a sensor.
        attributes: Initial attribute values keyed by attribute name.
    """

    def __init__(
        self,
        name: str,
        attributes: Mapping[str | ChannelAttribute, str] | None = None,
    ) -> None:
        if not name:
            raise InputValidationError("channel name must not be empty")
        self.name = name
        self._value: str | None = None
        self._attributes: dict[ChannelAttribute, str] = {}
        if attributes:
            self.set_attributes(attributes)

    @property
    def value(self) -> str | None:
        return self._value

    @value.setter
    def value(self, value: str) -> None:
        self.set_value(value)

    def set_value(self, value: str) -> None:
        """Set the channel value.

        Raises:
            InputValidationError: If value is empty.
        """
        if value is None or value == "":
            raise InputValidationError(f"value for channel {self.name!r} is empty")
        self._value = value

    def get_value(self) -> str | None:
        return self._value

    @property
    def is_populated(self) -> bool:
        return self._value is not None

    def set_lookup(self, lookup_id: str) -> None:
        """Attach a value lookup table; forces the unit to Custom."""
        if not lookup_id:
            raise InputValidationError("lookup id must not be empty")
        self._attributes[ChannelAttribute.VALUE_LOOKUP] = lookup_id
        self._attributes[ChannelAttribute.UNIT] = CUSTOM_UNIT

    def set_attribute(self, name: str | ChannelAttribute, value: str) -> None:
        """Set one optional attribute by name.

        Raises:
            InputValidationError: If the name is reserved or unknown, or the
                value is empty.
        """
        attr = resolve_attribute(name)
        if not value:
            raise InputValidationError(
                f"value for attribute {attr.value!r} of channel {self.name!r} is empty"
            )
        if attr is ChannelAttribute.VALUE_LOOKUP:
            self.set_lookup(value)
            return
        if (
            attr is ChannelAttribute.UNIT
            and ChannelAttribute.VALUE_LOOKUP in self._attributes
        ):
            # A lookup channel keeps its Custom unit.
            return
        self._attributes[attr] = value

    def set_attributes(self, attributes: Mapping[str | ChannelAttribute, str]) -> None:
        """Set several attributes; validates every name before applying any."""
        resolved = [(resolve_attribute(k), v) for k, v in attributes.items()]
        for attr, value in resolved:
            self.set_attribute(attr, value)

    def get_attribute(self, name: str | ChannelAttribute) -> str | None:
        """Return an attribute value, None when unset.

        Raises:
            InputValidationError: If the name is reserved or unknown.
        """
        return self._attributes.get(resolve_attribute(name))

    def attributes(self) -> Iterator[tuple[str, str]]:
        """Yield (name, value) for every set attribute in rendering order."""
        for attr in ChannelAttribute:
            value = self._attributes.get(attr)
            if value:
                yield attr.value, value

    def __repr__(self) -> str:
        return f"MetricChannel(name={self.name!r}, value={self._value!r})"
