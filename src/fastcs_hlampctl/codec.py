"""Conversion between raw hlampctl register values and physical values.

Everything in this module is pure: no bus access and no shared state.

Channel decoding rules:
- channel 0 (voltage): 12-bit two's complement, sign bit 11
- channel 1 (temperature): raw unsigned code, used directly
- channel 2 (enable): bit 0 only

The voltage channel is scaled at 3.3 V full scale over 256 codes, which is
12 890 625 nV per LSB. The other channels have a fixed scale of 1.
"""

from dataclasses import dataclass
from enum import Enum, auto

from .channels import NUM_CHANNELS, ChannelKind, get_channel
from .errors import InvalidChannelError, ReadOnlyPropertyError

NANO = 1_000_000_000

VOLTAGE_FULL_SCALE_NV = 3_300_000_000
VOLTAGE_CODES = 256
NANO_PER_LSB = VOLTAGE_FULL_SCALE_NV // VOLTAGE_CODES  # 12890625 nV

VOLTAGE_BITS = 12
VOLTAGE_SIGN_BIT = VOLTAGE_BITS - 1
ENABLE_MASK = 0x01

SAMPLING_FREQUENCY = 10


class ChannelProperty(Enum):
    """Channel properties that can be queried."""

    RAW = auto()
    SCALE = auto()
    SAMPLING_FREQUENCY = auto()


class ValueFormat(Enum):
    """Representation of a property value.

    - INT: plain integer
    - INT_PLUS_NANO: integer part plus nano fraction
    """

    INT = auto()
    INT_PLUS_NANO = auto()


@dataclass(frozen=True)
class PhysicalValue:
    """An integer plus a nano fraction, both carrying the sign of the value.

    Attributes:
        integer: Whole units
        nano: Fractional part in units of 1e-9 (|nano| < 1e9)
    """

    integer: int
    nano: int = 0

    def __post_init__(self):
        if not -NANO < self.nano < NANO:
            raise ValueError(f"Nano fraction {self.nano} out of range")

    @classmethod
    def from_nano(cls, total: int) -> "PhysicalValue":
        """Split a value expressed in nano units into integer and fraction."""
        sign = -1 if total < 0 else 1
        integer, nano = divmod(abs(total), NANO)
        return cls(sign * integer, sign * nano)

    @property
    def total_nano(self) -> int:
        return self.integer * NANO + self.nano

    def __float__(self) -> float:
        return self.total_nano / NANO

    def __str__(self) -> str:
        sign = "-" if self.total_nano < 0 else ""
        return f"{sign}{abs(self.integer)}.{abs(self.nano):09d}"


VOLTAGE_SCALE = PhysicalValue(0, NANO_PER_LSB)


def _check_channel(channel: int) -> ChannelKind:
    if not isinstance(channel, int) or not 0 <= channel < NUM_CHANNELS:
        raise InvalidChannelError(f"Channel {channel!r} out of range [0-2]")
    return get_channel(channel).kind


def sign_extend(value: int, index: int) -> int:
    """Sign-extend ``value`` using bit ``index`` as the sign bit.

    Bits above ``index`` are discarded first.
    """
    width = index + 1
    value &= (1 << width) - 1
    if value & (1 << index):
        value -= 1 << width
    return value


def decode(channel: int, raw: int) -> int:
    """Decode a raw register value read from ``channel``.

    Raises:
        InvalidChannelError: If channel out of range
    """
    kind = _check_channel(channel)
    if kind is ChannelKind.ANALOG_INPUT:
        return sign_extend(raw, VOLTAGE_SIGN_BIT)
    if kind is ChannelKind.ENABLE_OUTPUT:
        return raw & ENABLE_MASK
    return raw


def encode_enable(value: int) -> int:
    """Encode a requested enable state as the register byte (0 or 1)."""
    return 1 if value > 0 else 0


def scale(channel: int) -> PhysicalValue | int:
    """Per-LSB scale of ``channel``: nanovolts for the voltage input, else 1."""
    if _check_channel(channel) is ChannelKind.ANALOG_INPUT:
        return VOLTAGE_SCALE
    return 1


def to_physical(channel: int, sample: int) -> PhysicalValue | int:
    """Convert a decoded sample to its physical value.

    The voltage channel gives volts as a PhysicalValue; the other channels
    are unit-less and return the sample unchanged.
    """
    if _check_channel(channel) is ChannelKind.ANALOG_INPUT:
        return PhysicalValue.from_nano(sample * NANO_PER_LSB)
    return sample


def sampling_frequency(channel: int) -> int:
    """Sampling frequency of ``channel``; fixed for the whole device."""
    _check_channel(channel)
    return SAMPLING_FREQUENCY


def set_sampling_frequency(channel: int, value: int) -> None:
    _check_channel(channel)
    raise ReadOnlyPropertyError(
        f"Sampling frequency is fixed at {SAMPLING_FREQUENCY}, cannot set {value!r}"
    )


def set_scale(channel: int, value) -> None:
    _check_channel(channel)
    raise ReadOnlyPropertyError(f"Scale of channel {channel} is fixed")


def scale_available() -> str:
    """Listing of available voltage scales."""
    return str(VOLTAGE_SCALE)


def sampling_frequency_available() -> str:
    """Listing of available sampling frequencies."""
    return str(SAMPLING_FREQUENCY)


def value_format(channel: int, prop: ChannelProperty) -> ValueFormat:
    """Representation used when writing ``prop`` on ``channel``.

    Raises:
        InvalidChannelError: If channel out of range
        ValueError: If prop is not a channel property
    """
    kind = _check_channel(channel)
    if prop is ChannelProperty.RAW or prop is ChannelProperty.SAMPLING_FREQUENCY:
        return ValueFormat.INT
    if prop is ChannelProperty.SCALE:
        if kind is ChannelKind.ANALOG_INPUT:
            return ValueFormat.INT_PLUS_NANO
        return ValueFormat.INT
    raise ValueError(f"Unknown channel property: {prop!r}")
