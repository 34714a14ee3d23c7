"""hlampctl channel table and register address map.

The device exposes three logical channels over one I2C address:

- channel 0: analog voltage input (12-bit signed, register 0x02)
- channel 1: temperature input (raw byte code, register 0x01)
- channel 2: lamp enable output (bit 0, register 0x03)

The register addresses are fixed by the device firmware and are kept here
as named constants tied to each channel role.
"""

from dataclasses import dataclass
from enum import Enum, auto


class ChannelKind(Enum):
    """Physical role of a channel."""

    ANALOG_INPUT = auto()
    TEMPERATURE_INPUT = auto()
    ENABLE_OUTPUT = auto()


class Direction(Enum):
    """Data direction of a channel.

    - INPUT: read-only, the device drives the value
    - OUTPUT: writable by the host; the latched register can still be read back
    """

    INPUT = auto()
    OUTPUT = auto()


class RegAddr:
    """Device register addresses, one per channel role."""

    TEMPERATURE = 0x01
    VOLTAGE = 0x02
    ENABLE = 0x03


@dataclass(frozen=True)
class ChannelDescriptor:
    """Definition of a single hlampctl channel.

    Attributes:
        index: Channel index (0-2)
        kind: Physical role of the channel
        direction: INPUT or OUTPUT
        register: Register address backing the channel (0x00-0xFF)
        name: Short attribute-style name (e.g. 'in_voltage0')
        description: Optional human-readable description
    """

    index: int
    kind: ChannelKind
    direction: Direction
    register: int
    name: str
    description: str = ""

    def __post_init__(self):
        """Validate register address is in valid range."""
        if not 0 <= self.register <= 0xFF:
            raise ValueError(
                f"Register address {self.register:#04x} out of range [0x00-0xFF]"
            )

    @property
    def writable(self) -> bool:
        return self.direction is Direction.OUTPUT


CHANNELS: tuple[ChannelDescriptor, ...] = (
    ChannelDescriptor(
        0,
        ChannelKind.ANALOG_INPUT,
        Direction.INPUT,
        RegAddr.VOLTAGE,
        "in_voltage0",
        "Lamp supply voltage, 12-bit signed ADC code",
    ),
    ChannelDescriptor(
        1,
        ChannelKind.TEMPERATURE_INPUT,
        Direction.INPUT,
        RegAddr.TEMPERATURE,
        "in_temp1",
        "Lamp temperature, raw unsigned code",
    ),
    ChannelDescriptor(
        2,
        ChannelKind.ENABLE_OUTPUT,
        Direction.OUTPUT,
        RegAddr.ENABLE,
        "out_voltage2",
        "Lamp enable, 0 = off, 1 = on",
    ),
)

NUM_CHANNELS = len(CHANNELS)

CHANNELS_BY_NAME: dict[str, ChannelDescriptor] = {ch.name: ch for ch in CHANNELS}


def get_channel(index_or_name: int | str) -> ChannelDescriptor:
    """Get a channel descriptor by index or name.

    Args:
        index_or_name: Channel index (int) or channel name (str)

    Returns:
        Channel descriptor

    Raises:
        KeyError: If channel not found
    """
    if isinstance(index_or_name, str):
        if index_or_name not in CHANNELS_BY_NAME:
            raise KeyError(f"Unknown channel name: {index_or_name!r}")
        return CHANNELS_BY_NAME[index_or_name]
    if not 0 <= index_or_name < NUM_CHANNELS:
        raise KeyError(f"Unknown channel index: {index_or_name}")
    return CHANNELS[index_or_name]


def get_all_channels(direction: Direction | None = None) -> list[ChannelDescriptor]:
    """Get all channel descriptors, optionally filtered by direction."""
    if direction is None:
        return list(CHANNELS)
    return [ch for ch in CHANNELS if ch.direction == direction]
