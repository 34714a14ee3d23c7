"""Device session for one bound hlampctl device.

A DeviceSession owns the only BusGuard for its transport. Construction
checks the adapter capabilities and probes the device once; a session object
is only ever handed back when both succeed.

Example usage::

    from fastcs_hlampctl import DeviceSession, HlampctlTransport

    with HlampctlTransport("sim://lamp") as transport:
        session = DeviceSession(transport)
        session.write(2, 1)  # Lamp on
        print(session.read_physical(0))  # Supply voltage in volts
"""

import logging
from enum import Enum, auto

from . import codec
from .channels import CHANNELS, NUM_CHANNELS, ChannelDescriptor
from .constants import DEVICE_NAME
from .errors import DeviceNotFoundError, SessionStateError, UnsupportedTransportError
from .protocol import BusGuard, ChannelDispatcher
from .transport import HlampctlTransport

logger = logging.getLogger(__name__)

_REQUIRED_PRIMITIVES = ("read_byte", "write_byte", "probe_presence", "supports_i2c")


class SessionState(Enum):
    """Lifecycle of a device session."""

    UNINITIALIZED = auto()
    PROBING = auto()
    READY = auto()
    FAILED = auto()


class DeviceSession:
    """Channel access for one physical hlampctl device.

    Attributes:
        name: Device name reported at registration
        channels: The fixed channel table
        num_channels: Always 3
        state: Current lifecycle state
    """

    def __init__(self, transport: HlampctlTransport, name: str = DEVICE_NAME):
        """Bind to a device and probe for it.

        Args:
            transport: Connected transport for the device
            name: Device name

        Raises:
            UnsupportedTransportError: If the adapter lacks I2C transfers
            DeviceNotFoundError: If the presence probe fails
        """
        self.name = name
        self.channels: tuple[ChannelDescriptor, ...] = CHANNELS
        self.num_channels = NUM_CHANNELS
        self.state = SessionState.UNINITIALIZED

        if not self._transport_supported(transport):
            self.state = SessionState.FAILED
            raise UnsupportedTransportError(
                f"Transport {transport!r} does not support I2C register access"
            )

        self._guard = BusGuard(transport)
        self._dispatcher = ChannelDispatcher(self._guard)
        self._probe()

    @staticmethod
    def _transport_supported(transport) -> bool:
        for primitive in _REQUIRED_PRIMITIVES:
            if not callable(getattr(transport, primitive, None)):
                return False
        return bool(transport.supports_i2c())

    def _probe(self) -> None:
        self.state = SessionState.PROBING
        with self._guard.acquire() as link:
            try:
                result = link.probe_presence()
            except OSError as e:
                self._probe_failed(e)
                raise DeviceNotFoundError(f"{self.name}: I2C device not found") from e

        if isinstance(result, int) and result < 0:
            self._probe_failed(result)
            raise DeviceNotFoundError(f"{self.name}: I2C device not found")

        self.state = SessionState.READY
        logger.info(f"{self.name}: device present, {self.num_channels} channels")

    def _probe_failed(self, reason) -> None:
        self.state = SessionState.FAILED
        logger.error(f"I2C device not found ({self.name}): {reason}")

    def _check_ready(self) -> None:
        if self.state is not SessionState.READY:
            raise SessionStateError(f"Session is {self.state.name}, not READY")

    @property
    def guard(self) -> BusGuard:
        return self._guard

    def read(self, channel: int) -> int:
        """Read a decoded channel sample (see ChannelDispatcher.read)."""
        self._check_ready()
        return self._dispatcher.read(channel)

    def write(self, channel: int, value: int) -> None:
        """Write a channel value (see ChannelDispatcher.write)."""
        self._check_ready()
        self._dispatcher.write(channel, value)

    def read_physical(self, channel: int) -> codec.PhysicalValue | int:
        """Read a channel and convert it to physical units."""
        return codec.to_physical(channel, self.read(channel))

    def scale(self, channel: int) -> codec.PhysicalValue | int:
        self._check_ready()
        return codec.scale(channel)

    def sampling_frequency(self, channel: int) -> int:
        self._check_ready()
        return codec.sampling_frequency(channel)

    def set_sampling_frequency(self, channel: int, value: int) -> None:
        self._check_ready()
        codec.set_sampling_frequency(channel, value)

    def set_scale(self, channel: int, value) -> None:
        self._check_ready()
        codec.set_scale(channel, value)

    def value_format(
        self, channel: int, prop: codec.ChannelProperty
    ) -> codec.ValueFormat:
        self._check_ready()
        return codec.value_format(channel, prop)

    def scale_available(self) -> str:
        return codec.scale_available()

    def sampling_frequency_available(self) -> str:
        return codec.sampling_frequency_available()
