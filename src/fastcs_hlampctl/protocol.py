"""hlampctl channel dispatch.

This module maps logical channels onto single-byte register transactions,
building on top of the HlampctlTransport layer. All bus access goes through
a BusGuard so that only one transaction is in flight per device.

Channel map:
- read 0: register 0x02, sign-extended from bit 11
- read 1: register 0x01, raw code
- read 2: register 0x03, masked to bit 0
- write 2: register 0x03, 1 if value > 0 else 0
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from . import codec
from .channels import NUM_CHANNELS, ChannelDescriptor, get_channel
from .errors import BusError, InvalidChannelError
from .transport import HlampctlTransport

logger = logging.getLogger(__name__)


class BusGuard:
    """Exclusive access to one device transport.

    The transport is only reachable through :meth:`acquire`, which holds the
    lock for the duration of the ``with`` block and releases it on every exit
    path. Waiters are not served in any particular order.
    """

    def __init__(self, transport: HlampctlTransport):
        """Initialize guard.

        Args:
            transport: Connected transport, owned by this guard from now on
        """
        self._transport = transport
        self._lock = threading.Lock()

    @contextmanager
    def acquire(self) -> Iterator[HlampctlTransport]:
        """Hold the bus for exactly one transaction."""
        with self._lock:
            yield self._transport

    @property
    def locked(self) -> bool:
        return self._lock.locked()


class ChannelDispatcher:
    """Routes channel reads and writes to register transactions.

    Handles the channel to register mapping, direction checks, bus error
    translation and decoding of the returned raw bytes.
    """

    def __init__(self, guard: BusGuard):
        """Initialize dispatcher.

        Args:
            guard: BusGuard wrapping the device transport
        """
        self.guard = guard

    @staticmethod
    def resolve(channel: int) -> ChannelDescriptor:
        """Look up the descriptor for a channel index.

        Raises:
            InvalidChannelError: If channel is not 0-2
        """
        if not isinstance(channel, int) or not 0 <= channel < NUM_CHANNELS:
            raise InvalidChannelError(f"Channel {channel!r} out of range [0-2]")
        return get_channel(channel)

    def read_raw(self, channel: int) -> int:
        """Read the undecoded register byte backing ``channel``.

        Raises:
            InvalidChannelError: If channel is not 0-2
            BusError: If the register read fails
        """
        desc = self.resolve(channel)
        logger.debug(f"Reading channel {channel} from register {desc.register:#04x}")

        with self.guard.acquire() as link:
            try:
                raw = link.read_byte(desc.register)
            except OSError as e:
                raise BusError(
                    f"Register read error at {desc.register:#04x}: {e}"
                ) from e

        if raw < 0:
            raise BusError(f"Register read error at {desc.register:#04x} ({raw})")
        return raw

    def read(self, channel: int) -> int:
        """Read and decode a channel sample.

        Returns:
            Decoded sample (signed 12-bit for channel 0, 0/1 for channel 2)

        Raises:
            InvalidChannelError: If channel is not 0-2
            BusError: If the register read fails
        """
        raw = self.read_raw(channel)
        value = codec.decode(channel, raw)
        logger.debug(f"Channel {channel}: raw {raw:#04x} -> {value}")
        return value

    def write(self, channel: int, value: int) -> None:
        """Write a channel value.

        Only the enable output is writable; any positive value switches it on.

        Raises:
            InvalidChannelError: If channel is not the enable output
            BusError: If the register write fails
        """
        desc = self.resolve(channel)
        if not desc.writable:
            raise InvalidChannelError(f"Channel {channel} ({desc.name}) is read-only")

        data = codec.encode_enable(value)
        logger.debug(
            f"Writing {data:#04x} to channel {channel} "
            f"(register {desc.register:#04x}, requested {value})"
        )

        with self.guard.acquire() as link:
            try:
                result = link.write_byte(desc.register, data)
            except OSError as e:
                raise BusError(
                    f"Register write error at {desc.register:#04x}: {e}"
                ) from e

        if isinstance(result, int) and result < 0:
            raise BusError(f"Register write error at {desc.register:#04x} ({result})")
