"""hlampctl channel I/O classes for FastCS attributes.

This module contains the AttributeIO classes that handle reading and writing
hlampctl channels. The channel core is blocking, so every transaction runs in
a worker thread; the session's BusGuard serializes them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TypeVar

from fastcs.attributes import AttributeIO, AttributeIORef, AttrRW

from .session import DeviceSession

NumberT = TypeVar("NumberT", int, float)

logger = logging.getLogger(__name__)


@dataclass
class HlampctlChannelIORef(AttributeIORef):
    """Reference for hlampctl channel IO operations.

    Attributes:
        channel: Channel index (0-2)
        physical: True to convert the sample to physical units
        update_period: Poll period in seconds (default 1.0)
    """

    channel: int = 0
    physical: bool = False
    update_period: float | None = 1.0


class HlampctlChannelIO(AttributeIO[NumberT, HlampctlChannelIORef]):
    """Handles reading from and writing to hlampctl channels.

    This class bridges FastCS attributes with the DeviceSession. The session
    is attached after the device has been probed on connect.
    """

    def __init__(self, session: DeviceSession | None = None):
        """Initialize channel IO handler.

        Args:
            session: DeviceSession instance (can be None initially)
        """
        super().__init__()
        self._session = session

    def set_session(self, session: DeviceSession | None) -> None:
        """Set the session used for channel I/O, None to detach."""
        self._session = session

    async def update(self, attr):
        """Read a channel and update the attribute.

        Args:
            attr: The attribute to update
        """
        if not self._session:
            return

        channel = attr.io_ref.channel
        try:
            if attr.io_ref.physical:
                value = float(
                    await asyncio.to_thread(self._session.read_physical, channel)
                )
            else:
                value = await asyncio.to_thread(self._session.read, channel)

            await attr.update(attr.dtype(value))
        except Exception as e:
            logger.error(f"Error reading channel {channel}: {e}")

    async def send(self, attr, value):
        """Write an attribute value to its channel.

        Args:
            attr: The attribute being written
            value: The value to write
        """
        if not self._session:
            return

        channel = attr.io_ref.channel
        try:
            await asyncio.to_thread(self._session.write, channel, int(value))

            # Read back so the attribute shows the latched state
            if isinstance(attr, AttrRW):
                await self.update(attr)

        except Exception as e:
            logger.error(f"Error writing channel {channel}: {e}")
