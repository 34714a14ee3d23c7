"""FastCS controller for hlampctl hardware.

Provides EPICS PVs for monitoring the lamp supply voltage and temperature
and for switching the lamp enable output, through the channel core.
"""

import asyncio
import logging

from fastcs.attributes import AttrR, AttrRW
from fastcs.controllers import Controller
from fastcs.datatypes import Bool, Float, Int, String
from fastcs.methods import command

from . import codec
from .channel_io import HlampctlChannelIO, HlampctlChannelIORef
from .constants import DEFAULT_ADDRESS, DEVICE_NAME, FAST_UPDATE, SLOW_UPDATE
from .session import DeviceSession
from .transport import HlampctlTransport

logger = logging.getLogger(__name__)


class HlampctlController(Controller):
    """Top-level controller for one hlampctl device.

    Attributes:
        connected: Connection status
        device_name: Device name
        num_channels: Number of channels (always 3)
        in_voltage0_raw: Signed 12-bit voltage code (channel 0)
        in_voltage0_value: Voltage in volts (channel 0)
        in_voltage0_scale: Volts per LSB of channel 0
        in_temp1_raw: Raw temperature code (channel 1)
        out_voltage2_raw: Lamp enable (channel 2), any positive value switches on
        sampling_frequency: Fixed sampling frequency
        sampling_frequency_available: Listing of sampling frequencies
        in_voltage_scale_available: Listing of voltage scales
        status_msg: Human-readable status message
    """

    def __init__(
        self, bus: str | int, address: int = DEFAULT_ADDRESS, name: str = DEVICE_NAME
    ):
        """Initialize hlampctl controller.

        Args:
            bus: I2C bus number, device path or 'sim://name'
            address: 7-bit I2C address of the device
            name: Device name
        """
        self._bus = bus
        self._address = address
        self._name = name
        self._transport: HlampctlTransport | None = None
        self._session: DeviceSession | None = None

        # Create IO handler (session is attached after the probe on connect)
        self._channel_io = HlampctlChannelIO(None)

        super().__init__(ios=[self._channel_io])

        # Connection status (no IO, updated manually)
        self.connected = AttrR(Bool())

        # Registration data (no IO, set on connect)
        self.device_name = AttrR(String())
        self.num_channels = AttrR(Int())

        # Channel 0: supply voltage
        self.in_voltage0_raw = AttrR(
            Int(), io_ref=HlampctlChannelIORef(channel=0, update_period=FAST_UPDATE)
        )
        self.in_voltage0_value = AttrR(
            Float(prec=9),
            io_ref=HlampctlChannelIORef(
                channel=0, physical=True, update_period=FAST_UPDATE
            ),
        )
        self.in_voltage0_scale = AttrR(Float(prec=9))

        # Channel 1: temperature
        self.in_temp1_raw = AttrR(
            Int(), io_ref=HlampctlChannelIORef(channel=1, update_period=SLOW_UPDATE)
        )

        # Channel 2: lamp enable
        self.out_voltage2_raw = AttrRW(
            Int(), io_ref=HlampctlChannelIORef(channel=2, update_period=SLOW_UPDATE)
        )

        # Fixed properties and listings (no IO)
        self.sampling_frequency = AttrR(Int())
        self.sampling_frequency_available = AttrR(String())
        self.in_voltage_scale_available = AttrR(String())

        # Status message (no IO)
        self.status_msg = AttrR(String())

    @property
    def session(self) -> DeviceSession | None:
        return self._session

    async def connect(self) -> None:
        """Open the bus, probe the device and start serving channels."""
        if self._transport:
            await self.disconnect()

        try:
            self._transport = HlampctlTransport(self._bus, self._address)
            await asyncio.to_thread(self._transport.connect)
            self._session = await asyncio.to_thread(
                DeviceSession, self._transport, self._name
            )
        except Exception as e:
            logger.error(f"Failed to connect: {e}")
            await self.status_msg.update(f"Connection failed: {e}")
            if self._transport:
                self._transport.disconnect()
                self._transport = None
            raise

        self._channel_io.set_session(self._session)

        await self.device_name.update(self._session.name)
        await self.num_channels.update(self._session.num_channels)
        await self.in_voltage0_scale.update(float(self._session.scale(0)))
        await self.sampling_frequency.update(self._session.sampling_frequency(0))
        await self.sampling_frequency_available.update(
            self._session.sampling_frequency_available()
        )
        await self.in_voltage_scale_available.update(self._session.scale_available())

        await self.connected.update(True)
        logger.info(f"Connected to {self._name} on {self._bus}")
        await self.status_msg.update(f"Connected to {self._bus}")

    async def disconnect(self) -> None:
        """Drop the session and close the bus."""
        self._channel_io.set_session(None)
        self._session = None

        if self._transport:
            self._transport.disconnect()
            self._transport = None

        await self.connected.update(False)
        logger.info(f"Disconnected from {self._name}")
        await self.status_msg.update("Disconnected")

    def _check_connected(self) -> None:
        """Check if connected and raise RuntimeError if not."""
        if not self._session:
            raise RuntimeError("Not connected to hlampctl hardware")

    # Commands

    @command()
    async def refresh(self) -> None:
        """Read all channels now instead of waiting for the next poll."""
        self._check_connected()
        for attr in (
            self.in_voltage0_raw,
            self.in_voltage0_value,
            self.in_temp1_raw,
            self.out_voltage2_raw,
        ):
            await self._channel_io.update(attr)
        await self.status_msg.update("Refreshed")

    @command()
    async def lamp_on(self) -> None:
        """Switch the lamp enable output on."""
        await self._set_enable(1)

    @command()
    async def lamp_off(self) -> None:
        """Switch the lamp enable output off."""
        await self._set_enable(0)

    async def _set_enable(self, value: int) -> None:
        self._check_connected()
        await asyncio.to_thread(self._session.write, 2, value)  # type: ignore[union-attr]
        await self._channel_io.update(self.out_voltage2_raw)
        state = "on" if codec.encode_enable(value) else "off"
        logger.info(f"Lamp switched {state}")
        await self.status_msg.update(f"Lamp {state}")
