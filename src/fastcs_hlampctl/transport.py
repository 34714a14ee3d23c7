"""I2C transport for hlampctl hardware communication."""

import errno
import logging

from smbus2 import I2cFunc, SMBus, i2c_msg

from .constants import DEFAULT_ADDRESS

logger = logging.getLogger(__name__)

SIM_PREFIX = "sim://"


def parse_bus(bus: str | int) -> str | int:
    """Turn a bus argument into what SMBus expects.

    A bare number (``"1"``) selects ``/dev/i2c-1``; anything else is
    passed through as a device path or ``sim://`` name.
    """
    if isinstance(bus, int):
        return bus
    if bus.isdigit():
        return int(bus)
    return bus


class HlampctlTransport:
    """Blocking single-byte register transport for one I2C device.

    Provides the minimal primitive set the channel core needs: one-byte
    register read, one-byte register write, a bare presence probe and the
    adapter capability check. Bus failures propagate as ``OSError``.

    Supports simulation mode: Use bus="sim://name" to use the software
    simulator instead of real hardware. ``sim://absent`` simulates a missing
    device and ``sim://smbus-only`` an adapter without plain I2C transfers.
    """

    def __init__(self, bus: str | int, address: int = DEFAULT_ADDRESS):
        """Initialize transport for given bus and device address.

        Args:
            bus: I2C bus number, device path (e.g. '/dev/i2c-1')
                 or 'sim://name' for simulator
            address: 7-bit device address
        """
        if not 0x03 <= address <= 0x77:
            raise ValueError(f"I2C address {address:#04x} out of range [0x03-0x77]")

        self.bus = parse_bus(bus)
        self.address = address
        self._is_simulation = isinstance(self.bus, str) and self.bus.startswith(
            SIM_PREFIX
        )
        self._smbus: SMBus | None = None
        self._simulator = None
        self._connected = False

    @property
    def simulator(self):
        """The simulator behind a sim:// bus, None for hardware."""
        return self._simulator

    def connect(self) -> None:
        """Open the I2C bus or start the simulator.

        Raises:
            OSError: If the bus device cannot be opened (hardware mode)
        """
        if self._connected:
            logger.warning(f"Already connected to {self.bus}")
            return

        if self._is_simulation:
            from .simulator import HlampctlSimulator

            name = self.bus[len(SIM_PREFIX) :]  # type: ignore[index]
            logger.info(f"Starting hlampctl simulator for {self.bus}")
            self._simulator = HlampctlSimulator(
                present=name != "absent", i2c_capable=name != "smbus-only"
            )
        else:
            logger.info(f"Opening I2C bus {self.bus} for device {self.address:#04x}")
            self._smbus = SMBus(self.bus)

        self._connected = True
        logger.info(f"Connected to {self.bus}")

    def disconnect(self) -> None:
        """Close the I2C bus or stop the simulator."""
        if not self._connected:
            return

        logger.info(f"Disconnecting from {self.bus}")
        if self._smbus:
            self._smbus.close()
            self._smbus = None
        self._simulator = None
        self._connected = False

    @property
    def connected(self) -> bool:
        """Check if transport is connected."""
        if self._is_simulation:
            return self._connected and self._simulator is not None
        return self._connected and self._smbus is not None

    def _check_connected(self) -> None:
        if not self.connected:
            raise OSError(errno.ENOTCONN, f"Not connected to {self.bus}")

    def supports_i2c(self) -> bool:
        """Check the adapter supports plain I2C transfers."""
        if not self.connected:
            return False
        if self._simulator is not None:
            return self._simulator.i2c_capable
        return bool(self._smbus.funcs & I2cFunc.I2C)  # type: ignore[union-attr]

    def probe_presence(self) -> None:
        """Receive one byte with no register addressing.

        Raises:
            OSError: If the device does not acknowledge
        """
        self._check_connected()
        logger.debug(f"Probing device {self.address:#04x}")
        if self._simulator is not None:
            self._simulator.receive_byte()
        else:
            msg = i2c_msg.read(self.address, 1)
            self._smbus.i2c_rdwr(msg)  # type: ignore[union-attr]

    def read_byte(self, register: int) -> int:
        """Read one byte from a device register."""
        self._check_connected()
        if self._simulator is not None:
            value = self._simulator.read_byte_data(register)
        else:
            value = self._smbus.read_byte_data(  # type: ignore[union-attr]
                self.address, register
            )
        logger.debug(f"RX: reg {register:#04x} -> {value:#04x}")
        return value

    def write_byte(self, register: int, value: int) -> None:
        """Write one byte to a device register."""
        self._check_connected()
        logger.debug(f"TX: reg {register:#04x} <- {value:#04x}")
        if self._simulator is not None:
            self._simulator.write_byte_data(register, value)
        else:
            self._smbus.write_byte_data(  # type: ignore[union-attr]
                self.address, register, value
            )

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
