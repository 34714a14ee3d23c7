"""hlampctl hardware simulator for testing without real hardware.

Simulates the register map of the lamp controller behind an I2C address,
allowing testing and development without physical hardware. Failures are
reported as ``OSError`` in the same way smbus2 reports them for a real bus.
"""

import errno
import logging
import threading

from .channels import RegAddr

logger = logging.getLogger(__name__)

DEFAULT_REGISTERS = {
    RegAddr.TEMPERATURE: 0x3C,  # raw temperature code
    RegAddr.VOLTAGE: 0x80,  # mid-scale ADC code
    RegAddr.ENABLE: 0x00,  # lamp off
}


class HlampctlSimulator:
    """Software simulator for the hlampctl device.

    Attributes:
        memory: Simulated register memory (256 registers, 8-bit each)
        present: False simulates a device that never acknowledges
        i2c_capable: False simulates an SMBus-only adapter
        fail_registers: Register addresses whose transfers fail with EIO
    """

    def __init__(self, present: bool = True, i2c_capable: bool = True):
        """Initialize simulator with default register values."""
        self.present = present
        self.i2c_capable = i2c_capable
        self.fail_registers: set[int] = set()
        self.memory: dict[int, int] = {}
        self._lock = threading.Lock()
        self.reset()

    def _check(self, register: int | None = None) -> None:
        if not self.present:
            raise OSError(errno.ENXIO, "No such device or address")
        if register is not None and register in self.fail_registers:
            raise OSError(errno.EIO, f"Input/output error at register {register:#04x}")

    def receive_byte(self) -> int:
        """Bare receive with no register address, as used by the presence probe."""
        self._check()
        logger.debug("Simulator: receive byte")
        return 0

    def read_byte_data(self, register: int) -> int:
        self._check(register)
        with self._lock:
            value = self.memory[register]
        logger.debug(f"Simulator: Read reg 0x{register:02X} = 0x{value:02X}")
        return value

    def write_byte_data(self, register: int, value: int) -> None:
        self._check(register)
        if not 0 <= value <= 0xFF:
            raise OSError(errno.EINVAL, f"Byte value {value} out of range")
        with self._lock:
            self.memory[register] = value
        logger.debug(f"Simulator: Write reg 0x{register:02X} = 0x{value:02X}")

    def reset(self) -> None:
        """Reset simulator registers to their power-on values."""
        with self._lock:
            for addr in range(256):
                self.memory[addr] = 0
            self.memory.update(DEFAULT_REGISTERS)
        self.fail_registers.clear()
