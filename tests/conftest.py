"""Pytest configuration for fastcs-hlampctl tests."""

import errno
import threading
import time

import pytest

from fastcs_hlampctl.channels import RegAddr
from fastcs_hlampctl.session import DeviceSession


def pytest_addoption(parser):
    """Add command line options for testing."""
    parser.addoption(
        "--bus",
        action="store",
        default=None,
        help="hlampctl I2C bus (e.g., 1 or /dev/i2c-1), simulator if omitted",
    )


class RecordingLink:
    """Instrumented stand-in for the I2C transport.

    Records every transaction and counts transactions that start while
    another one is still outstanding.
    """

    def __init__(self, delay: float = 0.0):
        self.registers = {
            RegAddr.TEMPERATURE: 0x3C,
            RegAddr.VOLTAGE: 0x80,
            RegAddr.ENABLE: 0x00,
        }
        self.delay = delay
        self.present = True
        self.i2c_capable = True
        self.fail_registers: set[int] = set()
        self.calls: list[tuple] = []
        self.overlaps = 0
        self.max_in_flight = 0
        self._in_flight = 0
        self._count_lock = threading.Lock()

    def _enter(self, call: tuple) -> None:
        with self._count_lock:
            if self._in_flight:
                self.overlaps += 1
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            self.calls.append(call)
        if self.delay:
            time.sleep(self.delay)

    def _exit(self) -> None:
        with self._count_lock:
            self._in_flight -= 1

    def supports_i2c(self) -> bool:
        return self.i2c_capable

    def probe_presence(self) -> None:
        self._enter(("probe",))
        try:
            if not self.present:
                raise OSError(errno.ENXIO, "No such device or address")
        finally:
            self._exit()

    def read_byte(self, register: int) -> int:
        self._enter(("read", register))
        try:
            if register in self.fail_registers:
                raise OSError(errno.EIO, "Input/output error")
            return self.registers.get(register, 0)
        finally:
            self._exit()

    def write_byte(self, register: int, value: int) -> None:
        self._enter(("write", register, value))
        try:
            if register in self.fail_registers:
                raise OSError(errno.EIO, "Input/output error")
            self.registers[register] = value
        finally:
            self._exit()


@pytest.fixture
def link():
    """An instrumented link with a present device."""
    return RecordingLink()


@pytest.fixture
def session(link):
    """A ready DeviceSession on the instrumented link."""
    return DeviceSession(link)


@pytest.fixture
def hlampctl_bus(request):
    """Get the I2C bus from command line or use simulator."""
    bus = request.config.getoption("--bus", default=None)
    if bus is None:
        return "sim://hlampctl"
    return bus
