"""Unit tests for DeviceSession construction and channel access."""

import threading

import pytest

from conftest import RecordingLink
from fastcs_hlampctl.channels import CHANNELS, RegAddr
from fastcs_hlampctl.codec import ChannelProperty, PhysicalValue, ValueFormat
from fastcs_hlampctl.errors import (
    BusError,
    DeviceNotFoundError,
    InvalidChannelError,
    ReadOnlyPropertyError,
    SessionStateError,
    UnsupportedTransportError,
)
from fastcs_hlampctl.session import DeviceSession, SessionState
from fastcs_hlampctl.transport import HlampctlTransport


class TestConstruction:
    """Tests for the capability check and presence probe."""

    def test_ready_after_probe(self, link):
        session = DeviceSession(link)
        assert session.state == SessionState.READY
        assert link.calls == [("probe",)]
        assert not session.guard.locked

    def test_registration_data(self, session):
        assert session.name == "hlampctl"
        assert session.num_channels == 3
        assert session.channels == CHANNELS

    def test_custom_name(self, link):
        assert DeviceSession(link, name="lamp1").name == "lamp1"

    def test_probe_failure(self, link, caplog):
        link.present = False
        with pytest.raises(DeviceNotFoundError, match="I2C device not found"):
            DeviceSession(link)
        assert "I2C device not found" in caplog.text
        assert link.calls == [("probe",)]

    def test_unsupported_transport(self, link):
        link.i2c_capable = False
        with pytest.raises(UnsupportedTransportError):
            DeviceSession(link)
        assert link.calls == []

    def test_missing_primitive(self):
        class ReadOnlyLink:
            def read_byte(self, register):
                return 0

        with pytest.raises(UnsupportedTransportError):
            DeviceSession(ReadOnlyLink())  # type: ignore[arg-type]

    def test_calls_require_ready_state(self, session, link):
        session.state = SessionState.FAILED
        with pytest.raises(SessionStateError):
            session.read(0)
        with pytest.raises(SessionStateError):
            session.write(2, 1)
        assert link.calls == [("probe",)]

    def test_failed_probe_never_yields_session(self, link):
        link.present = False
        session = None
        with pytest.raises(DeviceNotFoundError):
            session = DeviceSession(link)
        assert session is None


class TestChannelAccess:
    """Tests for reads and writes through a ready session."""

    def test_read_all_channels(self, session, link):
        link.registers[RegAddr.ENABLE] = 0x03
        assert session.read(0) == 0x80
        assert session.read(1) == 0x3C
        assert session.read(2) == 1

    def test_write_enable_then_read_back(self, session, link):
        session.write(2, 5)
        assert link.registers[RegAddr.ENABLE] == 1
        assert session.read(2) == 1
        session.write(2, -5)
        assert session.read(2) == 0

    @pytest.mark.parametrize("channel", [0, 1])
    def test_write_inputs_fails(self, session, channel):
        with pytest.raises(InvalidChannelError):
            session.write(channel, 1)

    def test_read_physical(self, session):
        assert session.read_physical(0) == PhysicalValue(1, 650_000_000)
        assert session.read_physical(1) == 0x3C

    def test_errors_leave_session_usable(self, session, link):
        link.fail_registers.add(RegAddr.TEMPERATURE)
        with pytest.raises(BusError):
            session.read(1)
        with pytest.raises(InvalidChannelError):
            session.read(3)
        link.fail_registers.clear()
        assert session.read(1) == 0x3C
        assert session.state == SessionState.READY

    def test_fixed_properties(self, session):
        assert session.scale(0) == PhysicalValue(0, 12_890_625)
        assert session.scale(1) == 1
        assert session.sampling_frequency(2) == 10
        assert session.scale_available() == "0.012890625"
        assert session.sampling_frequency_available() == "10"
        assert session.value_format(0, ChannelProperty.SCALE) == (
            ValueFormat.INT_PLUS_NANO
        )
        with pytest.raises(ReadOnlyPropertyError):
            session.set_sampling_frequency(0, 100)
        with pytest.raises(ReadOnlyPropertyError):
            session.set_scale(0, 1)


class TestConcurrentSession:
    """Tests that independent callers are serialized by the session guard."""

    def test_two_callers_never_interleave(self):
        link = RecordingLink(delay=0.0005)
        session = DeviceSession(link)

        def toggle():
            for i in range(40):
                session.write(2, i % 2)
                session.read(2)

        def sample():
            for _ in range(80):
                session.read(0)

        threads = [threading.Thread(target=toggle), threading.Thread(target=sample)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert link.overlaps == 0
        assert link.max_in_flight == 1
        assert len(link.calls) == 1 + 80 + 80


class TestSimulatedSession:
    """Tests against the simulator behind the real transport."""

    def test_simulated_device(self):
        with HlampctlTransport("sim://lamp") as transport:
            session = DeviceSession(transport)
            session.write(2, 1)
            assert session.read(2) == 1
            assert transport.simulator.memory[RegAddr.ENABLE] == 1

    def test_simulated_absent_device(self):
        with HlampctlTransport("sim://absent") as transport:
            with pytest.raises(DeviceNotFoundError):
                DeviceSession(transport)

    def test_simulated_smbus_only_adapter(self):
        with HlampctlTransport("sim://smbus-only") as transport:
            with pytest.raises(UnsupportedTransportError):
                DeviceSession(transport)

    def test_unconnected_transport(self):
        transport = HlampctlTransport("sim://lamp")
        with pytest.raises(UnsupportedTransportError):
            DeviceSession(transport)

    def test_bus_closed_under_session(self):
        transport = HlampctlTransport("sim://lamp")
        transport.connect()
        session = DeviceSession(transport)
        transport.disconnect()
        with pytest.raises(BusError):
            session.read(0)
        with pytest.raises(BusError):
            session.write(2, 1)
        assert not session.guard.locked
