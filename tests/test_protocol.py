"""Unit tests for BusGuard and ChannelDispatcher."""

import threading

import pytest

from conftest import RecordingLink
from fastcs_hlampctl.channels import RegAddr
from fastcs_hlampctl.errors import BusError, InvalidChannelError
from fastcs_hlampctl.protocol import BusGuard, ChannelDispatcher


@pytest.fixture
def dispatcher(link):
    return ChannelDispatcher(BusGuard(link))


class TestBusGuard:
    """Tests for exclusive bus access."""

    def test_acquire_yields_transport(self, link):
        guard = BusGuard(link)
        with guard.acquire() as transport:
            assert transport is link
            assert guard.locked
        assert not guard.locked

    def test_released_on_error(self, link):
        guard = BusGuard(link)
        with pytest.raises(RuntimeError):
            with guard.acquire():
                raise RuntimeError("boom")
        assert not guard.locked


class TestRead:
    """Tests for channel reads."""

    def test_read_voltage_uses_register_2(self, dispatcher, link):
        link.registers[RegAddr.VOLTAGE] = 0x7F
        assert dispatcher.read(0) == 0x7F
        assert link.calls == [("read", 0x02)]

    def test_read_temperature_uses_register_1(self, dispatcher, link):
        link.registers[RegAddr.TEMPERATURE] = 0xC8
        assert dispatcher.read(1) == 0xC8
        assert link.calls == [("read", 0x01)]

    def test_read_enable_uses_register_3(self, dispatcher, link):
        link.registers[RegAddr.ENABLE] = 0xFE
        assert dispatcher.read(2) == 0
        link.registers[RegAddr.ENABLE] = 0xA5
        assert dispatcher.read(2) == 1
        assert link.calls == [("read", 0x03), ("read", 0x03)]

    def test_read_voltage_sign_extends(self, dispatcher, link):
        # A link returning more than 8 bits exercises the 12-bit field
        link.registers[RegAddr.VOLTAGE] = 0x08FF
        assert dispatcher.read(0) == -1793

    def test_read_raw_is_undecoded(self, dispatcher, link):
        link.registers[RegAddr.ENABLE] = 0xA5
        assert dispatcher.read_raw(2) == 0xA5

    @pytest.mark.parametrize("channel", [-1, 3, 4, "0", None])
    def test_invalid_channel(self, dispatcher, link, channel):
        with pytest.raises(InvalidChannelError):
            dispatcher.read(channel)
        assert link.calls == []

    def test_bus_error(self, dispatcher, link):
        link.fail_registers.add(RegAddr.VOLTAGE)
        with pytest.raises(BusError, match="0x02") as exc_info:
            dispatcher.read(0)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert not dispatcher.guard.locked

    def test_negative_result_is_bus_error(self, dispatcher, link):
        link.registers[RegAddr.TEMPERATURE] = -5
        with pytest.raises(BusError):
            dispatcher.read(1)

    def test_usable_after_error(self, dispatcher, link):
        link.fail_registers.add(RegAddr.VOLTAGE)
        with pytest.raises(BusError):
            dispatcher.read(0)
        link.fail_registers.clear()
        assert dispatcher.read(0) == 0x80


class TestWrite:
    """Tests for channel writes."""

    @pytest.mark.parametrize("value, expected", [(1, 1), (7, 1), (0, 0), (-3, 0)])
    def test_write_enable(self, dispatcher, link, value, expected):
        assert dispatcher.write(2, value) is None
        assert link.calls == [("write", 0x03, expected)]
        assert link.registers[RegAddr.ENABLE] == expected

    @pytest.mark.parametrize("channel", [0, 1])
    def test_inputs_are_read_only(self, dispatcher, link, channel):
        with pytest.raises(InvalidChannelError, match="read-only"):
            dispatcher.write(channel, 1)
        assert link.calls == []

    @pytest.mark.parametrize("channel", [-1, 3])
    def test_invalid_channel(self, dispatcher, channel):
        with pytest.raises(InvalidChannelError):
            dispatcher.write(channel, 1)

    def test_bus_error(self, dispatcher, link):
        link.fail_registers.add(RegAddr.ENABLE)
        with pytest.raises(BusError, match="write error"):
            dispatcher.write(2, 1)
        assert not dispatcher.guard.locked


class TestConcurrency:
    """Concurrent callers never overlap bus transactions."""

    def test_no_interleaving(self):
        link = RecordingLink(delay=0.0005)
        dispatcher = ChannelDispatcher(BusGuard(link))
        errors: list[Exception] = []

        def reader():
            try:
                for i in range(50):
                    dispatcher.read(i % 3)
            except Exception as e:  # pragma: no cover
                errors.append(e)

        def writer():
            try:
                for i in range(50):
                    dispatcher.write(2, i % 2)
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=f) for f in (reader, writer, reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(link.calls) == 150
        assert link.overlaps == 0
        assert link.max_in_flight == 1
