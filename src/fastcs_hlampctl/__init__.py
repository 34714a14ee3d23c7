"""Top level API.

This package provides I2C access to the hlampctl lamp controller and a
FastCS controller serving its channels over EPICS.

The device has three channels behind one I2C address:
- Channel 0: analog supply voltage (12-bit signed, 12.890625 mV/LSB)
- Channel 1: temperature (raw unsigned code)
- Channel 2: lamp enable output (0/1)

Layers:
- HlampctlTransport: single-byte register I/O via smbus2 (or simulator)
- BusGuard / ChannelDispatcher: serialized channel to register dispatch
- DeviceSession: presence probe and channel access for one device
- HlampctlController: FastCS attributes for the channels

Example usage::

    from fastcs_hlampctl import DeviceSession, HlampctlTransport

    with HlampctlTransport(1, address=0x48) as transport:
        session = DeviceSession(transport)
        print(session.read(0))           # Signed voltage code
        print(session.read_physical(0))  # Volts, e.g. '1.650000000'
        session.write(2, 1)              # Lamp on

.. data:: __version__
    :type: str

    Version number as calculated by https://github.com/pypa/setuptools_scm
"""

from ._version import __version__
from .channel_io import HlampctlChannelIO, HlampctlChannelIORef
from .channels import (
    CHANNELS,
    NUM_CHANNELS,
    ChannelDescriptor,
    ChannelKind,
    Direction,
    RegAddr,
    get_all_channels,
    get_channel,
)
from .codec import ChannelProperty, PhysicalValue, ValueFormat
from .errors import (
    BusError,
    DeviceNotFoundError,
    HlampctlError,
    InvalidChannelError,
    ReadOnlyPropertyError,
    SessionStateError,
    UnsupportedTransportError,
)
from .hlampctl_controller import HlampctlController
from .protocol import BusGuard, ChannelDispatcher
from .session import DeviceSession, SessionState
from .transport import HlampctlTransport

__all__ = [
    "__version__",
    # Transport and dispatch
    "HlampctlTransport",
    "BusGuard",
    "ChannelDispatcher",
    # Controller
    "HlampctlController",
    "HlampctlChannelIO",
    "HlampctlChannelIORef",
    # Session
    "DeviceSession",
    "SessionState",
    # Errors
    "HlampctlError",
    "InvalidChannelError",
    "ReadOnlyPropertyError",
    "BusError",
    "UnsupportedTransportError",
    "DeviceNotFoundError",
    "SessionStateError",
    # Channel definitions
    "CHANNELS",
    "NUM_CHANNELS",
    "ChannelDescriptor",
    "ChannelKind",
    "Direction",
    "RegAddr",
    "get_channel",
    "get_all_channels",
    # Conversion
    "ChannelProperty",
    "PhysicalValue",
    "ValueFormat",
]
