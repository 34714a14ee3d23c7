"""Exceptions raised by the hlampctl channel core."""


class HlampctlError(Exception):
    """Base exception for hlampctl errors."""

    pass


class InvalidChannelError(HlampctlError):
    """Raised when a channel index is unknown or used in the wrong direction."""

    pass


class ReadOnlyPropertyError(InvalidChannelError):
    """Raised when writing a fixed channel property (scale, sampling frequency)."""

    pass


class BusError(HlampctlError):
    """Raised when the underlying I2C transaction fails."""

    pass


class UnsupportedTransportError(HlampctlError):
    """Raised when the I2C adapter lacks plain I2C transfer support."""

    pass


class DeviceNotFoundError(HlampctlError):
    """Raised when the presence probe gets no answer from the device."""

    pass


class SessionStateError(HlampctlError):
    """Raised when a device session is used before it is ready."""

    pass
