"""Shared constants for the hlampctl controller."""

DEVICE_NAME = "hlampctl"
DEFAULT_ADDRESS = 0x48

# Attribute poll periods in seconds
FAST_UPDATE = 0.2
SLOW_UPDATE = 1.0
