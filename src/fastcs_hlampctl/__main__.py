"""FastCS hlampctl EPICS server entry point.

Launches a FastCS server that exposes hlampctl channels via EPICS PVs.

Usage:
    python -m fastcs_hlampctl --bus 1 --address 0x48 --pv-prefix BL99I-EA-LAMP-01:
"""

import logging
from argparse import ArgumentParser
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .constants import DEFAULT_ADDRESS, DEVICE_NAME
from .hlampctl_controller import HlampctlController

__all__ = ["main"]


def main(args: Sequence[str] | None = None) -> None:
    """Launch the FastCS hlampctl EPICS server."""
    parser = ArgumentParser(description="FastCS hlampctl EPICS Server")
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=__version__,
    )
    parser.add_argument(
        "--bus",
        type=str,
        required=True,
        help="I2C bus number or device path (e.g., 1, /dev/i2c-1, sim://lamp)",
    )
    parser.add_argument(
        "--address",
        type=lambda s: int(s, 16),
        default=DEFAULT_ADDRESS,
        help=f"I2C device address in hex (default: {DEFAULT_ADDRESS:#04x})",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=DEVICE_NAME,
        help=f"Device name (default: {DEVICE_NAME})",
    )
    parser.add_argument(
        "--pv-prefix",
        type=str,
        default="HLAMPCTL",
        help="EPICS PV prefix (default: HLAMPCTL)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--gui",
        type=str,
        default=None,
        help="Generate Phoebus screen file (e.g., hlampctl.bob)",
    )
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Run without the interactive shell",
    )

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=getattr(logging, parsed_args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        from fastcs.launch import FastCS
        from fastcs.transports.epics.ca import EpicsCATransport
        from fastcs.transports.epics.options import (
            EpicsGUIOptions,
            EpicsIOCOptions,
        )
    except ImportError as e:
        print(f"Error: FastCS EPICS transport not available: {e}")
        print("Please install with: pip install 'fastcs[ca]'")
        return

    controller = HlampctlController(
        bus=parsed_args.bus, address=parsed_args.address, name=parsed_args.name
    )

    gui_options = None
    if parsed_args.gui:
        gui_options = EpicsGUIOptions(
            output_path=Path(parsed_args.gui),
            title="hlampctl Lamp Controller",
        )

    transport = EpicsCATransport(
        gui=gui_options,
        epicsca=EpicsIOCOptions(pv_prefix=parsed_args.pv_prefix),
    )

    fastcs = FastCS(controller, [transport])
    fastcs.run(interactive=not parsed_args.no_interactive)


if __name__ == "__main__":
    main()
