"""Command-line interface for hlampctl bus testing.

Provides interactive commands for testing the transport and channel core
against real hardware or the simulator.
"""

import argparse
import logging
import sys
from typing import NoReturn

from .constants import DEFAULT_ADDRESS
from .errors import HlampctlError
from .session import DeviceSession
from .transport import HlampctlTransport

logger = logging.getLogger(__name__)


class HlampctlCLI:
    """Interactive CLI for hlampctl communication.

    Commands:
    - r <chan>: Read channel (0-2)
    - p <chan>: Read channel in physical units
    - w <chan> <value>: Write channel (only 2, lamp enable)
    - on / off: Switch lamp enable
    - scale: Show available voltage scales
    - freq: Show available sampling frequencies
    - info: Show device name and channel table
    - quit: Exit
    """

    def __init__(self, bus: str, address: int = DEFAULT_ADDRESS):
        """Initialize CLI.

        Args:
            bus: I2C bus number, device path or 'sim://name'
            address: 7-bit I2C address of the device
        """
        self.bus = bus
        self.address = address
        self.transport: HlampctlTransport | None = None
        self.session: DeviceSession | None = None

    def start(self) -> None:
        """Open the bus and probe the device."""
        self.transport = HlampctlTransport(self.bus, self.address)
        self.transport.connect()
        try:
            self.session = DeviceSession(self.transport)
        except (HlampctlError, OSError):
            self.transport.disconnect()
            raise

        print(f"Connected to {self.session.name} on {self.bus} ({self.address:#04x})")
        print("Type 'help' for available commands")

    def stop(self) -> None:
        """Close the bus."""
        self.session = None
        if self.transport:
            self.transport.disconnect()
        print("Disconnected")

    def run_command(self, cmd_line: str) -> bool:
        """Execute a command.

        Args:
            cmd_line: Command line input

        Returns:
            False if should exit, True otherwise
        """
        parts = cmd_line.strip().split()
        if not parts:
            return True

        cmd = parts[0].lower()
        session = self.session

        try:
            if cmd in ("quit", "exit", "q"):
                return False

            elif cmd == "help":
                print(self.__class__.__doc__)

            elif cmd == "r" and len(parts) == 2:
                chan = int(parts[1])
                value = session.read(chan)  # type: ignore[union-attr]
                print(f"CH{chan} = {value}")

            elif cmd == "p" and len(parts) == 2:
                chan = int(parts[1])
                value = session.read_physical(chan)  # type: ignore[union-attr]
                print(f"CH{chan} = {value}")

            elif cmd == "w" and len(parts) == 3:
                chan = int(parts[1])
                value = int(parts[2])
                session.write(chan, value)  # type: ignore[union-attr]
                print(f"CH{chan} <- {value}")

            elif cmd in ("on", "off"):
                session.write(2, 1 if cmd == "on" else 0)  # type: ignore[union-attr]
                print(f"Lamp {cmd}")

            elif cmd == "scale":
                print(session.scale_available())  # type: ignore[union-attr]

            elif cmd == "freq":
                print(session.sampling_frequency_available())  # type: ignore[union-attr]

            elif cmd == "info":
                print(f"{session.name}: {session.num_channels} channels")  # type: ignore[union-attr]
                for ch in session.channels:  # type: ignore[union-attr]
                    print(
                        f"  {ch.index}: {ch.name:<14} {ch.kind.name:<18} "
                        f"{ch.direction.name:<6} reg {ch.register:#04x}"
                    )

            else:
                print(f"Unknown command: {cmd}")
                print("Type 'help' for available commands")

        except ValueError as e:
            print(f"Error: {e}")
        except HlampctlError as e:
            print(f"Command failed: {e}")
            logger.debug("Command error", exc_info=True)

        return True

    def run_interactive(self) -> None:
        """Run interactive command loop."""
        self.start()

        try:
            while True:
                try:
                    cmd_line = input("hlampctl> ")
                    if not self.run_command(cmd_line):
                        break
                except (EOFError, KeyboardInterrupt):
                    print()
                    break
        finally:
            self.stop()


def run(args: argparse.Namespace) -> int:
    """Run the CLI with parsed arguments.

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    cli = HlampctlCLI(args.bus, args.address)

    try:
        if args.command:
            # Execute single command
            cli.start()
            try:
                cli.run_command(" ".join(args.command))
            finally:
                cli.stop()
        else:
            cli.run_interactive()
    except (HlampctlError, OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv)
    """
    parser = argparse.ArgumentParser(description="hlampctl I2C test tool")
    parser.add_argument(
        "bus",
        help="I2C bus number or device path (e.g., 1, /dev/i2c-1, sim://lamp)",
    )
    parser.add_argument(
        "-a",
        "--address",
        type=lambda s: int(s, 16),
        default=DEFAULT_ADDRESS,
        help=f"I2C device address in hex (default: {DEFAULT_ADDRESS:#04x})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-c",
        "--command",
        nargs="+",
        help="Execute single command and exit",
    )

    args = parser.parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
