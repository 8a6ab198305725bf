"""A small command shell over a FAT16 volume, writing to a text screen."""

from __future__ import annotations

from .structures import SECTOR_SIZE, DirEntry
from .textio import TextScreen
from .volume import Fat16Volume

_ECHO_COMMAND_LEN = 4


class ShutdownRequested(Exception):
    """Raised when the user asks the machine to power off."""


class RebootRequested(Exception):
    """Raised when the user asks the machine to restart."""


def compare_strings(option: str, command: str) -> bool:
    """Whether ``command`` starts with ``option``."""
    return command.startswith(option)


def _listing_name(entry: DirEntry) -> str:
    name = entry.filename.split(b"\0", 1)[0]
    extension = entry.extension.split(b"\0", 1)[0]
    return (name + b" " + extension).decode("latin-1")


class Shell:
    """Parses command lines and runs the built-in commands."""

    def __init__(self, volume: Fat16Volume, screen: TextScreen | None = None) -> None:
        self.volume = volume
        self.screen = screen if screen is not None else TextScreen()

    def execute(self, command: str) -> None:
        """Run one command line."""
        space = command.find(" ")
        argument = command[space + 1:] if space >= 0 else None

        if compare_strings("shutdown", command):
            raise ShutdownRequested()
        if compare_strings("donut", command):
            self.screen.puts("donut: graphics are not available")
        elif compare_strings("reboot", command):
            raise RebootRequested()
        elif compare_strings("echo", command):
            self.echo(command)
        elif compare_strings("clear", command):
            self.screen.clear()
        elif compare_strings("color", command):
            self.screen.puts("color: graphics are not available")
        elif compare_strings("ls", command):
            self.ls(argument if argument is not None else "-")
        elif compare_strings("cat", command):
            self.cat(argument)
        elif compare_strings("touch", command):
            if argument is None:
                self.screen.puts("touch expects a second argument: filename")
            else:
                self.touch(argument)
        else:
            self.screen.puts("command does not exist")

    def echo(self, command: str) -> None:
        """Print everything after ``echo ``."""
        separated = len(command) > _ECHO_COMMAND_LEN and command[_ECHO_COMMAND_LEN] == " "
        if len(command) <= _ECHO_COMMAND_LEN + 1 and not separated:
            self.screen.puts("Usage: echo <string>")
            return
        self.screen.puts(command[_ECHO_COMMAND_LEN + 1:])

    def ls(self, flags: str = "-") -> None:
        """List the root directory; with ``l`` in ``flags`` show sizes too."""
        long_format = "l" in flags
        for entry in self.volume.iter_root_entries():
            if entry.is_free():
                continue
            name = _listing_name(entry)
            if long_format:
                self.screen.printf("%s  %d bytes\n", name, entry.file_size)
            else:
                self.screen.printf("%s\n", name)

    def cat(self, filename: str | None) -> None:
        """Print the contents of a file."""
        if filename is None:
            self.screen.puts("cat: no file provided")
            return
        try:
            file = self.volume.open(filename)
        except FileNotFoundError:
            self.screen.puts(f"cat: {filename}: no such file")
            return
        except ValueError as exc:
            self.screen.puts(f"cat: {exc}")
            return

        offset = 0
        while True:
            chunk = file.read(SECTOR_SIZE, offset)
            if not chunk:
                break
            offset += len(chunk)
            self.screen.put(chunk.decode("latin-1"))

    def touch(self, filename: str) -> None:
        """Create an empty file."""
        try:
            self.volume.create(filename)
        except ValueError as exc:
            self.screen.puts(f"touch: {exc}")
        except OSError:
            self.screen.puts("Failed to add the directory entry to the root directory")