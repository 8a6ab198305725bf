"""Block storage backed by a seekable binary file (usually a disk image)."""

from __future__ import annotations

import os
from typing import BinaryIO


class DriveError(OSError):
    """Raised when the drive cannot complete a read or a write."""


class Drive:
    """Byte-addressed access to a disk image."""

    def __init__(self, file: BinaryIO) -> None:
        self.file = file

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> "Drive":
        """Open an existing image for reading and writing."""
        try:
            return cls(open(path, "r+b"))
        except OSError as exc:
            raise DriveError(f"cannot open drive image {os.fspath(path)!r}: {exc}") from exc

    def read(self, address: int, size: int) -> bytes:
        """Read exactly ``size`` bytes starting at byte ``address``."""
        if address < 0 or size < 0:
            raise DriveError(f"invalid read of {size} bytes at {address}")
        try:
            self.file.seek(address)
            data = self.file.read(size)
        except (OSError, ValueError) as exc:
            raise DriveError(f"read of {size} bytes at {address} failed: {exc}") from exc
        if len(data) != size:
            raise DriveError(
                f"short read at {address}: wanted {size} bytes, got {len(data)}"
            )
        return data

    def write(self, address: int, data: bytes) -> int:
        """Write ``data`` starting at byte ``address`` and return its length."""
        if address < 0:
            raise DriveError(f"invalid write at {address}")
        try:
            self.file.seek(address)
            written = self.file.write(bytes(data))
            self.file.flush()
        except (OSError, ValueError) as exc:
            raise DriveError(f"write of {len(data)} bytes at {address} failed: {exc}") from exc
        if written is not None and written != len(data):
            raise DriveError(
                f"short write at {address}: wanted {len(data)} bytes, wrote {written}"
            )
        return len(data)

    def close(self) -> None:
        """Close the underlying file."""
        self.file.close()

    def __enter__(self) -> "Drive":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()