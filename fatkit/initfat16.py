"""Command that writes a fresh, empty first FAT onto a FAT16 disk image."""

from __future__ import annotations

import struct
import sys

from .drive import Drive, DriveError
from .structures import BOOT_SECTOR_SIZE, SECTOR_SIZE, BootSector

_MEDIA_ENTRY = 0xFFF8
_END_ENTRY = 0xFFFF


def initialize_fat(drive: Drive, bpb: BootSector) -> bytes:
    """Write an empty FAT (only the two reserved entries set); return it."""
    table = bytearray(bpb.fat_size * SECTOR_SIZE)
    struct.pack_into("<HH", table, 0, _MEDIA_ENTRY, _END_ENTRY)
    drive.write(bpb.reserved_sectors * SECTOR_SIZE, table)
    return bytes(table)


def main(argv: list[str] | None = None) -> int:
    """Initialise the FAT of the image named on the command line."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: initfat16 <filepath>")
        return 1

    try:
        with Drive.open(args[0]) as drive:
            bpb = BootSector.from_bytes(drive.read(0, BOOT_SECTOR_SIZE))
            initialize_fat(drive, bpb)
    except (DriveError, ValueError) as exc:
        print(f"initfat16: {exc}", file=sys.stderr)
        return 1

    print("FAT16 initialized successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())