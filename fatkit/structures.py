"""On-disk FAT16 structures: the boot sector and root directory entries."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

SECTOR_SIZE = 512
CLUSTER_FREE = 0x0000
CLUSTER_EOF = 0xFFF8  # anything at or above this marks the end of a chain
CLUSTER_BAD = 0xFFF7

FILENAME_SIZE = 8
EXTENSION_SIZE = 3
FULL_FILENAME_SIZE = FILENAME_SIZE + EXTENSION_SIZE

MAX_CHAIN_LEN = 50

DELETED_MARK = 0xE5

_BOOT_SECTOR = struct.Struct("<3s8sHBHBHHBHHHIIBBBI11s8s")
_DIR_ENTRY = struct.Struct("<8s3sBBBHHHHHHHI")

BOOT_SECTOR_SIZE = _BOOT_SECTOR.size
DIR_ENTRY_SIZE = _DIR_ENTRY.size


class MDSCoreFlags(IntEnum):
    """Values stored in the reserved byte of a directory entry."""

    DEVICE = 1
    FILE = 0x18


@dataclass
class BootSector:
    """BIOS parameter block plus the FAT16 extended boot record."""

    jmp_boot: bytes = b"\xeb\x3c\x90"
    oem_name: bytes = b"        "
    bytes_per_sector: int = SECTOR_SIZE
    sectors_per_cluster: int = 1
    reserved_sectors: int = 1
    num_fats: int = 2
    root_entry_count: int = 512
    total_sectors: int = 0
    media_type: int = 0xF8
    fat_size: int = 32
    sectors_per_track: int = 0
    num_heads: int = 0
    hidden_sectors: int = 0
    large_sectors: int = 0
    drive_number: int = 0x80
    reserved1: int = 0
    boot_signature: int = 0x29
    volume_id: int = 0
    volume_label: bytes = b"NO NAME    "
    file_system_type: bytes = b"FAT16   "

    @classmethod
    def from_bytes(cls, data: bytes) -> "BootSector":
        """Parse the boot sector found at the start of ``data``."""
        if len(data) < BOOT_SECTOR_SIZE:
            raise ValueError(
                f"boot sector needs {BOOT_SECTOR_SIZE} bytes, got {len(data)}"
            )
        return cls(*_BOOT_SECTOR.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Serialise to the packed on-disk layout."""
        return _BOOT_SECTOR.pack(
            self.jmp_boot,
            self.oem_name,
            self.bytes_per_sector,
            self.sectors_per_cluster,
            self.reserved_sectors,
            self.num_fats,
            self.root_entry_count,
            self.total_sectors,
            self.media_type,
            self.fat_size,
            self.sectors_per_track,
            self.num_heads,
            self.hidden_sectors,
            self.large_sectors,
            self.drive_number,
            self.reserved1,
            self.boot_signature,
            self.volume_id,
            self.volume_label,
            self.file_system_type,
        )

    def root_dir_start(self) -> int:
        """First sector of the root directory."""
        return self.reserved_sectors + self.fat_size * self.num_fats

    def root_dir_end(self) -> int:
        """Sector just past the root directory."""
        root_bytes = self.root_entry_count * DIR_ENTRY_SIZE
        return self.root_dir_start() + (root_bytes + SECTOR_SIZE - 1) // SECTOR_SIZE

    def cluster_to_sector(self, cluster: int) -> int:
        """First sector of the given data cluster."""
        root_bytes = self.root_entry_count * DIR_ENTRY_SIZE
        first_data_sector = (
            self.reserved_sectors
            + self.num_fats * self.fat_size
            + (root_bytes + self.bytes_per_sector - 1) // self.bytes_per_sector
        )
        return first_data_sector + (cluster - 2) * self.sectors_per_cluster


@dataclass
class DirEntry:
    """A 32-byte root directory entry."""

    filename: bytes = b" " * FILENAME_SIZE
    extension: bytes = b" " * EXTENSION_SIZE
    attributes: int = 0
    reserved: int = 0
    creation_time_tenths: int = 0
    creation_time: int = 0
    creation_date: int = 0
    last_access_date: int = 0
    first_cluster_high: int = 0
    last_mod_time: int = 0
    last_mod_date: int = 0
    first_cluster_low: int = 0
    file_size: int = 0

    def __post_init__(self) -> None:
        self.filename = bytes(self.filename)
        self.extension = bytes(self.extension)
        if len(self.filename) != FILENAME_SIZE:
            raise ValueError(f"filename must be {FILENAME_SIZE} bytes")
        if len(self.extension) != EXTENSION_SIZE:
            raise ValueError(f"extension must be {EXTENSION_SIZE} bytes")

    @classmethod
    def from_bytes(cls, data: bytes) -> "DirEntry":
        """Parse a directory entry from the start of ``data``."""
        if len(data) < DIR_ENTRY_SIZE:
            raise ValueError(
                f"directory entry needs {DIR_ENTRY_SIZE} bytes, got {len(data)}"
            )
        return cls(*_DIR_ENTRY.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Serialise to the packed on-disk layout."""
        return _DIR_ENTRY.pack(
            self.filename,
            self.extension,
            self.attributes,
            self.reserved,
            self.creation_time_tenths,
            self.creation_time,
            self.creation_date,
            self.last_access_date,
            self.first_cluster_high,
            self.last_mod_time,
            self.last_mod_date,
            self.first_cluster_low,
            self.file_size,
        )

    def is_free(self) -> bool:
        """True if the slot is unused or holds a deleted entry."""
        return self.filename[0] in (0x00, DELETED_MARK)

    def fat_name(self) -> bytes:
        """The padded 11-byte name, name and extension together."""
        return self.filename + self.extension

    def display_name(self) -> str:
        """Human-readable ``NAME.EXT`` form, padding stripped."""
        name = self.filename.split(b" ", 1)[0].decode("latin-1")
        if self.extension[:1] != b" ":
            extension = self.extension.split(b" ", 1)[0].decode("latin-1")
            name = f"{name}.{extension}"
        return name


def to_fat16_filename(filename: str) -> bytes:
    """Convert a name like ``kernel.bin`` to its padded form ``kernel  bin``."""
    raw = filename.encode("latin-1")
    dot = raw.rfind(b".", 0, min(len(raw), FILENAME_SIZE + 1))
    if dot < 0:
        raise ValueError(f"invalid path: {filename!r}")
    extension = raw[dot + 1:]
    if len(extension) > EXTENSION_SIZE:
        raise ValueError("extensions longer than 3 bytes are not supported")
    return raw[:dot].ljust(FILENAME_SIZE, b" ") + extension.ljust(EXTENSION_SIZE, b" ")