"""A FAT16 volume: the root directory and regular files stored on it."""

from __future__ import annotations

import errno
from typing import Iterator

from .drive import Drive
from .fat import FatTable, Run, cluster_at_offset, next_cluster_from_runs
from .rtc import Clock, fat_date, fat_time
from .structures import (
    CLUSTER_EOF,
    DIR_ENTRY_SIZE,
    EXTENSION_SIZE,
    FILENAME_SIZE,
    FULL_FILENAME_SIZE,
    SECTOR_SIZE,
    BootSector,
    DirEntry,
    MDSCoreFlags,
    to_fat16_filename,
)

ATTRIBUTE_ARCHIVE = 0x20
_MAX_FILE_SIZE = 0xFFFFFFFF


def _pad(value: str | bytes, width: int) -> bytes:
    raw = value.encode("latin-1") if isinstance(value, str) else bytes(value)
    return raw[:width].ljust(width, b" ")


def _fold(name: bytes) -> bytes:
    """Case-fold the way the directory lookup compares names."""
    return bytes(c | 0x20 for c in name)


def create_dir_entry(
    name: str | bytes,
    extension: str | bytes,
    attributes: int,
    clock: Clock,
) -> DirEntry:
    """Build an empty regular-file entry stamped with the clock's current time."""
    hours, minutes, seconds = clock.time()
    year, month, day = clock.date()
    stamp_time = fat_time(hours, minutes, seconds)
    stamp_date = fat_date(year, month, day)
    return DirEntry(
        filename=_pad(name, FILENAME_SIZE),
        extension=_pad(extension, EXTENSION_SIZE),
        attributes=attributes,
        reserved=MDSCoreFlags.FILE,
        creation_time_tenths=0,
        creation_time=stamp_time,
        creation_date=stamp_date,
        last_access_date=stamp_date,
        first_cluster_high=0,
        last_mod_time=stamp_time,
        last_mod_date=stamp_date,
        first_cluster_low=0,
        file_size=0,
    )


class Fat16Volume:
    """A FAT16 file system on a drive, with a flat root directory."""

    def __init__(self, drive: Drive, clock: Clock | None = None) -> None:
        self.drive = drive
        self.clock = clock if clock is not None else Clock()
        self.bpb = BootSector.from_bytes(drive.read(0, SECTOR_SIZE))
        self.fat = FatTable(drive, self.bpb)

    def _slots(self) -> Iterator[tuple[int, DirEntry]]:
        """Yield ``(address, entry)`` for every slot of the root directory."""
        for sector in range(self.bpb.root_dir_start(), self.bpb.root_dir_end()):
            base = sector * SECTOR_SIZE
            data = self.drive.read(base, SECTOR_SIZE)
            for offset in range(0, SECTOR_SIZE, DIR_ENTRY_SIZE):
                yield base + offset, DirEntry.from_bytes(data[offset:offset + DIR_ENTRY_SIZE])

    def iter_root_entries(self) -> Iterator[DirEntry]:
        """Yield every root directory slot, used or not."""
        for _, entry in self._slots():
            yield entry

    def find(self, name: str | bytes) -> DirEntry | None:
        """Look up a file by path or padded 11-byte name, ignoring case."""
        padded = to_fat16_filename(name) if isinstance(name, str) else bytes(name)
        wanted = _fold(padded[:FULL_FILENAME_SIZE])
        for entry in self.iter_root_entries():
            if entry.is_free():
                continue
            if _fold(entry.fat_name()) == wanted:
                return entry
        return None

    def open(self, path: str) -> "Fat16File":
        """Open an existing file; raises FileNotFoundError if it is absent."""
        entry = self.find(to_fat16_filename(path))
        if entry is None:
            raise FileNotFoundError(errno.ENOENT, "no such file", path)
        return Fat16File(self, entry)

    def create(self, path: str) -> "Fat16File":
        """Create an empty file in the root directory and return it."""
        padded = to_fat16_filename(path)
        entry = create_dir_entry(
            padded[:FILENAME_SIZE], padded[FILENAME_SIZE:], ATTRIBUTE_ARCHIVE, self.clock
        )
        self.add_entry(entry)
        return Fat16File(self, entry)

    def add_entry(self, entry: DirEntry) -> int:
        """Store ``entry`` in the first free root slot and return its address."""
        for address, slot in self._slots():
            if slot.is_free():
                self.drive.write(address, entry.to_bytes())
                return address
        raise OSError(errno.ENOSPC, "the root directory is full")

    def update_entry(self, entry: DirEntry) -> int:
        """Overwrite the root slot holding the same name; return its address."""
        name = entry.fat_name()
        for address, slot in self._slots():
            if slot.is_free():
                continue
            if slot.fat_name() == name:
                self.drive.write(address, entry.to_bytes())
                return address
        raise FileNotFoundError(
            errno.ENOENT, "no such directory entry", entry.display_name()
        )

    def list_names(self) -> list[str]:
        """Names of the files in the root directory, in directory order."""
        return [e.display_name() for e in self.iter_root_entries() if not e.is_free()]


class Fat16File:
    """A regular file of a volume, addressed by byte offset."""

    def __init__(self, volume: Fat16Volume, entry: DirEntry) -> None:
        self.volume = volume
        self.entry = entry
        self.runs: list[Run] = []
        self.refresh_chain()

    def size(self) -> int:
        """Current file size in bytes."""
        return self.entry.file_size

    def _first_cluster(self) -> int:
        return self.entry.first_cluster_low

    def refresh_chain(self) -> list[Run]:
        """Re-read the file's cluster chain from the FAT."""
        first = self._first_cluster()
        self.runs = self.volume.fat.chain_runs(first) if first else []
        return self.runs

    def _check_regular(self, action: str) -> None:
        if self.entry.reserved != MDSCoreFlags.FILE:
            raise ValueError(f"cannot {action} a file that is not a regular file")

    def _cluster_address(self, cluster: int) -> int:
        return self.volume.bpb.cluster_to_sector(cluster) * SECTOR_SIZE

    def read(self, size: int, offset: int = 0) -> bytes:
        """Read up to ``size`` bytes from ``offset``; short at the end of file."""
        self._check_regular("read")
        if size < 0 or offset < 0:
            raise ValueError("size and offset must not be negative")
        if offset >= self.entry.file_size:
            return b""
        remaining = min(size, self.entry.file_size - offset)
        cluster = cluster_at_offset(self.runs, offset)
        within = offset % SECTOR_SIZE
        pieces: list[bytes] = []
        drive = self.volume.drive
        while remaining > 0 and cluster < CLUSTER_EOF:
            chunk = min(SECTOR_SIZE - within, remaining)
            pieces.append(drive.read(self._cluster_address(cluster) + within, chunk))
            remaining -= chunk
            within = 0
            cluster = self.volume.fat.next_cluster(cluster)
        return b"".join(pieces)

    def write(self, data: bytes, offset: int = 0) -> int:
        """Write ``data`` at ``offset``, growing the chain as needed.

        Returns the number of bytes written. A file without clusters is always
        written from its start. Writing where the chain has no cluster yet
        writes nothing.
        """
        self._check_regular("write")
        if offset < 0:
            raise ValueError("offset must not be negative")
        view = memoryview(bytes(data))
        if offset + len(view) > _MAX_FILE_SIZE:
            raise OverflowError("write would exceed the maximum file size")
        if not view:
            return 0

        volume = self.volume
        fat = volume.fat
        if self._first_cluster() == 0 and self.entry.first_cluster_high == 0:
            offset = 0
            allocated = fat.allocate(-(-len(view) // SECTOR_SIZE))
            self.entry.first_cluster_low = allocated[0] & 0xFFFF
            self.entry.first_cluster_high = (allocated[0] >> 16) & 0xFFFF
            for back, front in zip(allocated, allocated[1:]):
                fat.link(back, front)
            cluster = allocated[0]
            self.refresh_chain()
        else:
            cluster = cluster_at_offset(self.runs, offset)
            if cluster == CLUSTER_EOF:
                return 0

        within = offset % SECTOR_SIZE
        written = 0
        try:
            while True:
                chunk = view[written:written + min(len(view) - written, SECTOR_SIZE - within)]
                volume.drive.write(self._cluster_address(cluster) + within, chunk)
                written += len(chunk)
                within = 0
                if written == len(view):
                    break
                following = next_cluster_from_runs(self.runs, cluster)
                if following == CLUSTER_EOF:
                    needed = -(-(len(view) - written) // SECTOR_SIZE)
                    allocated = fat.allocate(needed)
                    fat.link(cluster, allocated[0])
                    for back, front in zip(allocated, allocated[1:]):
                        fat.link(back, front)
                    self.refresh_chain()
                    following = allocated[0]
                cluster = following
        except OSError:
            if written == 0:
                raise

        new_size = offset + written
        if new_size > self.entry.file_size:
            self.entry.file_size = new_size
        volume.update_entry(self.entry)
        return written