"""The file allocation table: cluster lookup, allocation, linking and chains."""

from __future__ import annotations

import errno
import struct
from typing import Sequence

from .drive import Drive
from .structures import CLUSTER_EOF, CLUSTER_FREE, SECTOR_SIZE, BootSector

_ENTRY = struct.Struct("<H")
FIRST_DATA_CLUSTER = 2

Run = tuple[int, int]


class FatTable:
    """Reads and edits the first FAT of a FAT16 volume.

    One FAT sector is cached between lookups; writes made through this object
    keep the cache consistent.
    """

    def __init__(self, drive: Drive, bpb: BootSector) -> None:
        self.drive = drive
        self.bpb = bpb
        self._cached_sector: int | None = None
        self._cache = b""

    def _entry_count(self) -> int:
        return self.bpb.fat_size * SECTOR_SIZE // _ENTRY.size

    def _read_fat_sector(self, sector: int) -> bytes:
        if not 0 <= sector < self.bpb.fat_size:
            raise ValueError(
                f"FAT sector {sector} lies outside the FAT of {self.bpb.fat_size} sectors"
            )
        address = (self.bpb.reserved_sectors + sector) * SECTOR_SIZE
        return self.drive.read(address, SECTOR_SIZE)

    def _write_entry(self, cluster: int, value: int) -> None:
        offset = cluster * _ENTRY.size
        address = self.bpb.reserved_sectors * SECTOR_SIZE + offset
        packed = _ENTRY.pack(value)
        self.drive.write(address, packed)
        sector, within = divmod(offset, SECTOR_SIZE)
        if self._cached_sector == sector:
            updated = bytearray(self._cache)
            updated[within:within + _ENTRY.size] = packed
            self._cache = bytes(updated)

    def next_cluster(self, cluster: int) -> int:
        """The FAT entry for ``cluster``: the next cluster, free or an end mark."""
        if cluster < 0:
            raise ValueError(f"invalid cluster {cluster}")
        sector, within = divmod(cluster * _ENTRY.size, SECTOR_SIZE)
        if self._cached_sector != sector:
            self._cache = self._read_fat_sector(sector)
            self._cached_sector = sector
        return _ENTRY.unpack_from(self._cache, within)[0]

    def allocate(self, count: int) -> list[int]:
        """Claim ``count`` free clusters, marking each as end of chain.

        Clusters are taken lowest first. Raises OSError(ENOSPC) when the FAT
        runs out of free entries; clusters claimed before that stay claimed.
        """
        allocated: list[int] = []
        cluster = FIRST_DATA_CLUSTER
        limit = self._entry_count()
        while len(allocated) < count:
            if cluster >= limit:
                raise OSError(errno.ENOSPC, "no free clusters left in the FAT")
            if self.next_cluster(cluster) == CLUSTER_FREE:
                self._write_entry(cluster, CLUSTER_EOF)
                allocated.append(cluster)
            cluster += 1
        return allocated

    def link(self, back: int, front: int) -> None:
        """Point ``back`` at ``front`` and make ``front`` the end of the chain."""
        self._write_entry(back, front)
        self._write_entry(front, CLUSTER_EOF)

    def unlink(self, back: int, front: int) -> None:
        """Free ``front`` and make ``back`` the end of the chain."""
        self._write_entry(front, CLUSTER_FREE)
        self._write_entry(back, CLUSTER_EOF)

    def chain_runs(self, first_cluster: int) -> list[Run]:
        """Follow the chain from ``first_cluster`` as ``(start, length)`` runs.

        Consecutive clusters are collapsed into one run. Raises ValueError if
        the chain loops.
        """
        runs: list[Run] = []
        current = first_cluster
        run_start = current
        run_length = 0
        limit = self._entry_count()
        steps = 0
        while current < CLUSTER_EOF:
            steps += 1
            if steps > limit:
                raise ValueError(f"cluster chain from {first_cluster} loops")
            run_length += 1
            following = self.next_cluster(current)
            if following != current + 1 or following >= CLUSTER_EOF:
                runs.append((run_start, run_length))
                run_start = following
                run_length = 0
            current = following
        if run_length > 0:
            runs.append((run_start, run_length))
        return runs


def next_cluster_from_runs(runs: Sequence[Run], cluster: int) -> int:
    """The cluster after ``cluster`` in a run list, or CLUSTER_EOF."""
    for index, (start, length) in enumerate(runs):
        if start <= cluster < start + length:
            if cluster < start + length - 1:
                return cluster + 1
            if index + 1 < len(runs):
                return runs[index + 1][0]
            return CLUSTER_EOF
    return CLUSTER_EOF


def cluster_at_offset(runs: Sequence[Run], offset: int) -> int:
    """The cluster holding byte ``offset`` of a file, or CLUSTER_EOF past its chain.

    Each cluster holds one sector of data.
    """
    if offset < 0:
        raise ValueError(f"invalid file offset {offset}")
    skip = offset // SECTOR_SIZE
    for start, length in runs:
        if skip < length:
            return start + skip
        skip -= length
    return CLUSTER_EOF