"""Lists of physical memory ranges: consolidation and carving out blocks."""

from __future__ import annotations

from dataclasses import dataclass

_PAGE_MASK = 0xFFF


@dataclass
class Range:
    """A span of ``size`` bytes starting at ``begin``."""

    begin: int
    size: int

    def end(self) -> int:
        """Address just past the range."""
        return self.begin + self.size


def remove_empty(ranges: list[Range]) -> list[Range]:
    """Return the ranges whose size is not zero, in their original order."""
    return [r for r in ranges if r.size != 0]


def merge_adjacent(ranges: list[Range]) -> list[Range]:
    """Merge overlapping or touching ranges of a list sorted by ``begin``."""
    merged: list[Range] = []
    for current in ranges:
        if merged and merged[-1].end() >= current.begin:
            previous = merged[-1]
            if current.end() > previous.end():
                previous.size = current.end() - previous.begin
            continue
        merged.append(Range(current.begin, current.size))
    return merged


def defragment(ranges: list[Range]) -> list[Range]:
    """Sort, drop empty ranges and consolidate; returns a new list."""
    if not ranges:
        raise ValueError("cannot defragment an empty range list")
    ordered = sorted(ranges, key=lambda r: r.begin)
    return merge_adjacent(remove_empty(ordered))


def _extract(target: Range, size: int) -> int:
    begin = target.begin
    target.begin += size
    target.size -= size
    return begin


def pop_of_size(ranges: list[Range], size: int) -> int:
    """Carve ``size`` bytes off the first range big enough; return their address.

    The chosen range shrinks in place. Raises LookupError if none fits.
    """
    if size & _PAGE_MASK:
        raise ValueError("the range length has to be page aligned")
    for candidate in ranges:
        if candidate.size >= size:
            return _extract(candidate, size)
    raise LookupError(f"no range of {size:#x} bytes available")


def pop_of_size_or_less(ranges: list[Range], max_size: int) -> tuple[int, int]:
    """Carve up to ``max_size`` bytes; return ``(address, size)``.

    Takes exactly ``max_size`` from the first range large enough; otherwise
    takes the whole of the largest range, leaving it with size zero.
    """
    if max_size & _PAGE_MASK:
        raise ValueError("the max range length has to be page aligned")
    if not ranges:
        raise LookupError("no ranges available")

    largest: Range | None = None
    for candidate in ranges:
        if candidate.size >= max_size:
            return _extract(candidate, max_size), max_size
        if largest is None or candidate.size > largest.size:
            largest = candidate

    assert largest is not None
    address, size = largest.begin, largest.size
    largest.size = 0
    return address, size