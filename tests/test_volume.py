import errno
import io
import struct
from datetime import datetime

import pytest

from fatkit.drive import Drive
from fatkit.rtc import Clock, fat_date, fat_time
from fatkit.structures import SECTOR_SIZE, BootSector, MDSCoreFlags
from fatkit.volume import Fat16File, Fat16Volume, create_dir_entry


def fixed_clock():
    return Clock(now=lambda: datetime(2024, 5, 17, 10, 30, 42))


def make_drive(fat_size=4, root_entries=16, data_clusters=64):
    bpb = BootSector(
        reserved_sectors=1,
        num_fats=2,
        fat_size=fat_size,
        root_entry_count=root_entries,
        sectors_per_cluster=1,
    )
    total = bpb.root_dir_end() + data_clusters
    bpb.total_sectors = total
    image = bytearray(total * SECTOR_SIZE)
    raw = bpb.to_bytes()
    image[: len(raw)] = raw
    image[SECTOR_SIZE:SECTOR_SIZE + 4] = struct.pack("<HH", 0xFFF8, 0xFFFF)
    return Drive(io.BytesIO(bytes(image)))


@pytest.fixture
def volume():
    return Fat16Volume(make_drive(), fixed_clock())


def test_create_dir_entry_fields():
    clock = fixed_clock()
    entry = create_dir_entry("kernel", "bin", 0x20, clock)
    assert entry.filename == b"kernel  "
    assert entry.extension == b"bin"
    assert entry.attributes == 0x20
    assert entry.reserved == MDSCoreFlags.FILE
    assert entry.creation_time == fat_time(12, 30, 42)
    assert entry.creation_date == fat_date(2024, 5, 17)
    assert entry.last_mod_time == entry.creation_time
    assert entry.last_access_date == entry.creation_date
    assert entry.file_size == 0
    assert entry.first_cluster_low == 0


def test_file_creation_and_writing(volume):
    file = volume.create("testfile.txt")
    buffer_to_write = b"Hello, FAT16! This is a simple test."

    assert file.write(buffer_to_write[:5], 0) == 5
    file.refresh_chain()
    assert file.read(5, 0) == buffer_to_write[:5]

    long_buffer = bytearray(0x1000)
    long_buffer[513] = 42
    assert file.write(bytes(long_buffer), 0) == 0x1000
    assert file.read(1, 513) == bytes([42])


def test_written_data_persists_after_reopen(volume):
    file = volume.create("testfile.txt")
    payload = bytes(range(256)) * 16
    assert file.write(payload) == len(payload)

    reopened = volume.open("testfile.txt")
    assert reopened.size() == len(payload)
    assert reopened.read(len(payload)) == payload
    assert reopened.runs == [(2, 8)]


def test_chain_is_contiguous_for_fresh_volume(volume):
    file = volume.create("data.bin")
    file.write(b"x" * 1500)
    assert volume.fat.chain_runs(file.entry.first_cluster_low) == [(2, 3)]


def test_interleaved_files_have_fragmented_chains(volume):
    a = volume.create("a.txt")
    b = volume.create("b.txt")
    a.write(b"A" * 512)
    b.write(b"B" * 512)
    data = b"a" * 512 + b"z" * 512
    assert a.write(data, 0) == 1024
    assert a.runs == [(2, 1), (4, 1)]
    assert volume.open("a.txt").read(2000) == data
    assert volume.open("b.txt").read(2000) == b"B" * 512


def test_overwrite_inside_file_keeps_size(volume):
    file = volume.create("note.txt")
    file.write(b"Hello")
    assert file.write(b"xyz", 2) == 3
    assert file.size() == 5
    assert file.read(10) == b"Hexyz"


def test_read_is_clamped_to_file_size(volume):
    file = volume.create("note.txt")
    file.write(b"Hello")
    assert file.read(100, 3) == b"lo"
    assert file.read(10, 5) == b""


def test_write_empty_returns_zero(volume):
    file = volume.create("empty.txt")
    assert file.write(b"") == 0
    assert file.size() == 0


def test_find_is_case_insensitive(volume):
    volume.create("testfile.txt")
    found = volume.find("TESTFILE.TXT")
    assert found is not None
    assert found.fat_name() == b"testfiletxt"
    assert volume.find("other.txt") is None


def test_open_missing_file_raises(volume):
    with pytest.raises(FileNotFoundError):
        volume.open("missing.txt")


def test_open_invalid_path_raises(volume):
    with pytest.raises(ValueError):
        volume.open("noextension")


def test_list_names(volume):
    volume.create("a.txt")
    volume.create("kernel.bin")
    assert volume.list_names() == ["a.txt", "kernel.bin"]


def test_root_directory_full(volume):
    for index in range(16):
        volume.create(f"f{index}.txt")
    with pytest.raises(OSError) as info:
        volume.create("extra.txt")
    assert info.value.errno == errno.ENOSPC


def test_update_entry_rewrites_slot(volume):
    file = volume.create("a.txt")
    file.entry.attributes = 0x01
    volume.update_entry(file.entry)
    assert volume.find("a.txt").attributes == 0x01


def test_update_missing_entry_raises(volume):
    entry = create_dir_entry("ghost", "txt", 0x20, fixed_clock())
    with pytest.raises(FileNotFoundError):
        volume.update_entry(entry)


def test_non_regular_file_cannot_be_read_or_written(volume):
    entry = create_dir_entry("dev", "drv", 0x20, fixed_clock())
    entry.reserved = MDSCoreFlags.DEVICE
    volume.add_entry(entry)
    device = Fat16File(volume, entry)
    with pytest.raises(ValueError):
        device.read(1)
    with pytest.raises(ValueError):
        device.write(b"x")


def test_volume_reads_boot_sector():
    volume = Fat16Volume(make_drive(fat_size=3, root_entries=32), fixed_clock())
    assert volume.bpb.fat_size == 3
    assert volume.bpb.root_entry_count == 32
    assert len(list(volume.iter_root_entries())) == 32