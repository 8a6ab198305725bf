import io

import pytest

from fatkit.drive import Drive, DriveError


def test_write_then_read_round_trip():
    drive = Drive(io.BytesIO(bytes(1024)))
    payload = b"Hello, FAT16!"
    assert drive.write(100, payload) == len(payload)
    assert drive.read(100, len(payload)) == payload


def test_read_untouched_area_is_zero():
    drive = Drive(io.BytesIO(bytes(64)))
    drive.write(0, b"\xff\xff")
    assert drive.read(2, 4) == bytes(4)


def test_short_read_raises():
    drive = Drive(io.BytesIO(bytes(16)))
    with pytest.raises(DriveError):
        drive.read(10, 32)


def test_negative_address_raises():
    drive = Drive(io.BytesIO(bytes(16)))
    with pytest.raises(DriveError):
        drive.read(-1, 1)
    with pytest.raises(DriveError):
        drive.write(-5, b"x")


def test_open_image_file(tmp_path):
    image = tmp_path / "disk.img"
    image.write_bytes(bytes(512))
    with Drive.open(image) as drive:
        drive.write(510, b"\x55\xaa")
        assert drive.read(510, 2) == b"\x55\xaa"
    assert image.read_bytes()[510:] == b"\x55\xaa"


def test_open_missing_file_raises(tmp_path):
    with pytest.raises(DriveError):
        Drive.open(tmp_path / "missing.img")


def test_closed_drive_raises():
    drive = Drive(io.BytesIO(bytes(16)))
    drive.close()
    with pytest.raises(DriveError):
        drive.read(0, 1)
    with pytest.raises(DriveError):
        drive.write(0, b"a")