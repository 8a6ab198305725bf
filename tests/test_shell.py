import io
from datetime import datetime

import pytest

from fatkit.drive import Drive
from fatkit.initfat16 import initialize_fat
from fatkit.rtc import Clock
from fatkit.shell import RebootRequested, Shell, ShutdownRequested, compare_strings
from fatkit.structures import SECTOR_SIZE, BootSector
from fatkit.textio import TextScreen
from fatkit.volume import Fat16Volume


def _make_volume():
    bpb = BootSector(
        reserved_sectors=1,
        num_fats=2,
        fat_size=2,
        root_entry_count=16,
        total_sectors=80,
    )
    image = bytearray(80 * SECTOR_SIZE)
    image[: len(bpb.to_bytes())] = bpb.to_bytes()
    drive = Drive(io.BytesIO(image))
    initialize_fat(drive, bpb)
    clock = Clock(now=lambda: datetime(2024, 1, 2, 3, 4, 6))
    return Fat16Volume(drive, clock)


@pytest.fixture
def shell():
    return Shell(_make_volume(), TextScreen())


@pytest.mark.parametrize(
    "option, command, expected",
    [
        ("ls", "ls -l", True),
        ("ls", "ls", True),
        ("ls", "l", False),
        ("echo", "ech", False),
        ("cat", "dog", False),
        ("", "anything", True),
    ],
)
def test_compare_strings(option, command, expected):
    assert compare_strings(option, command) is expected


def test_echo_prints_argument(shell):
    shell.execute("echo hello world")
    assert shell.screen.lines()[0] == "hello world"


def test_echo_without_argument_shows_usage(shell):
    shell.execute("echo")
    assert shell.screen.lines()[0] == "Usage: echo <string>"


def test_echo_with_only_space_prints_empty_line(shell):
    shell.execute("echo ")
    shell.screen.put("x")
    lines = shell.screen.lines()
    assert lines[0] == ""
    assert lines[1] == "x"


def test_unknown_command(shell):
    shell.execute("frobnicate")
    assert shell.screen.lines()[0] == "command does not exist"


def test_empty_command(shell):
    shell.execute("")
    assert shell.screen.lines()[0] == "command does not exist"


def test_shutdown_raises(shell):
    with pytest.raises(ShutdownRequested):
        shell.execute("shutdown")


def test_reboot_raises(shell):
    with pytest.raises(RebootRequested):
        shell.execute("reboot")


def test_touch_creates_empty_file(shell):
    shell.execute("touch notes.txt")
    entry = shell.volume.find("notes.txt")
    assert entry.display_name() == "notes.txt"
    assert entry.file_size == 0


def test_touch_without_argument(shell):
    shell.execute("touch")
    assert shell.screen.lines()[0] == "touch expects a second argument: filename"
    assert shell.volume.list_names() == []


def test_ls_lists_padded_names(shell):
    shell.execute("touch a.txt")
    shell.execute("touch bb.bin")
    shell.execute("ls")
    lines = shell.screen.lines()
    assert lines[0] == f"{'a':<8} txt"
    assert lines[1] == f"{'bb':<8} bin"


def test_ls_long_shows_sizes(shell):
    file = shell.volume.create("a.txt")
    file.write(b"Hello")
    shell.execute("ls -l")
    assert shell.screen.lines()[0] == f"{'a':<8} txt  5 bytes"


def test_cat_prints_contents(shell):
    file = shell.volume.create("hi.txt")
    file.write(b"Hello\nthere")
    shell.execute("cat hi.txt")
    lines = shell.screen.lines()
    assert lines[:2] == ["Hello", "there"]


def test_cat_spans_several_sectors(shell):
    data = b"a" * SECTOR_SIZE + b"b" * 10
    shell.volume.create("big.txt").write(data)
    shell.execute("cat big.txt")
    text = "".join(shell.screen.lines())
    assert text == data.decode()


def test_cat_without_argument(shell):
    shell.execute("cat")
    assert shell.screen.lines()[0] == "cat: no file provided"


def test_cat_missing_file(shell):
    shell.execute("cat none.txt")
    assert shell.screen.lines()[0].startswith("cat: none.txt")


def test_clear_blanks_screen(shell):
    shell.execute("echo hello")
    shell.execute("clear")
    assert all(line == "" for line in shell.screen.lines())