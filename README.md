# fatkit

Tools for working with FAT16 disk images. fatkit parses the boot sector and
the root directory, follows and extends cluster chains, reads and writes
files, and runs a small command shell over a volume.

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Preparing an image

`initfat16` writes a fresh, empty first file allocation table into an image
whose boot sector is already in place:

    initfat16 disk.img

It reads the boot sector from the start of the file. It then writes
`fat_size` zeroed sectors after the reserved sectors, with the two reserved
entries set to `0xFFF8` and `0xFFFF`. On success it prints
`FAT16 initialized successfully.` and exits with 0. If the argument is
missing or the image cannot be read, it prints a message and exits with 1.
The same work is available as `fatkit.initfat16.initialize_fat(drive, bpb)`.

## Using a volume

```python
from fatkit.drive import Drive
from fatkit.volume import Fat16Volume

with Drive.open("disk.img") as drive:
    volume = Fat16Volume(drive)

    for name in volume.list_names():
        print(name)

    notes = volume.create("notes.txt")
    notes.write(b"Hello, FAT16!", 0)
    print(notes.read(5, 0))          # b'Hello'

    kernel = volume.open("kernel.bin")
    header = kernel.read(512, 0)
```

- Names are given in the usual `name.ext` form. They are converted to the
  padded 8.3 form stored on disk (`to_fat16_filename` in `fatkit.structures`).
  A name without a dot, or with an extension longer than three bytes, raises
  `ValueError`.
- `Fat16Volume.find` compares names without regard to case.
  `Fat16Volume.open` raises `FileNotFoundError` for a missing file.
- `Fat16File.read(size, offset)` returns fewer bytes at the end of the file.
  `Fat16File.write(data, offset)` allocates and links clusters as needed,
  grows `file_size` and stores the updated directory entry. It returns the
  number of bytes written.
- Only entries flagged as regular files (`MDSCoreFlags.FILE` in the reserved
  byte) can be read or written. Any other entry raises `ValueError`.
- A full root directory or a full FAT raises `OSError` with `ENOSPC`.
  Drive failures raise `fatkit.drive.DriveError`.
- New directory entries take their timestamps from a `fatkit.rtc.Clock`. By
  default it adds two hours to local time and keeps only the last two digits
  of the year, counted from 2000. Pass your own `Clock(now, tz_offset)` to
  `Fat16Volume` to control this.

## Lower-level pieces

- `fatkit.structures` holds `BootSector`, `DirEntry`, `MDSCoreFlags` and the
  on-disk constants.
- `fatkit.fat` holds `FatTable`, which handles `next_cluster`, `allocate`,
  `link`, `unlink` and `chain_runs`. It also has `next_cluster_from_runs` and
  `cluster_at_offset`, which work over `(start, length)` run lists.
- `fatkit.rtc` holds `bcd_to_bin`, `fat_time`, `fat_date` and `Clock`.
- `fatkit.memranges` holds `Range`, `remove_empty`, `merge_adjacent`,
  `defragment`, `pop_of_size` and `pop_of_size_or_less`.
- `fatkit.bitmap` holds `Bitmap`, a fixed-size bit set.
- `fatkit.textio` holds:
  - `itoa`;
  - `format_text`, a printf-style formatter (`%s %d %x %c`, `l`/`ll`, `%0N`);
  - `is_key_press` and `key_to_char`, which decode set-1 scan codes;
  - `read_line`, which builds a line from scan codes;
  - `TextScreen`, an in-memory character screen that scrolls.

## The shell

```python
from fatkit.shell import Shell
from fatkit.textio import TextScreen

screen = TextScreen()
shell = Shell(volume, screen)
shell.execute("touch hello.txt")
shell.execute("ls -l")
shell.execute("echo hi there")
print("\n".join(screen.lines()))
```

The shell understands these commands:

- `echo`
- `clear`
- `ls` (add `l` to the flags to show sizes)
- `cat <file>`
- `touch <file>`
- `shutdown`
- `reboot`

A command is matched when the line starts with its name. `shutdown` and
`reboot` raise `ShutdownRequested` and `RebootRequested`, so the caller
decides what they mean.

## What it does not do

- The root directory is the only directory. There are no subdirectories.
- Files cannot be deleted or truncated.
- Long file names are not supported.
- `initfat16` does not write a boot sector and does not format an image. It
  only resets the first FAT of an image that already has a boot sector.
- The shell has no graphics. `color` and `donut` only print a notice.
- Output goes to an in-memory `TextScreen`, not to a terminal.
- No interactive prompt is provided. Feed lines to `Shell.execute` yourself.
  To build lines from scan codes, use `read_line`.