"""Read, write and initialise FAT16 disk images, with a small text shell."""

__version__ = "0.1.0"