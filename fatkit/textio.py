"""Text output for an 80x25 character screen, printf-style formatting and keyboard input."""

from __future__ import annotations

from typing import Iterable

TEXT_WIDTH = 80
TEXT_HEIGHT = 25
COLOR_WHITE = 7
_CELL_BYTES = 2

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_MAX_NUM_LENGTH = 21
_KEY_PRESS_RELEASE_DELIMITER = 0x80

# Scan code set 1.
_KEYMAP = {
    0x02: "1", 0x03: "2", 0x04: "3", 0x05: "4", 0x06: "5",
    0x07: "6", 0x08: "7", 0x09: "8", 0x0A: "9", 0x0B: "0",
    0x0C: "-", 0x0D: "=", 0x0E: "\b", 0x0F: "\t",
    0x10: "q", 0x11: "w", 0x12: "e", 0x13: "r", 0x14: "t",
    0x15: "y", 0x16: "u", 0x17: "i", 0x18: "o", 0x19: "p",
    0x1A: "[", 0x1B: "]", 0x1C: "\n",
    0x1E: "a", 0x1F: "s", 0x20: "d", 0x21: "f", 0x22: "g",
    0x23: "h", 0x24: "j", 0x25: "k", 0x26: "l", 0x27: ";",
    0x28: "'", 0x29: "`", 0x2B: "\\",
    0x2C: "z", 0x2D: "x", 0x2E: "c", 0x2F: "v", 0x30: "b",
    0x31: "n", 0x32: "m", 0x33: ",", 0x34: ".", 0x35: "/",
    0x39: " ",
}


def _wrap_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _to_text(value: int, base: int, size: int, bits: int) -> str:
    if size == 0:
        raise ValueError("size cannot be 0")
    negative_decimal = value < 0 and base == 10
    magnitude = -value if negative_decimal else value & ((1 << bits) - 1)
    if not 2 <= base <= 36:
        return ""
    digits = []
    while True:
        magnitude, digit = divmod(magnitude, base)
        digits.append(_DIGITS[digit])
        if not magnitude:
            break
    text = ("-" if negative_decimal else "") + "".join(reversed(digits))
    if len(text) >= size:
        raise OverflowError(f"{len(text)} characters do not fit a buffer of {size}")
    return text


def itoa(value: int, base: int = 10, size: int = _MAX_NUM_LENGTH) -> str:
    """Render a 32-bit int in ``base``, as it would fit a buffer of ``size`` bytes.

    Negative numbers get a minus sign in base 10 only; in other bases they are
    shown as their unsigned 32-bit value. An unsupported base gives "".
    Raises OverflowError if the text and its terminator exceed ``size``.
    """
    return _to_text(_wrap_signed(value, 32), base, size, 32)


def format_text(fmt: str, *args: object) -> str:
    """Format like the kernel printf: %s %d %x %c, l/ll sizes, %0N zero padding."""
    values = iter(args)

    def take() -> object:
        try:
            return next(values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    out: list[str] = []
    i = 0
    n = len(fmt)
    while i < n:
        ch = fmt[i]
        i += 1
        if ch != "%":
            out.append(ch)
            continue
        if i >= n:
            break
        ch = fmt[i]

        zero_padding = False
        width = 0
        if ch == "0":
            zero_padding = True
            i += 1
            if i >= n:
                break
            width = ord(fmt[i]) - ord("0")  # a single width digit only
            i += 1
            if i >= n:
                break
            ch = fmt[i]

        bits = 32
        if ch == "l":
            if i + 1 < n and fmt[i + 1] == "l":
                i += 1
            bits = 64
            i += 1
            if i >= n:
                break
            ch = fmt[i]
        i += 1

        if ch == "s":
            out.append(str(take()))
        elif ch in ("d", "x"):
            number = _wrap_signed(int(take()), bits)  # type: ignore[arg-type]
            text = _to_text(number, 10 if ch == "d" else 16, _MAX_NUM_LENGTH, bits)
            if zero_padding and width > len(text):
                out.append("0" * (width - len(text)))
            out.append(text)
        elif ch == "c":
            value = take()
            out.append(chr(value) if isinstance(value, int) else str(value)[:1])
        else:
            out.append(ch)
    return "".join(out)


def is_key_press(keycode: int) -> bool:
    """Whether a set-1 scan code reports a key press rather than a release."""
    return keycode < _KEY_PRESS_RELEASE_DELIMITER


def key_to_char(keycode: int) -> str:
    """The character for a set-1 key press scan code, or "" if it has none."""
    return _KEYMAP.get(keycode, "")


class TextScreen:
    """A character/attribute text buffer with a cursor that scrolls at the bottom."""

    def __init__(self, width: int = TEXT_WIDTH, height: int = TEXT_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("screen dimensions must be positive")
        self.width = width
        self.height = height
        self._row_bytes = width * _CELL_BYTES
        self._buffer = bytearray(self._row_bytes * height)
        self._cursor = 0

    def _scroll_up(self) -> None:
        size = len(self._buffer)
        self._buffer[: size - self._row_bytes] = self._buffer[self._row_bytes:]
        self._buffer[size - self._row_bytes:] = bytes(self._row_bytes)
        self._cursor -= self._row_bytes

    def putc(self, ch: str) -> None:
        """Write one character; handles newline and backspace."""
        if ch == "\b":
            if self._cursor - 3 < 0:
                return
            self._cursor -= _CELL_BYTES
            self._buffer[self._cursor] = ord(" ")
            return
        if ch == "\n":
            self._cursor += self._row_bytes - self._cursor % self._row_bytes
        else:
            code = ord(ch)
            self._buffer[self._cursor] = code if code < 0x100 else ord("?")
            self._buffer[self._cursor + 1] = COLOR_WHITE
            self._cursor += _CELL_BYTES
        if self._cursor >= len(self._buffer):
            self._scroll_up()

    def put(self, text: str) -> None:
        """Write a string."""
        for ch in text:
            self.putc(ch)

    def puts(self, text: str) -> None:
        """Write a string followed by a newline."""
        self.put(text)
        self.putc("\n")

    def printf(self, fmt: str, *args: object) -> None:
        """Write formatted text; see format_text."""
        self.put(format_text(fmt, *args))

    def clear(self) -> None:
        """Blank the screen and move the cursor to the top left."""
        self._buffer[:] = bytes(len(self._buffer))
        self._cursor = 0

    def lines(self) -> list[str]:
        """The text of each row, trailing blanks removed."""
        rows = []
        for start in range(0, len(self._buffer), self._row_bytes):
            chars = self._buffer[start:start + self._row_bytes:_CELL_BYTES]
            rows.append(bytes(chars).replace(b"\0", b" ").decode("latin-1").rstrip())
        return rows


def read_line(
    keycodes: Iterable[int],
    screen: TextScreen | None = None,
    max_size: int = 256,
) -> str:
    """Collect typed characters from key press codes until Enter.

    At most ``max_size - 1`` characters are kept; backspace removes the last
    one. Accepted keys are echoed to ``screen``. Raises EOFError if the codes
    run out before Enter.
    """
    chars: list[str] = []
    for keycode in keycodes:
        ch = key_to_char(keycode)
        if ch == "\n":
            if screen is not None:
                screen.putc("\n")
            return "".join(chars)
        if ch == "\b":
            if chars:
                chars.pop()
                if screen is not None:
                    screen.putc(ch)
        elif ch:
            if len(chars) < max_size - 1:
                chars.append(ch)
                if screen is not None:
                    screen.putc(ch)
    raise EOFError("input ended before Enter was pressed")