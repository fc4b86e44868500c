"""Word-level reader for gcov notes and data files."""

from __future__ import annotations

import struct
from typing import Iterator, Tuple

GCNO_MAGIC = b"gcno"
GCDA_MAGIC = b"gcda"

TAG_FUNCTION = 0x01000000
TAG_BLOCKS = 0x01410000
TAG_ARCS = 0x01430000
TAG_LINES = 0x01450000
TAG_COUNTER_ARCS = 0x01A10000
TAG_OBJECT_SUMMARY = 0xA1000000
TAG_PROGRAM_SUMMARY = 0xA3000000

_WORD = 4


class GCOVFormatError(ValueError):
    """Raised when a notes or data file ends early or holds bad values."""


class GCOVBuffer:
    """Sequential reader over the bytes of a notes or data file.

    Files are a stream of 32-bit words in the byte order of the machine that
    wrote them. The order is detected from the magic: ``gcno``/``gcda`` read
    as big-endian, ``oncg``/``adcg`` as little-endian.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.cursor = 0
        self._order = "<"

    def has_gcno_header(self) -> bool:
        return self._detect_order(GCNO_MAGIC) is not None

    def has_gcda_header(self) -> bool:
        return self._detect_order(GCDA_MAGIC) is not None

    def read_gcno_format(self) -> bool:
        return self._read_format(GCNO_MAGIC)

    def read_gcda_format(self) -> bool:
        return self._read_format(GCDA_MAGIC)

    def _detect_order(self, magic: bytes) -> str | None:
        head = self.data[:_WORD]
        if head == magic:
            return ">"
        if head == magic[::-1]:
            return "<"
        return None

    def _read_format(self, magic: bytes) -> bool:
        order = self._detect_order(magic)
        if order is None:
            return False
        self._order = order
        self.cursor = _WORD
        return True

    @property
    def remaining(self) -> int:
        return len(self.data) - self.cursor

    def at_end(self) -> bool:
        return self.cursor >= len(self.data)

    def read_word(self) -> int:
        end = self.cursor + _WORD
        if end > len(self.data):
            raise GCOVFormatError(f"unexpected end of file at offset {self.cursor}")
        (value,) = struct.unpack_from(self._order + "I", self.data, self.cursor)
        self.cursor = end
        return value

    def read_counter(self) -> int:
        low = self.read_word()
        high = self.read_word()
        return (high << 32) | low

    def read_version(self) -> str:
        """Return the version word as gcc spells it, e.g. ``408*`` or ``B03*``."""
        word = self.read_word()
        return struct.pack(">I", word).decode("latin-1")

    def read_string(self) -> str:
        """Read a word-count prefixed, NUL padded string."""
        length = self.read_word()
        size = length * _WORD
        end = self.cursor + size
        if end > len(self.data):
            raise GCOVFormatError(f"string of {size} bytes runs past end of file")
        raw = self.data[self.cursor : end]
        self.cursor = end
        return raw.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")

    def records(self) -> Iterator[Tuple[int, int, int]]:
        """Yield ``(tag, length_in_words, payload_end)`` for each remaining record.

        The cursor is placed at the payload start before yielding and moved to
        ``payload_end`` afterwards, so callers may read as little as they need.
        """
        while self.remaining >= 2 * _WORD:
            tag = self.read_word()
            if tag == 0:
                return
            length = self.read_word()
            end = self.cursor + length * _WORD
            if end > len(self.data):
                raise GCOVFormatError(
                    f"record 0x{tag:08x} of {length} words runs past end of file"
                )
            yield tag, length, end
            self.cursor = end


def version_number(version: str) -> int:
    """Return ``major * 10 + minor`` for a version string such as ``A03*``.

    GCC spells majors of 10 and above as letters starting at ``A``; older
    releases use two minor digits (``407*`` is 4.7).
    """
    if len(version) < 3:
        return 0
    head = version[0]
    if head.isdigit():
        major = int(head)
    elif "A" <= head <= "Z":
        major = ord(head) - ord("A") + 10
    else:
        return 0
    try:
        minor = int(version[1:3]) if major < 10 else int(version[1])
    except ValueError:
        return 0
    return major * 10 + minor


__all__ = [
    "GCDA_MAGIC",
    "GCNO_MAGIC",
    "GCOVBuffer",
    "GCOVFormatError",
    "TAG_ARCS",
    "TAG_BLOCKS",
    "TAG_COUNTER_ARCS",
    "TAG_FUNCTION",
    "TAG_LINES",
    "TAG_OBJECT_SUMMARY",
    "TAG_PROGRAM_SUMMARY",
    "version_number",
]
