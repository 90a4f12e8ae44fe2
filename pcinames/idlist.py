"""The ID database and the parser of the pci.ids list."""

from __future__ import annotations

import gzip
import string
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO

MAX_LINE = 1024

_HEX = frozenset(string.hexdigits)


class IdCategory(IntEnum):
    UNKNOWN = 0
    VENDOR = 1
    DEVICE = 2
    SUBSYSTEM = 3
    GEN_SUBSYSTEM = 4
    CLASS = 5
    SUBCLASS = 6
    PROGIF = 7


class IdSource(IntEnum):
    UNKNOWN = 0
    CACHE = 1
    NET = 2
    HWDB = 3
    LOCAL = 4


class IdParseError(ValueError):
    """The ID list could not be parsed."""

    def __init__(self, message: str, line: int = 0, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.path = path

    def __str__(self) -> str:
        where = f" at {self.path}," if self.path else " at"
        return f"{self.message}{where} line {self.line}"


@dataclass
class _Entry:
    name: str
    src: IdSource


class IdDatabase:
    """Names keyed by category and up to four numeric IDs."""

    def __init__(self) -> None:
        self._entries: dict[tuple[int, int, int, int, int], _Entry] = {}

    @staticmethod
    def _key(cat: int, id1: int, id2: int, id3: int, id4: int) -> tuple[int, int, int, int, int]:
        return (int(cat), int(id1), int(id2), int(id3), int(id4))

    def insert(self, cat: int, id1: int, id2: int, id3: int, id4: int,
               text: str, src: int) -> bool:
        """Add a name. Return False, leaving the old entry, if the key exists."""
        key = self._key(cat, id1, id2, id3, id4)
        if key in self._entries:
            return False
        self._entries[key] = _Entry(text, IdSource(src))
        return True

    def lookup(self, cat: int, id1: int, id2: int, id3: int, id4: int) -> str | None:
        entry = self._entries.get(self._key(cat, id1, id2, id3, id4))
        return entry.name if entry is not None else None

    def source(self, cat: int, id1: int, id2: int, id3: int, id4: int) -> IdSource | None:
        entry = self._entries.get(self._key(cat, id1, id2, id3, id4))
        return entry.src if entry is not None else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _hex(text: str, count: int) -> int:
    if len(text) != count or not all(c in _HEX for c in text):
        return -1
    return int(text, 16)


def _white(text: str, index: int) -> bool:
    return index < len(text) and text[index] in " \t"


def parse_id_list(db: IdDatabase, lines: Iterable[str | bytes]) -> None:
    """Parse lines of an ID list into `db`.

    Raises IdParseError carrying the offending line number.
    """
    cat: IdCategory | None = None
    id1 = id2 = id3 = id4 = 0

    for lineno, raw in enumerate(lines, 1):
        def fail(message: str = "Parse error") -> IdParseError:
            return IdParseError(message, lineno)

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", "replace")
        text = raw[:-1] if raw.endswith("\n") else raw
        if len(text) >= MAX_LINE - 1 and "\r" not in text[:MAX_LINE - 1]:
            raise fail("Line too long")
        line = text.split("\n", 1)[0].split("\r", 1)[0]
        if line and line[-1] in " \t":
            line = line[:-1]

        stripped = line.lstrip(" \t")
        if not stripped or stripped[0] == "#":
            continue

        body = line.lstrip("\t")
        nest = len(line) - len(body)

        if nest == 0:
            if body[:2] == "C ":
                id1 = _hex(body[2:4], 2)
                if id1 < 0 or not _white(body, 4):
                    raise fail()
                cat = IdCategory.CLASS
                rest = body[5:]
            elif body[:2] == "S ":
                id1 = _hex(body[2:6], 4)
                if id1 < 0 or len(body) > 6:
                    raise fail()
                if db.lookup(IdCategory.VENDOR, id1, 0, 0, 0) is None:
                    raise fail("Vendor does not exist")
                cat = IdCategory.GEN_SUBSYSTEM
                continue
            elif len(body) >= 2 and "A" <= body[0] <= "Z" and body[1] == " ":
                cat = IdCategory.UNKNOWN
                continue
            else:
                id1 = _hex(body[:4], 4)
                if id1 < 0 or not _white(body, 4):
                    raise fail()
                cat = IdCategory.VENDOR
                rest = body[5:]
            id2 = id3 = id4 = 0
        elif cat == IdCategory.UNKNOWN:
            continue
        elif nest == 1:
            if cat in (IdCategory.VENDOR, IdCategory.DEVICE, IdCategory.SUBSYSTEM,
                       IdCategory.GEN_SUBSYSTEM):
                id2 = _hex(body[:4], 4)
                if id2 < 0 or not _white(body, 4):
                    raise fail()
                rest = body[5:]
                if cat != IdCategory.GEN_SUBSYSTEM:
                    cat = IdCategory.DEVICE
                id3 = id4 = 0
            elif cat in (IdCategory.CLASS, IdCategory.SUBCLASS, IdCategory.PROGIF):
                id2 = _hex(body[:2], 2)
                if id2 < 0 or not _white(body, 2):
                    raise fail()
                rest = body[3:]
                cat = IdCategory.SUBCLASS
                id3 = id4 = 0
            else:
                raise fail()
        elif nest == 2:
            if cat in (IdCategory.DEVICE, IdCategory.SUBSYSTEM):
                id3 = _hex(body[:4], 4)
                if id3 < 0 or not _white(body, 4):
                    raise fail()
                id4 = _hex(body[5:9], 4)
                if id4 < 0 or not _white(body, 9):
                    raise fail()
                rest = body[10:]
                cat = IdCategory.SUBSYSTEM
            elif cat in (IdCategory.CLASS, IdCategory.SUBCLASS, IdCategory.PROGIF):
                id3 = _hex(body[:2], 2)
                if id3 < 0 or not _white(body, 2):
                    raise fail()
                rest = body[3:]
                cat = IdCategory.PROGIF
                id4 = 0
            else:
                raise fail()
        else:
            raise fail()

        rest = rest.lstrip(" \t")
        if not rest:
            raise fail()
        if not db.insert(cat, id1, id2, id3, id4, rest, IdSource.LOCAL):
            raise fail("Duplicate entry")


def _open_raw(path: Path) -> BinaryIO | None:
    try:
        handle = open(path, "rb")
    except OSError:
        return None
    magic = handle.read(2)
    if magic == b"\x1f\x8b":
        handle.close()
        return gzip.open(path, "rb")
    handle.seek(0)
    return handle


def _open_ids(path: Path) -> tuple[BinaryIO, Path] | None:
    handle = _open_raw(path)
    if handle is not None:
        return handle, path
    if path.suffix == ".gz":
        plain = path.with_suffix("")
        handle = _open_raw(plain)
        if handle is not None:
            return handle, plain
    return None


def load_id_file(db: IdDatabase, path: str | Path) -> Path | None:
    """Replace the contents of `db` with the ID list at `path`.

    A gzip-compressed file is read transparently; a missing ``.gz`` file
    falls back to the same name without the suffix. Returns the path that
    was read, or None if no file could be opened.
    """
    db.clear()
    opened = _open_ids(Path(path))
    if opened is None:
        return None
    handle, used = opened
    with handle:
        try:
            parse_id_list(db, handle)
        except IdParseError as exc:
            exc.path = str(used)
            raise
        except (OSError, EOFError, zlib.error) as exc:
            raise IdParseError("I/O error", 0, str(used)) from exc
    return used