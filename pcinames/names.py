"""Translation of numeric PCI IDs to human-readable names."""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import IntFlag

from .device import Access
from .dnsnames import Resolver, net_lookup
from .idlist import IdCategory, IdDatabase, IdParseError, IdSource, load_id_file

HwdbLookup = Callable[[str, str], "str | None"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class LookupFlag(IntFlag):
    VENDOR = 1
    DEVICE = 2
    CLASS = 4
    SUBSYSTEM = 8
    PROGIF = 16
    NUMERIC = 0x10000
    NO_NUMBERS = 0x20000
    MIXED = 0x40000
    NETWORK = 0x80000
    SKIP_LOCAL = 0x100000
    CACHE = 0x200000
    REFRESH_CACHE = 0x400000
    NO_HWDB = 0x800000


_ARG_COUNTS = {
    LookupFlag.VENDOR: 1,
    LookupFlag.DEVICE: 2,
    LookupFlag.VENDOR | LookupFlag.DEVICE: 2,
    LookupFlag.SUBSYSTEM | LookupFlag.VENDOR: 1,
    LookupFlag.SUBSYSTEM | LookupFlag.DEVICE: 4,
    LookupFlag.VENDOR | LookupFlag.DEVICE | LookupFlag.SUBSYSTEM: 4,
    LookupFlag.CLASS: 1,
    LookupFlag.PROGIF: 2,
}


def _atoi(text: str | None) -> int:
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else 0


def _hwdb_query(cat: int, id1: int, id2: int, id3: int, id4: int) -> tuple[str, str] | None:
    """Return the modalias and property key used to find an ID in the HWDB."""
    queries = {
        IdCategory.VENDOR: (f"pci:v{id1:08X}*", "ID_VENDOR_FROM_DATABASE"),
        IdCategory.DEVICE: (f"pci:v{id1:08X}d{id2:08X}*", "ID_MODEL_FROM_DATABASE"),
        IdCategory.SUBSYSTEM: (f"pci:v{id1:08X}d{id2:08X}sv{id3:08X}sd{id4:08X}*",
                               "ID_MODEL_FROM_DATABASE"),
        IdCategory.GEN_SUBSYSTEM: (f"pci:v*d*sv{id1:08X}sd{id2:08X}*",
                                   "ID_MODEL_FROM_DATABASE"),
        IdCategory.CLASS: (f"pci:v*d*sv*sd*bc{id1:02X}*", "ID_PCI_CLASS_FROM_DATABASE"),
        IdCategory.SUBCLASS: (f"pci:v*d*sv*sd*bc{id1:02X}sc{id2:02X}*",
                              "ID_PCI_SUBCLASS_FROM_DATABASE"),
        IdCategory.PROGIF: (f"pci:v*d*sv*sd*bc{id1:02X}sc{id2:02X}i{id3:02X}*",
                            "ID_PCI_INTERFACE_FROM_DATABASE"),
    }
    try:
        return queries[IdCategory(cat)]
    except (KeyError, ValueError):
        return None


def _format_name(flags: int, name: str | None, num: str, unknown: str) -> str | None:
    if flags & LookupFlag.NO_NUMBERS and name is None:
        return None
    if flags & LookupFlag.NUMERIC:
        return num
    if name is None:
        return f"{unknown} [{num}]" if flags & LookupFlag.MIXED else f"{unknown} {num}"
    if not flags & LookupFlag.MIXED:
        return name
    return f"{name} [{num}]"


def _format_name_pair(flags: int, v: str | None, d: str | None, num: str) -> str | None:
    if flags & LookupFlag.NO_NUMBERS and (v is None or d is None):
        return None
    if flags & LookupFlag.NUMERIC:
        return num
    if flags & LookupFlag.MIXED:
        if v is not None and d is not None:
            return f"{v} {d} [{num}]"
        if v is None:
            return f"Device [{num}]"
        return f"{v} Device [{num}]"
    if v is not None and d is not None:
        return f"{v} {d}"
    if v is None:
        return f"Device {num}"
    return f"{v} Device {num[5:]}"


class NameResolver:
    """Looks up names in the ID list, the HWDB and DNS, in that order.

    `hwdb` takes a modalias and a property key and returns the value;
    `net_resolver` is handed to the DNS lookup as its resolver.
    """

    def __init__(self, access: Access, db: IdDatabase | None = None,
                 hwdb: HwdbLookup | None = None,
                 net_resolver: Resolver | None = None) -> None:
        self.access = access
        self.db = db if db is not None else IdDatabase()
        self.hwdb = hwdb
        self.net_resolver = net_resolver
        self.load_failed = False
        self.cache_dirty = False
        if "net.domain" not in access.params:
            access.params.define("net.domain", None, "DNS domain used for resolving of ID's")
        if "hwdb.disable" not in access.params:
            access.params.define("hwdb.disable", "0",
                                 "Do not look up names in UDEV's HWDB if set to 1")

    def load(self) -> bool:
        """Load the ID list named by the access object.

        Returns False if the file cannot be opened; a malformed file is
        reported as a fatal error.
        """
        self.load_failed = True
        try:
            used = load_id_file(self.db, self.access.id_file_name)
        except IdParseError as exc:
            self.access.error(str(exc))
            raise
        if used is None:
            return False
        self.access.id_file_name = str(used)
        self.load_failed = False
        return True

    def _hwdb_lookup(self, cat: int, id1: int, id2: int, id3: int, id4: int) -> str | None:
        if _atoi(self.access.params.get("hwdb.disable")):
            return None
        query = _hwdb_query(cat, id1, id2, id3, id4)
        if query is None or self.hwdb is None:
            return None
        return self.hwdb(*query)

    def _id_lookup(self, flags: int, cat: int, id1: int, id2: int = 0,
                   id3: int = 0, id4: int = 0) -> str | None:
        tried_hwdb = False
        while True:
            name = self.db.lookup(cat, id1, id2, id3, id4)
            if name is not None:
                return name or None
            if not tried_hwdb and not flags & (LookupFlag.SKIP_LOCAL | LookupFlag.NO_HWDB):
                tried_hwdb = True
                found = self._hwdb_lookup(cat, id1, id2, id3, id4)
                if found is not None:
                    self.db.insert(cat, id1, id2, id3, id4, found, IdSource.HWDB)
                    continue
            if flags & LookupFlag.NETWORK:
                found = net_lookup(self.access.params.get("net.domain"), cat,
                                   id1, id2, id3, id4, self.net_resolver)
                if found is not None:
                    self.db.insert(cat, id1, id2, id3, id4, found, IdSource.NET)
                    self.cache_dirty = True
                else:
                    self.db.insert(cat, id1, id2, id3, id4, "", IdSource.NET)
                continue
            return None

    def _lookup_subsys(self, flags: int, iv: int, id_: int, isv: int, isd: int) -> str | None:
        name = None
        if iv > 0 and id_ > 0:
            name = self._id_lookup(flags, IdCategory.SUBSYSTEM, iv, id_, isv, isd)
        if name is None:
            name = self._id_lookup(flags, IdCategory.GEN_SUBSYSTEM, isv, isd)
        if name is None and iv == isv and id_ == isd:
            name = self._id_lookup(flags, IdCategory.DEVICE, iv, id_)
        return name

    def lookup_name(self, flags: int, *args: int) -> str | None:
        """Describe the IDs in `args` as selected by `flags`.

        Returns None only when NO_NUMBERS is set and a name is missing.
        Raises ValueError for an unknown request and TypeError when the
        number of IDs does not match it.
        """
        flags = int(flags) | int(self.access.id_lookup_mode)
        if not flags & LookupFlag.NO_NUMBERS:
            if self.access.numeric_ids > 1:
                flags |= LookupFlag.MIXED
            elif self.access.numeric_ids:
                flags |= LookupFlag.NUMERIC
        if flags & LookupFlag.MIXED:
            flags &= ~LookupFlag.NUMERIC

        request = flags & 0xFFFF
        if request not in _ARG_COUNTS:
            raise ValueError("invalid name lookup request")
        if len(args) != _ARG_COUNTS[request]:
            raise TypeError(f"lookup expects {_ARG_COUNTS[request]} IDs, got {len(args)}")
        ids = [int(a) for a in args]

        if (not len(self.db) and not flags & (LookupFlag.NUMERIC | LookupFlag.SKIP_LOCAL)
                and not self.load_failed):
            self.load()

        V, D, S = LookupFlag.VENDOR, LookupFlag.DEVICE, LookupFlag.SUBSYSTEM
        if request == V:
            (iv,) = ids
            return _format_name(flags, self._id_lookup(flags, IdCategory.VENDOR, iv),
                                f"{iv:04x}", "Vendor")
        if request == D:
            iv, id_ = ids
            return _format_name(flags, self._id_lookup(flags, IdCategory.DEVICE, iv, id_),
                                f"{id_:04x}", "Device")
        if request == V | D:
            iv, id_ = ids
            v = self._id_lookup(flags, IdCategory.VENDOR, iv)
            d = self._id_lookup(flags, IdCategory.DEVICE, iv, id_)
            return _format_name_pair(flags, v, d, f"{iv:04x}:{id_:04x}")
        if request == S | V:
            (isv,) = ids
            v = self._id_lookup(flags, IdCategory.VENDOR, isv)
            return _format_name(flags, v, f"{isv:04x}", "Unknown vendor")
        if request == S | D:
            iv, id_, isv, isd = ids
            return _format_name(flags, self._lookup_subsys(flags, iv, id_, isv, isd),
                                f"{isd:04x}", "Device")
        if request == V | D | S:
            iv, id_, isv, isd = ids
            v = self._id_lookup(flags, IdCategory.VENDOR, isv)
            d = self._lookup_subsys(flags, iv, id_, isv, isd)
            return _format_name_pair(flags, v, d, f"{isv:04x}:{isd:04x}")
        if request == LookupFlag.CLASS:
            (icls,) = ids
            cls = self._id_lookup(flags, IdCategory.SUBCLASS, icls >> 8, icls & 0xFF)
            if cls is None:
                cls = self._id_lookup(flags, IdCategory.CLASS, icls >> 8)
                if cls is not None and not flags & LookupFlag.NUMERIC:
                    flags |= LookupFlag.MIXED
            return _format_name(flags, cls, f"{icls:04x}", "Class")
        icls, ipif = ids
        pif = self._id_lookup(flags, IdCategory.PROGIF, icls >> 8, icls & 0xFF, ipif)
        if pif is None and icls == 0x0101 and not ipif & 0x70:
            # IDE controllers have complex prog-if semantics.
            bits = ((0x80, "Master"), (0x08, "SecP"), (0x04, "SecO"),
                    (0x02, "PriP"), (0x01, "PriO"))
            pif = " ".join(label for bit, label in bits if ipif & bit)
        return _format_name(flags, pif, f"{ipif:02x}", "ProgIf")