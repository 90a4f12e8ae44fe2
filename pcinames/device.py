"""Devices, fill flags and the access object that ties them together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any

from .params import ParamRegistry

_LOG = logging.getLogger("pcinames")

ADDR_FLAG_MASK = 0xF
DEFAULT_IDS_PATH = "/usr/local/share/pci.ids"


class PciError(Exception):
    """A fatal error reported by the library."""


class Fill(IntFlag):
    """Which pieces of device information are known."""

    NONE = 0
    IDENT = 0x0001
    IRQ = 0x0002
    BASES = 0x0004
    ROM_BASE = 0x0008
    SIZES = 0x0010
    CLASS = 0x0020
    CAPS = 0x0040
    EXT_CAPS = 0x0080
    PHYS_SLOT = 0x0100
    MODULE_ALIAS = 0x0200
    LABEL = 0x0400
    NUMA_NODE = 0x0800
    IO_FLAGS = 0x1000
    DT_NODE = 0x2000
    IOMMU_GROUP = 0x4000
    BRIDGE_BASES = 0x8000
    RESCAN = 0x00010000
    CLASS_EXT = 0x00020000
    SUBSYS = 0x00040000
    PARENT = 0x00080000
    DRIVER = 0x00100000


def _zeros(n: int) -> Any:
    return field(default_factory=lambda: [0] * n)


@dataclass(eq=False)
class Device:
    """One PCI function and what is known about it."""

    domain: int = 0
    bus: int = 0
    dev: int = 0
    func: int = 0
    known_fields: int = 0
    vendor_id: int = 0
    device_id: int = 0
    device_class: int = 0
    prog_if: int = 0
    rev_id: int = 0
    subsys_vendor_id: int = 0
    subsys_id: int = 0
    irq: int = 0
    base_addr: list[int] = _zeros(6)
    size: list[int] = _zeros(6)
    flags: list[int] = _zeros(6)
    rom_base_addr: int = 0
    rom_size: int = 0
    rom_flags: int = 0
    bridge_base_addr: list[int] = _zeros(4)
    bridge_size: list[int] = _zeros(4)
    bridge_flags: list[int] = _zeros(4)
    phy_slot: str | None = None
    module_alias: str | None = None
    label: str | None = None
    numa_node: int = -1
    parent: Device | None = field(default=None, repr=False)
    no_config_access: bool = False
    access: Access | None = field(default=None, repr=False)
    properties: dict[int, str] = field(default_factory=dict, repr=False)

    def want_fill(self, want: int, try_fields: int) -> bool:
        """Return True if some of `want` within `try_fields` still needs filling.

        When it does, all of `try_fields` is marked known.
        """
        want &= try_fields
        if self.known_fields & want == want:
            return False
        self.known_fields |= try_fields
        return True

    def clear_fill(self, fields: int) -> None:
        """Mark the given fields as not known."""
        self.known_fields &= ~fields

    def set_property(self, key: int, value: str) -> str:
        """Store a string property and return it."""
        self.properties[int(key)] = value
        return value

    def get_property(self, key: int) -> str | None:
        return self.properties.get(int(key))

    def read_config(self, pos: int, length: int) -> bytes:
        """Read bytes of configuration space through the access method."""
        access = self.access
        if access is None or access.method is None:
            raise PciError("Device has no access method")
        if self.no_config_access:
            raise PciError("Configuration space of this device is not accessible")
        data = access.method.read(self, pos, length)
        if data is None or len(data) != length:
            raise PciError(f"Cannot read {length} bytes of configuration space at {pos:#x}")
        return bytes(data)

    def read_byte(self, pos: int) -> int:
        return self.read_config(pos, 1)[0]

    def read_word(self, pos: int) -> int:
        return int.from_bytes(self.read_config(pos, 2), "little")

    def read_long(self, pos: int) -> int:
        return int.from_bytes(self.read_config(pos, 4), "little")


@dataclass(eq=False)
class Access:
    """State shared by an access method and the devices it finds."""

    method: Any = None
    writeable: bool = False
    buscentric: bool = False
    debugging: bool = False
    params: ParamRegistry = field(default_factory=ParamRegistry)
    devices: list[Device] = field(default_factory=list)
    id_file_name: str = DEFAULT_IDS_PATH
    numeric_ids: int = 0
    id_lookup_mode: int = 0
    fd: Any = field(default=None, repr=False)
    fd_vpd: Any = field(default=None, repr=False)
    fd_rw: bool = False
    fd_pos: int = 0
    cached_dev: Device | None = field(default=None, repr=False)
    logger: logging.Logger = field(default=_LOG, repr=False)

    def debug(self, msg: str) -> None:
        if self.debugging:
            self.logger.debug(msg)

    def warning(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        raise PciError(msg)

    def add_device(self, dev: Device) -> Device:
        """Attach a device to this access object and list it."""
        dev.access = self
        self.devices.append(dev)
        return dev

    def find_device(self, domain: int, bus: int, dev: int, func: int) -> Device | None:
        return next(
            (
                d
                for d in self.devices
                if (d.domain, d.bus, d.dev, d.func) == (domain, bus, dev, func)
            ),
            None,
        )