"""Decoding of vendor-specific PCI capabilities."""

from __future__ import annotations

from .device import Device, PciError

VENDOR_ID = 0x00
DEVICE_ID = 0x02
REDHAT_VENDOR = 0x1AF4

_VIRTIO_TYPES = {1: "CommonCfg", 2: "Notify", 3: "ISR", 4: "DeviceCfg"}


def _virtio(dev: Device, where: int, cap: int, verbose: int) -> str | None:
    length = cap & 0xFF
    cap_type = (cap >> 8) & 0xFF
    if length < 16:
        return None
    try:
        data = dev.read_config(where, length)
    except PciError:
        return None

    out = f"VirtIO: {_VIRTIO_TYPES.get(cap_type, '<unknown>')}\n"
    if verbose < 2:
        return out

    def long_at(offset: int) -> int:
        return int.from_bytes(data[offset:offset + 4], "little")

    line = f"\t\tBAR={data[4]} offset={long_at(8):08x} size={long_at(12):08x}"
    if cap_type == 2 and length >= 20:
        line += f" multiplier={long_at(16):08x}"
    return out + line + "\n"


def _vendor_specific(dev: Device, where: int, cap: int, verbose: int) -> str | None:
    try:
        vendor = dev.read_word(VENDOR_ID)
        device = dev.read_word(DEVICE_ID)
    except PciError:
        return None
    if vendor == REDHAT_VENDOR and 0x1000 <= device <= 0x107F:
        return _virtio(dev, where, cap, verbose)
    return None


def show_vendor_caps(dev: Device, where: int, cap: int, verbose: int = 0) -> str:
    """Return the text describing a vendor-specific capability at `where`."""
    text = _vendor_specific(dev, where, cap, verbose)
    if text is None:
        text = f"Len={cap & 0xFF:02x} <?>\n"
    return "Vendor Specific Information: " + text