"""PCI ID to name resolution, with PCI device and access models."""

__version__ = "3.8.0"
__all__ = ["device", "dnsnames", "idlist", "names", "params", "vendorcaps"]