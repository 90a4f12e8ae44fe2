# pcinames

Turn PCI vendor, device, subsystem, class and programming-interface numbers
into readable names, the way `lspci` prints them. Names come from a
`pci.ids` list, and optionally from a hardware database lookup you supply
and from DNS TXT records.

## Installing

```
pip install .
```

## Modules

- `pcinames.idlist` parses `pci.ids` text into an `IdDatabase`.
  `parse_id_list(db, lines)` takes any iterable of `str` or `bytes` lines;
  `load_id_file(db, path)` reads a file (gzip-compressed files are read
  transparently, and a missing `foo.gz` falls back to `foo`) and returns the
  path it read, or `None` if nothing could be opened. Malformed input raises
  `IdParseError`, which carries the line number and path. Entries are keyed
  by `IdCategory` and up to four IDs and remember their `IdSource`.
- `pcinames.names.NameResolver` answers `lookup_name(flags, *ids)`, with the
  request chosen by `LookupFlag` (`VENDOR`, `DEVICE`, `SUBSYSTEM`, `CLASS`,
  `PROGIF` and their combinations) and the output shaped by `NUMERIC`,
  `MIXED` and `NO_NUMBERS`. If its database is empty it loads the file named
  by `Access.id_file_name` first. Missing names are looked up through the
  optional `hwdb(modalias, key)` callable unless `NO_HWDB` or `SKIP_LOCAL`
  is set or the `hwdb.disable` parameter is non-zero, and through DNS when
  `NETWORK` is set and the `net.domain` parameter names a domain.
- `pcinames.dnsnames` builds DNS query names for IDs (`dns_query_name`),
  extracts TXT strings from raw response packets (`parse_txt_answers`,
  raising `DnsFormatError` on malformed packets) and performs the lookup
  (`net_lookup`), using dnspython's resolver unless you pass your own
  `resolver(qname) -> bytes | None`.
- `pcinames.params.ParamRegistry` holds named parameters with default
  values and help texts; `set` raises `KeyError` for an undefined name.
- `pcinames.device` models devices and access state: `Device` with its
  `Fill` flags (`want_fill`, `clear_fill`), string properties and
  little-endian configuration reads (`read_byte`, `read_word`, `read_long`);
  `Access` with its parameters, device list (`add_device`, `find_device`)
  and logging helpers. `Access.error` raises `PciError`.
- `pcinames.vendorcaps.show_vendor_caps(dev, where, cap, verbose)` returns
  the text describing a vendor-specific capability; VirtIO capabilities of
  devices with vendor 0x1af4 and device IDs 0x1000 to 0x107f are decoded.

## Example

```python
from pcinames.device import Access
from pcinames.idlist import IdDatabase, parse_id_list
from pcinames.names import LookupFlag, NameResolver

db = IdDatabase()
parse_id_list(db, [
    "abcd  Example Vendor\n",
    "\t0001  Example Widget\n",
])
resolver = NameResolver(Access(), db=db)

resolver.lookup_name(LookupFlag.VENDOR | LookupFlag.DEVICE, 0xABCD, 0x0001)
# 'Example Vendor Example Widget'
resolver.lookup_name(LookupFlag.VENDOR | LookupFlag.DEVICE, 0xABCD, 0x0002)
# 'Example Vendor Device 0002'
resolver.lookup_name(LookupFlag.VENDOR | LookupFlag.DEVICE | LookupFlag.MIXED, 0xABCD, 0x0001)
# 'Example Vendor Example Widget [abcd:0001]'
```

## What it does not do

The package does not discover PCI devices on the running system and has no
command-line tool. It does not read configuration space by itself: a
`Device` reads it through the object stored in its `Access.method`, which
must provide `read(dev, pos, length)` returning bytes. No name cache is
written to disk, and no hardware database is consulted unless you pass a
`hwdb` callable to `NameResolver`.

## Tests

```
pip install .[test]
pytest
```