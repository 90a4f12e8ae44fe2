import gzip

import pytest

from pcinames.idlist import (
    IdCategory,
    IdDatabase,
    IdParseError,
    IdSource,
    load_id_file,
    parse_id_list,
)

SAMPLE = [
    "# sample list\n",
    "\n",
    "1234  Example Vendor \n",
    "\t5678  Example Device\n",
    "\t\t1234 0001  Example Subsystem\n",
    "C 03  Display controller\n",
    "\t00  VGA compatible controller\n",
    "\t\t01  8514 controller\n",
    "S 1234\n",
    "\t0042  Generic Sub\n",
    "X 12  reserved block\n",
    "\tignored nested line\n",
]


def _parsed(lines=SAMPLE):
    db = IdDatabase()
    parse_id_list(db, lines)
    return db


def test_vendor_and_device():
    db = _parsed()
    assert db.lookup(IdCategory.VENDOR, 0x1234, 0, 0, 0) == "Example Vendor"
    assert db.lookup(IdCategory.DEVICE, 0x1234, 0x5678, 0, 0) == "Example Device"


def test_subsystem():
    db = _parsed()
    assert db.lookup(IdCategory.SUBSYSTEM, 0x1234, 0x5678, 0x1234, 0x0001) == "Example Subsystem"


def test_classes():
    db = _parsed()
    assert db.lookup(IdCategory.CLASS, 0x03, 0, 0, 0) == "Display controller"
    assert db.lookup(IdCategory.SUBCLASS, 0x03, 0x00, 0, 0) == "VGA compatible controller"
    assert db.lookup(IdCategory.PROGIF, 0x03, 0x00, 0x01, 0) == "8514 controller"


def test_generic_subsystem():
    db = _parsed()
    assert db.lookup(IdCategory.GEN_SUBSYSTEM, 0x1234, 0x0042, 0, 0) == "Generic Sub"


def test_reserved_block_skipped_and_sources_local():
    db = _parsed()
    assert len(db) == 7
    assert db.source(IdCategory.VENDOR, 0x1234, 0, 0, 0) == IdSource.LOCAL


def test_insert_duplicate_returns_false():
    db = IdDatabase()
    assert db.insert(IdCategory.VENDOR, 1, 0, 0, 0, "A", IdSource.NET)
    assert not db.insert(IdCategory.VENDOR, 1, 0, 0, 0, "B", IdSource.LOCAL)
    assert db.lookup(IdCategory.VENDOR, 1, 0, 0, 0) == "A"


def test_clear():
    db = _parsed()
    db.clear()
    assert db.lookup(IdCategory.VENDOR, 0x1234, 0, 0, 0) is None
    assert len(db) == 0


def test_duplicate_entry_error():
    lines = ["1234  A\n", "1234  B\n"]
    with pytest.raises(IdParseError) as info:
        _parsed(lines)
    assert info.value.message == "Duplicate entry"
    assert info.value.line == len(lines)


def test_generic_subsystem_needs_vendor():
    with pytest.raises(IdParseError) as info:
        _parsed(["S 9999\n"])
    assert info.value.message == "Vendor does not exist"


@pytest.mark.parametrize("bad", [
    "12g4  Vendor\n",
    "1234\n",
    "1234  \n",
    "C 3  Short\n",
    "S 1234 extra\n",
])
def test_parse_errors_at_top_level(bad):
    with pytest.raises(IdParseError) as info:
        _parsed(["1234  V\n", bad])
    assert info.value.message == "Parse error"
    assert info.value.line == 2


def test_nesting_too_deep():
    lines = ["1234  V\n", "\t5678  D\n", "\t\t1234 0001  S\n", "\t\t\t00  x\n"]
    with pytest.raises(IdParseError, match="Parse error"):
        _parsed(lines)


def test_nested_line_without_block():
    with pytest.raises(IdParseError, match="Parse error"):
        _parsed(["\t5678  Orphan\n"])


def test_line_too_long():
    with pytest.raises(IdParseError) as info:
        _parsed(["1234  " + "x" * 2000 + "\n"])
    assert info.value.message == "Line too long"


def test_crlf_lines_accepted():
    db = _parsed(["1234  Vendor\r\n", "\t0001  Dev\r\n"])
    assert db.lookup(IdCategory.DEVICE, 0x1234, 0x0001, 0, 0) == "Dev"


def test_load_plain_file(tmp_path):
    path = tmp_path / "pci.ids"
    path.write_text("".join(SAMPLE), encoding="utf-8")
    db = IdDatabase()
    assert load_id_file(db, path) == path
    assert db.lookup(IdCategory.VENDOR, 0x1234, 0, 0, 0) == "Example Vendor"


def test_load_gzip_file(tmp_path):
    path = tmp_path / "pci.ids.gz"
    with gzip.open(path, "wt", encoding="utf-8") as fh:
        fh.write("".join(SAMPLE))
    db = IdDatabase()
    assert load_id_file(db, path) == path
    assert db.lookup(IdCategory.CLASS, 0x03, 0, 0, 0) == "Display controller"


def test_load_gz_falls_back_to_plain(tmp_path):
    plain = tmp_path / "pci.ids"
    plain.write_text("".join(SAMPLE), encoding="utf-8")
    db = IdDatabase()
    assert load_id_file(db, tmp_path / "pci.ids.gz") == plain


def test_load_missing_file_returns_none(tmp_path):
    db = IdDatabase()
    db.insert(IdCategory.VENDOR, 1, 0, 0, 0, "old", IdSource.CACHE)
    assert load_id_file(db, tmp_path / "absent.ids") is None
    assert len(db) == 0


def test_load_error_names_file(tmp_path):
    path = tmp_path / "bad.ids"
    path.write_text("1234  V\nzz\n", encoding="utf-8")
    with pytest.raises(IdParseError) as info:
        load_id_file(IdDatabase(), path)
    assert info.value.path == str(path)
    assert str(info.value) == f"Parse error at {path}, line 2"