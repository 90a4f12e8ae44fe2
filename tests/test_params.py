import pytest

from pcinames.params import Param, ParamRegistry


def test_define_and_get():
    reg = ParamRegistry()
    reg.define("sysfs.path", "/sys/bus/pci", "Path to the sysfs device tree")
    assert reg.get("sysfs.path") == "/sys/bus/pci"


def test_get_unknown_returns_none():
    reg = ParamRegistry()
    reg.define("a", "1", "help")
    assert reg.get("b") is None


def test_set_changes_value():
    reg = ParamRegistry()
    reg.define("net.domain", "", "DNS domain")
    reg.set("net.domain", "pci.example.com")
    assert reg.get("net.domain") == "pci.example.com"


def test_set_unknown_raises():
    reg = ParamRegistry()
    with pytest.raises(KeyError):
        reg.set("missing", "x")


def test_iteration_lists_newest_first():
    reg = ParamRegistry()
    reg.define("first", "1", "h1")
    reg.define("second", "2", "h2")
    assert [p.name for p in reg] == ["second", "first"]


def test_later_definition_shadows_earlier():
    reg = ParamRegistry()
    reg.define("x", "old", "h")
    reg.define("x", "new", "h")
    assert reg.get("x") == "new"
    reg.set("x", "changed")
    assert [p.value for p in reg] == ["changed", "old"]


def test_iteration_yields_params_with_help():
    reg = ParamRegistry()
    reg.define("proc.path", "/proc/bus/pci", "Path to the procfs bus tree")
    assert list(reg) == [Param("proc.path", "/proc/bus/pci", "Path to the procfs bus tree")]


def test_clear_removes_all():
    reg = ParamRegistry()
    reg.define("a", "1", "h")
    reg.define("b", "2", "h")
    reg.clear()
    assert len(reg) == 0
    assert reg.get("a") is None
    assert "b" not in reg


def test_contains():
    reg = ParamRegistry()
    reg.define("a", None, "h")
    assert "a" in reg
    assert "z" not in reg