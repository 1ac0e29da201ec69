import pytest

from air_opgen.enumeration import build_enum
from air_opgen.parser import parse

SORTED = ("Add32", "AddDouble", "Branch32", "Jump", "Lea", "Move", "Nop",
          "Oops", "Patch", "Ret", "Shuffle")

def test_names_sorted_and_counted(artifacts):
    e = artifacts.enumeration
    assert e.names == SORTED
    assert e.count == 11
    assert e.index("Add32") == 0 and e.index("Shuffle") == 10

def test_declared_order_kept(artifacts):
    assert artifacts.enumeration.declared == artifacts.table.names

def test_overloads_do_not_duplicate_names():
    e = build_enum(parse("B U:G\n Tmp\nA\nB U:G, D:G\n Tmp, Tmp\n"))
    assert e.names == ("A", "B")
    assert e.count == 2

def test_display(artifacts):
    assert artifacts.enumeration.display("Move") == "Move"
    assert "Move" in artifacts.enumeration
    with pytest.raises(KeyError):
        artifacts.enumeration.display("Nope")
