import os

from air_opgen.generator import generate_text, main
from air_opgen.ast import ArgKind, ArgType, Role
from air_opgen.operands import Inst, Operand

from conftest import SRC, FakeSpecial

# --- escenarios de extremo a extremo ---

def test_scenario_branch_opcode():
    a = generate_text("Foo U:G, D:G /branch\n    Tmp, Tmp\n")
    assert a.validity.is_valid_form("Foo", ArgKind.TMP, ArgKind.TMP)
    assert not a.validity.is_valid_form("Foo", ArgKind.IMM, ArgKind.TMP)
    assert a.effects.is_terminal("Foo")

def test_scenario_special_visits_placeholder():
    a = generate_text("special Bar\n")
    special = Operand.special_arg(FakeSpecial())
    extra = Operand.tmp("x")
    seen = []
    a.visitation.for_each_arg(Inst("Bar", [special, extra]), lambda *e: seen.append(e))
    assert seen[0] == (special, Role.USE, ArgType.GP)
    assert seen[1:] == [(extra, Role.USE_DEF, ArgType.FP)]

def test_scenario_signatureless():
    a = generate_text("Baz\n")
    (overload,) = a.table["Baz"].overloads
    assert len(overload.forms) == 1
    assert a.validity.is_valid_form("Baz")
    assert a.validity.is_valid(Inst("Baz"))

# --- CLI ---

def test_cli_writes_headers(tmp_path, capsys):
    src = tmp_path / "Air.opcodes"
    src.write_text(SRC, encoding="utf-8")
    out = tmp_path / "gen"
    assert main([str(src), "-o", str(out)]) == 0
    assert sorted(os.listdir(out)) == ["AirOpcode.h", "AirOpcodeGenerated.h", "AirOpcodeUtils.h"]
    text = (out / "AirOpcode.h").read_text(encoding="utf-8")
    assert f"from {src} -- do not edit!" in text

def test_cli_dsl_error_writes_nothing(tmp_path, capsys):
    src = tmp_path / "bad.opcodes"
    src.write_text("special Foo\nFoo U:G\n  Tmp\n", encoding="utf-8")
    out = tmp_path / "gen"
    assert main([str(src), "-o", str(out)]) == 1
    assert not out.exists()
    err = capsys.readouterr().err
    assert "Cannot overload a special opcode" in err
    assert f"{src}:2:" in err

def test_cli_ambiguous_forms_write_nothing(tmp_path, capsys):
    src = tmp_path / "dup.opcodes"
    src.write_text("Foo U:G, D:G\n  Tmp, Tmp\n  Tmp, Tmp\n", encoding="utf-8")
    out = tmp_path / "gen"
    assert main([str(src), "-o", str(out)]) == 1
    assert not out.exists()
    assert "Did not reduce to one form" in capsys.readouterr().err

def test_cli_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.opcodes"), "-o", str(tmp_path)]) == 2
    assert "no pude leer" in capsys.readouterr().err

def test_cli_write_failure_leaves_no_partial_headers(tmp_path, capsys):
    src = tmp_path / "Air.opcodes"
    src.write_text(SRC, encoding="utf-8")
    out = tmp_path / "gen"
    out.mkdir()
    (out / "AirOpcodeUtils.h").mkdir()
    assert main([str(src), "-o", str(out)]) == 3
    assert sorted(os.listdir(out)) == ["AirOpcodeUtils.h"]
    assert "ERROR al escribir salidas" in capsys.readouterr().err

def test_cli_write_failure_keeps_previous_headers(tmp_path, capsys):
    src = tmp_path / "Air.opcodes"
    src.write_text(SRC, encoding="utf-8")
    out = tmp_path / "gen"
    out.mkdir()
    (out / "AirOpcode.h").write_text("viejo", encoding="utf-8")
    (out / "AirOpcodeGenerated.h").mkdir()
    assert main([str(src), "-o", str(out)]) == 3
    assert (out / "AirOpcode.h").read_text(encoding="utf-8") == "viejo"
    assert not [n for n in os.listdir(out) if n.endswith(".tmp")]
