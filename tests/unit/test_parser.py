import pytest

from air_opgen.parser import parse
from air_opgen.ast import ArgKind, ArgType, Role
from air_opgen.diagnostics import ParseError, SemanticError

from conftest import SRC

def test_declaration_order_and_overloads():
    t = parse(SRC, filename="t.opcodes")
    assert t.names == ("Nop", "Add32", "AddDouble", "Move", "Branch32", "Jump",
                       "Ret", "Oops", "Lea", "Shuffle", "Patch")
    add = t["Add32"]
    assert [o.arity for o in add.overloads] == [2, 3]
    assert add.overloads[0].signature[1].role is Role.USE_DEF
    assert add.overloads[0].signature[1].type is ArgType.GP
    assert len(add.overloads[0].forms) == 4
    assert add.overloads[1].forms[1].alt_name == "add32Imm"
    assert t["AddDouble"].overloads[0].signature[0].type is ArgType.FP

def test_every_form_matches_signature_length():
    t = parse(SRC)
    for opcode in t:
        for overload in opcode.overloads:
            for form in overload.forms:
                assert len(form.kinds) == len(overload.signature)

def test_signatureless_gets_one_empty_form():
    t = parse("Baz\n")
    (overload,) = t["Baz"].overloads
    assert overload.signature == ()
    assert len(overload.forms) == 1 and overload.forms[0].kinds == ()

def test_special_has_no_overloads():
    t = parse(SRC)
    patch = t["Patch"]
    assert patch.special and patch.overloads == ()

def test_attributes():
    t = parse(SRC)
    assert t["Branch32"].attributes.branch
    assert t["Ret"].attributes.terminal and not t["Ret"].attributes.branch
    assert t["Shuffle"].attributes.effects
    assert not any(vars(t["Add32"].attributes).values())

def test_attributes_accumulate_across_redeclarations():
    t = parse("Foo /effects\nFoo U:G /terminal\n  Tmp\n")
    attrs = t["Foo"].attributes
    assert attrs.effects and attrs.terminal

def test_restricted_tmp():
    t = parse(SRC)
    form = t["Shuffle"].overloads[0].forms[0]
    assert form.kinds[0].name is ArgKind.TMP and form.kinds[0].restricted
    assert not form.kinds[1].restricted
    assert form.restricted

def test_form_origin_line():
    t = parse("Foo U:G\n\n   Tmp\n   Imm\n", filename="o.opcodes")
    forms = t["Foo"].overloads[0].forms
    assert [f.origin.line for f in forms] == [3, 4]

def test_sorted_names():
    t = parse("Zed\nAlpha\nMid\n")
    assert t.names == ("Zed", "Alpha", "Mid")
    assert t.sorted_names == ("Alpha", "Mid", "Zed")

@pytest.mark.parametrize("src", [
    "special Foo\nFoo U:G\n  Tmp\n",
    "Foo U:G\n  Tmp\nspecial Foo\n",
    "special Foo\nspecial Foo\n",
    "special Foo\nFoo\n",
])
def test_cannot_overload_special(src):
    with pytest.raises(SemanticError) as info:
        parse(src)
    assert info.value.reason == "Cannot overload a special opcode"

@pytest.mark.parametrize("src, reason", [
    ("Foo U:G, D:G\n  Tmp\n", "Form has wrong number of arguments for overload"),
    ("Foo U:G\n  Tmp, Tmp\n", "Form has wrong number of arguments for overload"),
    ("Foo\n  Tmp\n", "Form has wrong number of arguments for overload"),
    ("Foo U:G\n  Imm*\n", "Can only apply * to Tmp"),
    ("Foo U:G\n  Addr*\n", "Can only apply * to Tmp"),
    ("Foo D:G\n  Imm\n", "Form has an immediate for a non-use argument"),
    ("Foo UD:G\n  Imm\n", "Form has an immediate for a non-use argument"),
    ("Foo UA:G\n  Imm64\n", "Form has an immediate for a non-use argument"),
    ("Foo U:F\n  Imm\n", "Form has an immediate for a non-general-purpose argument"),
    ("Foo U:F\n  Imm64\n", "Form has an immediate for a non-general-purpose argument"),
    ("Foo U:G\n  Tmp\nFoo U:G\n  Imm\n", "Overload with 1 arguments already declared"),
])
def test_semantic_errors(src, reason):
    with pytest.raises(ParseError) as info:
        parse(src)
    assert isinstance(info.value, SemanticError)
    assert info.value.reason == reason

@pytest.mark.parametrize("src, reason", [
    ("Foo /bogus\n", "Bad / directive"),
    ("Foo U:X\n", "Expected type (G or F)"),
    ("Foo U\n", "Expected :"),
    ("Foo U:G,\n", "Expected role (U, D, UD, or UA)"),
    ("Foo U:G\n  Tmp,\n", "Expected kind (Imm, Imm64, Tmp, Addr, Index, RelCond, ResCond, or DoubleCond)"),
    ("Tmp U:G\n", "Expected identifier"),
    ("special as\n", "Expected identifier"),
    ("Foo U:G\n  Tmp as Imm\n", "Expected identifier"),
    (", Foo\n", "Expected identifier"),
])
def test_parse_errors(src, reason):
    with pytest.raises(ParseError) as info:
        parse(src)
    assert not isinstance(info.value, SemanticError)
    assert info.value.reason == reason

def test_error_location():
    with pytest.raises(SemanticError) as info:
        parse("Foo U:G, D:G\n\n  Tmp\n", filename="bad.opcodes")
    d = info.value.diagnostic
    assert d.file == "bad.opcodes" and d.line == 3
    assert d.message == 'Parse error at "Tmp": Form has wrong number of arguments for overload'

def test_error_at_end_of_file():
    with pytest.raises(ParseError) as info:
        parse("Foo U", filename="eof.opcodes")
    assert info.value.token is None
    assert info.value.diagnostic.message == "Parse error at end of file: Expected :"
