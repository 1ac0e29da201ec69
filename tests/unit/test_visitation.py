from air_opgen.ast import ArgType, Role
from air_opgen.operands import Inst, Operand

def _visit(artifacts, inst):
    seen = []
    artifacts.visitation.for_each_arg(inst, lambda arg, role, type: seen.append((arg, role, type)))
    return seen

def test_signature_positions(artifacts):
    a, b = Operand.tmp("a"), Operand.tmp("b")
    assert _visit(artifacts, Inst("Add32", [a, b])) == [
        (a, Role.USE, ArgType.GP), (b, Role.USE_DEF, ArgType.GP)]

def test_overload_picked_by_arity(artifacts):
    a, b, c = Operand.imm(1), Operand.tmp("b"), Operand.tmp("c")
    seen = _visit(artifacts, Inst("Add32", [a, b, c]))
    assert [(r, t) for _, r, t in seen] == [
        (Role.USE, ArgType.GP), (Role.USE, ArgType.GP), (Role.DEF, ArgType.GP)]

def test_float_and_use_addr(artifacts):
    seen = _visit(artifacts, Inst("AddDouble", [Operand.tmp("f0", ArgType.FP), Operand.tmp("f1", ArgType.FP)]))
    assert [t for _, _, t in seen] == [ArgType.FP, ArgType.FP]
    seen = _visit(artifacts, Inst("Lea", [Operand.addr("sp", 8), Operand.tmp("a")]))
    assert seen[0][1] is Role.USE_ADDR

def test_zero_arity_and_unknown(artifacts):
    assert _visit(artifacts, Inst("Nop")) == []
    assert _visit(artifacts, Inst("Nope", [Operand.tmp("a")])) == []

def test_special_visits_placeholder_then_delegates(artifacts, make_special):
    special = Operand.special_arg(make_special())
    x = Operand.tmp("x")
    seen = _visit(artifacts, Inst("Patch", [special, x]))
    assert seen == [(special, Role.USE, ArgType.GP), (x, Role.USE_DEF, ArgType.FP)]
