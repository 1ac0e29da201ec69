'''
admisión de pila: ¿sigue siendo válida la forma si el argumento i pasa a ser memoria?
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .ast import ArgKind, Form, Opcode, OpcodeTable, Overload
from .cxx import args_getter, emit_default, emit_tree
from .dispatch import arg_kind
from .matcher import EMPTY, Speed, Tree, match_forms, select
from .operands import Inst
from .srcgen import Formatter

def _admits_addr(form: Form, index: int) -> bool:
    return index < len(form.kinds) and form.kinds[index].name is ArgKind.ADDR

def _count(forms: Sequence[Form], index: int) -> Tuple[int, int]:
    yes = sum(1 for f in forms if _admits_addr(f, index))
    return yes, len(forms) - yes

@dataclass(frozen=True)
class OverloadPlan:
    """admits=True: todas las formas aceptan Addr; si no, se evalúa `tree`."""
    overload: Overload
    admits: bool = False
    tree: Tree = EMPTY

@dataclass(frozen=True)
class ColumnPlan:
    """Plan para un índice de argumento; `uniform` evita el matching completo."""
    uniform: Optional[bool]
    arity_switch: bool = False
    overloads: Tuple[OverloadPlan, ...] = ()

def plan_column(opcode: Opcode, index: int) -> ColumnPlan:
    all_forms = [f for o in opcode.overloads for f in o.forms]
    yes, no = _count(all_forms, index)
    # yes primero: sin formas, Addr no se admite
    if yes == 0:
        return ColumnPlan(False)
    if no == 0:
        return ColumnPlan(True)

    plans = []
    for overload in opcode.overloads:
        yes, no = _count(overload.forms, index)
        if yes == 0:
            continue
        if no == 0:
            plans.append(OverloadPlan(overload, admits=True))
            continue
        tree = match_forms(overload.forms, Speed.SAFE,
                           prune=lambda forms, index=index: not any(_admits_addr(f, index) for f in forms))
        plans.append(OverloadPlan(overload, tree=tree))
    return ColumnPlan(None, len(opcode.overloads) != 1, tuple(plans))

class StackAdmission:
    """Inst::admitsStack(argIndex)."""

    def __init__(self, table: OpcodeTable):
        self.table = table
        self.plans: Dict[str, Tuple[ColumnPlan, ...]] = {
            o.name: tuple(plan_column(o, i) for i in range(o.max_arity))
            for o in table if not o.special
        }

    def admits_stack(self, inst: Inst, arg_index: int) -> bool:
        opcode = self.table.get(inst.opcode)
        if opcode is None:
            return False
        if opcode.special:
            # el argumento 0 es el propio Special
            if not arg_index:
                return False
            return bool(inst.args[0].special().admits_stack(inst, arg_index))

        plans = self.plans[opcode.name]
        if arg_index >= len(plans):
            return False
        plan = plans[arg_index]
        if plan.uniform is not None:
            return plan.uniform

        def getter(column: int):
            if column == arg_index:
                return ArgKind.ADDR
            return arg_kind(inst, column)

        for op in plan.overloads:
            if plan.arity_switch and op.overload.arity != len(inst.args):
                continue
            if op.admits:
                return True
            return select(op.tree, getter) is not None
        return False

    # ---- C++ ----

    def emit(self, fmt: Formatter) -> None:
        fmt.line("bool Inst::admitsStack(unsigned argIndex)")
        with fmt.indented("{", "}"):
            with fmt.indented("switch (opcode) {", "}"):
                for opcode in self.table:
                    fmt.outdented_line(f"case {opcode.name}:")
                    if opcode.special:
                        fmt.line("if (!argIndex)")
                        fmt.line("return false;")
                        fmt.line("OPGEN_RETURN(args[0].special()->admitsStack(*this, argIndex));")
                    else:
                        self._emit_opcode(fmt, opcode)
                    fmt.line("break;")
                emit_default(fmt)
            fmt.line("return false;")

    def _emit_opcode(self, fmt: Formatter, opcode: Opcode) -> None:
        with fmt.indented("switch (argIndex) {", "}"):
            for index, plan in enumerate(self.plans[opcode.name]):
                fmt.outdented_line(f"case {index}:")
                if plan.uniform is not None:
                    fmt.line(f"OPGEN_RETURN({'true' if plan.uniform else 'false'});")
                else:
                    self._emit_overloads(fmt, plan, index)
                fmt.line("break;")
            emit_default(fmt)

    def _emit_overloads(self, fmt: Formatter, plan: ColumnPlan, index: int) -> None:
        getter = args_getter("this")

        def column_getter(column: int) -> str:
            # hipótesis: el argumento index pasa a ser una dirección
            return "Arg::Addr" if column == index else getter(column)

        def body(op: OverloadPlan) -> None:
            if op.admits:
                fmt.line("OPGEN_RETURN(true);")
            else:
                emit_tree(fmt, op.tree, column_getter, lambda form: fmt.line("OPGEN_RETURN(true);"))

        if not plan.arity_switch:
            for op in plan.overloads:
                body(op)
            return
        with fmt.indented("switch (args.size()) {", "}"):
            for op in plan.overloads:
                fmt.outdented_line(f"case {op.overload.arity}:")
                body(op)
                fmt.line("break;")
            emit_default(fmt)
