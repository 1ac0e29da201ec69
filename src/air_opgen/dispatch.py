'''
despacho por opcode y por aridad sobre el motor de matching
'''

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .ast import Form, Opcode, OpcodeTable, Overload
from .matcher import EMPTY, Speed, Tree, match_forms, select, tree_size
from .operands import Inst

LOG = logging.getLogger("air_opgen")

@dataclass(frozen=True)
class OverloadCase:
    overload: Overload
    tree: Tree = EMPTY

@dataclass(frozen=True)
class OpcodeCase:
    """Entrada del switch por opcode.

    Los special no tienen sobrecargas ni switch de aridad.
    """
    opcode: Opcode
    arity_switch: bool
    overloads: Tuple[OverloadCase, ...] = ()

    def select_overload(self, arity: int) -> Optional[OverloadCase]:
        if self.opcode.special:
            return None
        if not self.arity_switch:
            # un único overload y modo fast: no se comprueba la aridad
            return self.overloads[0] if self.overloads else None
        for case in self.overloads:
            if case.overload.arity == arity:
                return case
        return None

def needs_arity_switch(opcode: Opcode, speed: Speed) -> bool:
    return len(opcode.overloads) != 1 or speed is Speed.SAFE

class Dispatch:
    """Switch por opcode (orden de declaración) con árboles por sobrecarga."""

    def __init__(self, table: OpcodeTable, speed: Speed, *, with_forms: bool = True):
        self.table = table
        self.speed = speed
        cases = []
        for opcode in table:
            if opcode.special:
                cases.append(OpcodeCase(opcode, False))
                continue
            overloads = tuple(
                OverloadCase(o, match_forms(o.forms, speed) if with_forms else EMPTY)
                for o in opcode.overloads
            )
            for case in overloads:
                LOG.debug("%s/%d (%s): %d switches", opcode.name, case.overload.arity,
                          speed.value, tree_size(case.tree))
            cases.append(OpcodeCase(opcode, needs_arity_switch(opcode, speed), overloads))
        self.cases: Tuple[OpcodeCase, ...] = tuple(cases)
        self._by_name = {c.opcode.name: c for c in self.cases}

    def __iter__(self) -> Iterator[OpcodeCase]:
        return iter(self.cases)

    def case(self, name: str) -> Optional[OpcodeCase]:
        return self._by_name.get(name)

    def lookup(self, inst: Inst) -> Tuple[Optional[OpcodeCase], Optional[OverloadCase]]:
        """(caso de opcode, caso de sobrecarga) para la instrucción; None si cae en default."""
        case = self._by_name.get(inst.opcode)
        if case is None or case.opcode.special:
            return case, None
        return case, case.select_overload(len(inst.args))

    def select_form(self, inst: Inst) -> Tuple[Optional[OpcodeCase], Optional[OverloadCase], Optional[Form]]:
        case, overload = self.lookup(inst)
        if overload is None:
            return case, None, None
        form = select(overload.tree, lambda column: arg_kind(inst, column))
        return case, overload, form

def arg_kind(inst: Inst, column: int):
    if column < len(inst.args):
        return inst.args[column].kind
    return None
