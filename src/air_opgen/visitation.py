'''
visita de argumentos: (arg, rol, tipo) por cada posición de la firma
'''

from __future__ import annotations
from typing import Optional

from .ast import ArgType, OpcodeTable, Role
from .cxx import emit_opcode_switch
from .dispatch import Dispatch, OpcodeCase, OverloadCase
from .matcher import Speed
from .operands import ArgVisitor, Inst
from .srcgen import Formatter

class ArgVisitation:
    """Inst::forEachArg. Modo fast: el switch de aridad solo existe con varias sobrecargas."""

    def __init__(self, table: OpcodeTable):
        self.dispatch = Dispatch(table, Speed.FAST, with_forms=False)

    def for_each_arg(self, inst: Inst, functor: ArgVisitor) -> None:
        case, overload = self.dispatch.lookup(inst)
        if case is None:
            return
        if case.opcode.special:
            # posición sintética: el Special se modela como un inmediato usado
            functor(inst.args[0], Role.USE, ArgType.GP)
            inst.args[0].special().for_each_arg(inst, functor)
            return
        if overload is None:
            return
        for index, arg in enumerate(overload.overload.signature):
            functor(inst.args[index], arg.role, arg.type)

    def emit(self, fmt: Formatter) -> None:
        def body(case: OpcodeCase, overload: Optional[OverloadCase]) -> None:
            if overload is None:
                fmt.line("functor(args[0], Arg::Use, Arg::GP);")
                fmt.line("args[0].special()->forEachArg(*this, scopedLambda<EachArgCallback>(functor));")
                return
            for index, arg in enumerate(overload.overload.signature):
                fmt.line(f"functor(args[{index}], Arg::{arg.role.label}, Arg::{arg.type.label});")

        fmt.line("template<typename Functor>")
        fmt.line("void Inst::forEachArg(const Functor& functor)")
        with fmt.indented("{", "}"):
            emit_opcode_switch(fmt, self.dispatch, "this", body)
