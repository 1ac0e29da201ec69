'''
efectos, terminales y generación nativa (llamada al encoder por nombre)
'''

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional

from .ast import ArgKind, ArgType, Form, Opcode, OpcodeTable, Overload
from .cxx import emit_case_list, emit_form_switch
from .diagnostics import InvariantError, error
from .dispatch import Dispatch
from .matcher import Speed
from .operands import Inst, Operand
from .srcgen import Formatter

# kind -> (accesor python, accesor C++); Tmp depende del banco de la firma
PROJECTIONS: Dict[ArgKind, tuple] = {
    ArgKind.IMM: (Operand.as_trusted_imm32, "asTrustedImm32()"),
    ArgKind.IMM64: (Operand.as_trusted_imm64, "asTrustedImm64()"),
    ArgKind.ADDR: (Operand.as_address, "asAddress()"),
    ArgKind.INDEX: (Operand.as_base_index, "asBaseIndex()"),
    ArgKind.REL_COND: (Operand.as_relational_condition, "asRelationalCondition()"),
    ArgKind.RES_COND: (Operand.as_result_condition, "asResultCondition()"),
    ArgKind.DOUBLE_COND: (Operand.as_double_condition, "asDoubleCondition()"),
}

TMP_PROJECTIONS: Dict[ArgType, tuple] = {
    ArgType.GP: (Operand.gpr, "gpr()"),
    ArgType.FP: (Operand.fpr, "fpr()"),
}

def projection(overload: Overload, form: Form, index: int) -> tuple:
    kind = form.kinds[index].name
    if kind is ArgKind.TMP:
        return TMP_PROJECTIONS[overload.signature[index].type]
    return PROJECTIONS[kind]

def method_name(opcode: Opcode, form: Form) -> str:
    return form.alt_name or opcode.masm_name

class Effects:
    """Predicados de efectos, isTerminal e Inst::generate (modo fast)."""

    def __init__(self, table: OpcodeTable):
        self.table = table
        self.dispatch = Dispatch(table, Speed.FAST)

    def is_terminal(self, opcode: str) -> bool:
        op = self.table.get(opcode)
        return op is not None and (op.attributes.branch or op.attributes.terminal)

    def has_non_arg_non_control_effects(self, inst: Inst) -> bool:
        op = self.table.get(inst.opcode)
        if op is None:
            return False
        if op.attributes.effects:
            return True
        if op.special:
            return bool(inst.args[0].special().has_non_arg_non_control_effects())
        return False

    def has_non_arg_effects(self, inst: Inst) -> bool:
        op = self.table.get(inst.opcode)
        if op is None:
            return False
        attrs = op.attributes
        if attrs.branch or attrs.terminal or attrs.effects:
            return True
        if op.special:
            # misma delegación que la variante sin control (así lo hace el generador C++)
            return bool(inst.args[0].special().has_non_arg_non_control_effects())
        return False

    def generate(self, inst: Inst, jit: Any, context: Any = None) -> Optional[Any]:
        """Llama a jit.<método>(args proyectados); devuelve el resultado solo para /branch."""
        case, overload, form = self.dispatch.select_form(inst)
        if case is None:
            raise InvariantError(error(f"Opcode desconocido: {inst.opcode}"))
        if case.opcode.special:
            return inst.args[0].special().generate(inst, jit, context)
        if form is None:
            raise InvariantError(error(f"Ninguna forma de {inst.opcode} coincide con los argumentos",
                                       hint="comprobar isValidForm antes de generar"))
        args: List[Any] = []
        for index in range(len(form.kinds)):
            accessor: Callable = projection(overload.overload, form, index)[0]
            args.append(accessor(inst.args[index]))
        result = getattr(jit, method_name(case.opcode, form))(*args)
        if case.opcode.attributes.branch:
            return result
        return None

    # ---- C++ ----

    def emit_terminal(self, fmt: Formatter) -> None:
        fmt.line("inline bool isTerminal(Opcode opcode)")
        with fmt.indented("{", "}"):
            with fmt.indented("switch (opcode) {", "}"):
                for op in self.table:
                    if op.attributes.terminal or op.attributes.branch:
                        fmt.outdented_line(f"case {op.name}:")
                fmt.line("return true;")
                fmt.outdented_line("default:")
                fmt.line("return false;")

    def _emit_effects(self, fmt: Formatter, signature: str, attr_test: Callable[[Opcode], bool]) -> None:
        fmt.line(signature)
        with fmt.indented("{", "}"):
            with fmt.indented("switch (opcode) {", "}"):
                emit_case_list(fmt, (o.name for o in self.table if attr_test(o)), "true")
                emit_case_list(fmt, (o.name for o in self.table if o.special),
                               "args[0].special()->hasNonArgNonControlEffects()")
                fmt.outdented_line("default:")
                fmt.line("return false;")

    def emit_effects(self, fmt: Formatter) -> None:
        self._emit_effects(fmt, "bool Inst::hasNonArgNonControlEffects()",
                           lambda o: o.attributes.effects)
        self._emit_effects(fmt, "bool Inst::hasNonArgEffects()",
                           lambda o: o.attributes.branch or o.attributes.terminal or o.attributes.effects)

    def emit_generate(self, fmt: Formatter) -> None:
        def leaf(opcode: Opcode, overload: Optional[Overload], form: Optional[Form]) -> None:
            if opcode.special:
                fmt.line("OPGEN_RETURN(args[0].special()->generate(*this, jit, context));")
                return
            args = ", ".join(f"args[{i}].{projection(overload, form, i)[1]}" for i in range(len(form.kinds)))
            call = f"jit.{method_name(opcode, form)}({args});"
            fmt.line(("result = " + call) if opcode.attributes.branch else call)
            fmt.line("OPGEN_RETURN(result);")

        fmt.line("CCallHelpers::Jump Inst::generate(CCallHelpers& jit, GenerationContext& context)")
        with fmt.indented("{", "}"):
            fmt.line("UNUSED_PARAM(jit);")
            fmt.line("UNUSED_PARAM(context);")
            fmt.line("CCallHelpers::Jump result;")
            emit_form_switch(fmt, self.dispatch, "this", leaf)
            fmt.line("RELEASE_ASSERT_NOT_REACHED();")
            fmt.line("return result;")
