'''
predicados de validez: por kinds (isValidForm) y por instrucción (Inst::isValidForm)
'''

from __future__ import annotations
from typing import Callable, Mapping, Optional, Sequence, Union

from .ast import ArgKind, Form, Opcode, OpcodeTable, Overload
from .cxx import emit_form_switch, emit_tree
from .diagnostics import InvariantError, error_at
from .dispatch import Dispatch
from .matcher import Speed, select
from .operands import Inst
from .srcgen import Formatter

# hook para formas con Tmp*: una función por opcode (is<Nombre>Valid)
InstValidator = Callable[[Inst], bool]
# hook opcional para el predicado por kinds
KindValidator = Callable[[Opcode, Sequence[ArgKind]], bool]

def _as_kind(kind: Union[ArgKind, str]) -> ArgKind:
    if isinstance(kind, ArgKind):
        return kind
    return ArgKind(kind)

class Validity:
    """Ambos predicados recorren los mismos árboles en modo safe."""

    def __init__(self, table: OpcodeTable, *,
                 custom_validators: Optional[Mapping[str, InstValidator]] = None,
                 restricted_form_hook: Optional[KindValidator] = None):
        self.table = table
        self.dispatch = Dispatch(table, Speed.SAFE)
        self.custom_validators = dict(custom_validators or {})
        self.restricted_form_hook = restricted_form_hook

    def is_valid_form(self, opcode: str, *kinds: Union[ArgKind, str]) -> bool:
        """True si `kinds` coincide exactamente con alguna forma declarada.

        Addr acepta también Stack y CallArg. Las formas con Tmp* necesitan más
        información que los kinds: se consulta restricted_form_hook y, sin él,
        la respuesta es False.
        """
        case = self.dispatch.case(opcode)
        if case is None or case.opcode.special:
            return False
        overload = case.select_overload(len(kinds))
        if overload is None:
            return False
        kinds = tuple(_as_kind(k) for k in kinds)
        form = select(overload.tree, lambda column: kinds[column])
        if form is None:
            return False
        if form.restricted:
            if self.restricted_form_hook is None:
                return False
            return bool(self.restricted_form_hook(case.opcode, kinds))
        return True

    def is_valid(self, inst: Inst) -> bool:
        case, overload, form = self.dispatch.select_form(inst)
        if case is None:
            return False
        if case.opcode.special:
            if len(inst.args) < 1 or not inst.args[0].is_special():
                return False
            return bool(inst.args[0].special().is_valid(inst))
        if form is None:
            return False
        # el kind ya implica el rol; solo queda comprobar el banco de los Tmp
        for index, (arg, kind) in enumerate(zip(overload.overload.signature, form.kinds)):
            if kind.name is ArgKind.TMP and not kind.restricted:
                if not inst.args[index].is_bank(arg.type):
                    return False
        if form.restricted:
            return bool(self._custom_validator(case.opcode)(inst))
        return True

    def _custom_validator(self, opcode: Opcode) -> InstValidator:
        hook = self.custom_validators.get(opcode.name)
        if hook is None:
            raise InvariantError(error_at(
                f"Missing validator is{opcode.name}Valid for a form with Tmp*",
                opcode.origin))
        return hook

    # ---- C++ ----

    def emit_static(self, fmt: Formatter) -> None:
        fmt.line("template<typename... Arguments>")
        fmt.line("ALWAYS_INLINE bool isValidForm(Opcode opcode, Arguments... arguments)")
        with fmt.indented("{", "}"):
            fmt.line("Arg::Kind kinds[sizeof...(Arguments)] = { arguments... };")
            with fmt.indented("switch (opcode) {", "}"):
                for case in self.dispatch:
                    fmt.outdented_line(f"case {case.opcode.name}:")
                    with fmt.indented("switch (sizeof...(Arguments)) {", "}"):
                        for overload in case.overloads:
                            fmt.outdented_line(f"case {overload.overload.arity}:")
                            emit_tree(fmt, overload.tree,
                                      lambda column: f"opgenHiddenPtrIdentity(kinds)[{column}]",
                                      lambda form: fmt.line(f"OPGEN_RETURN({'false' if form.restricted else 'true'});"))
                            fmt.line("break;")
                        fmt.outdented_line("default:")
                        fmt.line("break;")
                    fmt.line("break;")
                fmt.outdented_line("default:")
                fmt.line("break;")
            fmt.line("return false;")

    def emit_inst(self, fmt: Formatter) -> None:
        def leaf(opcode: Opcode, overload: Optional[Overload], form: Optional[Form]) -> None:
            if opcode.special:
                fmt.line("if (args.size() < 1)")
                fmt.line("return false;")
                fmt.line("if (!args[0].isSpecial())")
                fmt.line("return false;")
                fmt.line("OPGEN_RETURN(args[0].special()->isValid(*this));")
                return
            for index, (arg, kind) in enumerate(zip(overload.signature, form.kinds)):
                if kind.name is ArgKind.TMP and not kind.restricted:
                    fmt.line(f"if (!args[{index}].tmp().is{arg.type.label}())")
                    fmt.line("OPGEN_RETURN(false);")
            if form.restricted:
                fmt.line(f"if (!is{opcode.name}Valid(*this))")
                fmt.line("OPGEN_RETURN(false);")
            fmt.line("OPGEN_RETURN(true);")

        fmt.line("bool Inst::isValidForm()")
        with fmt.indented("{", "}"):
            emit_form_switch(fmt, self.dispatch, "this", leaf)
            fmt.line("return false;")
