'''
helpers para renderizar árboles y despachos como switch de C++
'''

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .ast import ArgKind, Form, Opcode, Overload
from .dispatch import Dispatch, OpcodeCase, OverloadCase
from .matcher import Branch, Leaf, Tree
from .srcgen import Formatter

NAMESPACE_OPEN = "namespace JSC { namespace B3 { namespace Air {"
NAMESPACE_CLOSE = "} } } // namespace JSC::B3::Air"

GENERATOR = "air-opgen"

ColumnGetter = Callable[[int], str]

@contextmanager
def header(fmt: Formatter, name: str, source: str) -> Iterator[None]:
    """Banner + include guard alrededor del contenido."""
    fmt.line(f"// Generated by {GENERATOR} from {source} -- do not edit!")
    fmt.raw_line(f"#ifndef {name}_h")
    fmt.raw_line(f"#define {name}_h")
    yield
    fmt.raw_line(f"#endif // {name}_h")

@contextmanager
def air_namespace(fmt: Formatter) -> Iterator[None]:
    fmt.line(NAMESPACE_OPEN)
    yield
    fmt.line(NAMESPACE_CLOSE)

def opgen_return_prelude(fmt: Formatter) -> None:
    # OPGEN_RETURN evita avisos de código inalcanzable tras un return
    fmt.line("inline bool opgenHiddenTruth() { return true; }")
    fmt.line("template<typename T>")
    fmt.line("inline T* opgenHiddenPtrIdentity(T* pointer) { return pointer; }")
    fmt.line("#define OPGEN_RETURN(value) do {\\")
    fmt.line("    if (opgenHiddenTruth())\\")
    fmt.line("        return value;\\")
    fmt.line("} while (false)")

def args_getter(inst: str) -> ColumnGetter:
    return lambda column: f"{inst}->args[{column}].kind()"

def emit_default(fmt: Formatter) -> None:
    fmt.outdented_line("default:")
    fmt.line("break;")

def emit_tree(fmt: Formatter, tree: Tree, column_getter: ColumnGetter,
              leaf: Callable[[Form], None]) -> None:
    """Un switch por Branch; Empty no emite nada (cae al default del padre)."""
    if isinstance(tree, Leaf):
        leaf(tree.form)
        return
    if not isinstance(tree, Branch):
        return
    with fmt.indented(f"switch ({column_getter(tree.column)}) {{", "}"):
        for case in tree.cases:
            if case.key is ArgKind.IMM64:
                fmt.raw_line("#if USE(JSVALUE64)")
            for kind in case.arg_kinds:
                fmt.outdented_line(f"case Arg::{kind.value}:")
            emit_tree(fmt, case.subtree, column_getter, leaf)
            fmt.line("break;")
            if case.key is ArgKind.IMM64:
                fmt.raw_line("#endif // USE(JSVALUE64)")
        emit_default(fmt)

def emit_arity_switch(fmt: Formatter, case: OpcodeCase, size_expr: str,
                      body: Callable[[OverloadCase], None]) -> None:
    if not case.arity_switch:
        for overload in case.overloads:
            body(overload)
        return
    with fmt.indented(f"switch ({size_expr}) {{", "}"):
        for overload in case.overloads:
            fmt.outdented_line(f"case {overload.overload.arity}:")
            body(overload)
            fmt.line("break;")
        emit_default(fmt)

def emit_opcode_switch(fmt: Formatter, dispatch: Dispatch, inst: str,
                       body: Callable[[OpcodeCase, Optional[OverloadCase]], None]) -> None:
    """switch por opcode + switch por aridad; body recibe (opcode, None) para los special."""
    with fmt.indented(f"switch ({inst}->opcode) {{", "}"):
        for case in dispatch:
            fmt.outdented_line(f"case {case.opcode.name}:")
            if case.opcode.special:
                body(case, None)
            else:
                emit_arity_switch(fmt, case, f"{inst}->args.size()",
                                  lambda overload, case=case: body(case, overload))
            fmt.line("break;")
        emit_default(fmt)

def emit_form_switch(fmt: Formatter, dispatch: Dispatch, inst: str,
                     leaf: Callable[[Opcode, Optional[Overload], Optional[Form]], None]) -> None:
    """Como emit_opcode_switch, bajando además por el árbol de cada sobrecarga."""
    def body(case: OpcodeCase, overload: Optional[OverloadCase]) -> None:
        if overload is None:
            leaf(case.opcode, None, None)
            return
        emit_tree(fmt, overload.tree, args_getter(inst),
                  lambda form: leaf(case.opcode, overload.overload, form))
    emit_opcode_switch(fmt, dispatch, inst, body)

def emit_case_list(fmt: Formatter, names, result: str) -> bool:
    """Etiquetas case para `names` seguidas de `return result;`. False si no hubo ninguna."""
    names = list(names)
    for name in names:
        fmt.outdented_line(f"case {name}:")
    if names:
        fmt.line(f"return {result};")
    return bool(names)
