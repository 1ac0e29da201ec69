'''
artefacto de enumeración: nombres ordenados, cantidad y nombre → texto
'''

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .ast import OpcodeTable
from .cxx import air_namespace
from .srcgen import Formatter

@dataclass(frozen=True)
class OpcodeEnum:
    """Enumeración de opcodes.

    `names` va en orden lexicográfico (es el valor del enumerador);
    `declared` conserva el orden del fuente para printInternal.
    """
    names: Tuple[str, ...]
    declared: Tuple[str, ...]
    _index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {n: i for i, n in enumerate(self.names)})

    @property
    def count(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def index(self, name: str) -> int:
        return self._index[name]

    def display(self, name: str) -> str:
        if name not in self._index:
            raise KeyError(f"Opcode desconocido: {name}")
        return name

def build_enum(table: OpcodeTable) -> OpcodeEnum:
    return OpcodeEnum(names=tuple(sorted(set(table.names))), declared=table.names)

def emit_enum(fmt: Formatter, enum: OpcodeEnum) -> None:
    with air_namespace(fmt):
        with fmt.indented("enum Opcode : int16_t {", "};"):
            for name in enum.names:
                fmt.line(f"{name},")
        fmt.line(f"static const unsigned numOpcodes = {enum.count};")
    fmt.line("namespace WTF {")
    fmt.line("class PrintStream;")
    fmt.line("void printInternal(PrintStream&, JSC::B3::Air::Opcode);")
    fmt.line("} // namespace WTF")

def emit_print_internal(fmt: Formatter, enum: OpcodeEnum) -> None:
    fmt.line("namespace WTF {")
    fmt.line("using namespace JSC::B3::Air;")
    fmt.line("void printInternal(PrintStream& out, Opcode opcode)")
    with fmt.indented("{", "}"):
        with fmt.indented("switch (opcode) {", "}"):
            for name in enum.declared:
                fmt.outdented_line(f"case {name}:")
                fmt.line(f'out.print("{enum.display(name)}");')
                fmt.line("return;")
        fmt.line("RELEASE_ASSERT_NOT_REACHED();")
    fmt.line("} // namespace WTF")
