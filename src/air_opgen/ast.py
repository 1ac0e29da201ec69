'''
dataclases del modelo (Opcode, Overload, Form, Kind, Arg) y enums cerrados
'''

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

# ---- Variantes cerradas ----

class Role(Enum):
    """Rol de un argumento en la firma (token del DSL como valor)."""
    USE = "U"
    DEF = "D"
    USE_DEF = "UD"
    USE_ADDR = "UA"

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]

_ROLE_LABELS = {
    Role.USE: "Use",
    Role.DEF: "Def",
    Role.USE_DEF: "UseDef",
    Role.USE_ADDR: "UseAddr",
}

class ArgType(Enum):
    """Banco de registros: propósito general o coma flotante."""
    GP = "G"
    FP = "F"

    @property
    def label(self) -> str:
        return self.name

class ArgKind(Enum):
    """Clases de almacenamiento de un operando.

    Las ocho primeras aparecen en el DSL; Stack/CallArg solo existen como
    expansión de Addr y Special solo como argumento 0 de los opcodes special.
    """
    TMP = "Tmp"
    IMM = "Imm"
    IMM64 = "Imm64"
    ADDR = "Addr"
    STACK = "Stack"
    CALL_ARG = "CallArg"
    INDEX = "Index"
    REL_COND = "RelCond"
    RES_COND = "ResCond"
    DOUBLE_COND = "DoubleCond"
    SPECIAL = "Special"

# Kinds escribibles en una forma
FORM_KINDS: Dict[str, ArgKind] = {
    k.value: k for k in (
        ArgKind.TMP, ArgKind.IMM, ArgKind.IMM64, ArgKind.ADDR, ArgKind.INDEX,
        ArgKind.REL_COND, ArgKind.RES_COND, ArgKind.DOUBLE_COND,
    )
}

ADDR_KINDS: Tuple[ArgKind, ...] = (ArgKind.ADDR, ArgKind.STACK, ArgKind.CALL_ARG)

def arg_kinds(kind: ArgKind) -> Tuple[ArgKind, ...]:
    """Conjunto de kinds en tiempo de ejecución que acepta un kind declarado."""
    if kind is ArgKind.ADDR:
        return ADDR_KINDS
    return (kind,)

# ---- Nodos del modelo ----

@dataclass(frozen=True)
class Origin:
    """Posición en el fuente (archivo, línea)."""
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"

@dataclass(frozen=True)
class Arg:
    """Una posición de la firma: rol + tipo."""
    role: Role
    type: ArgType

    def __str__(self) -> str:
        return f"{self.role.value}:{self.type.value}"

@dataclass(frozen=True)
class Kind:
    """Kind de una columna; restricted corresponde a 'Tmp*'."""
    name: ArgKind
    restricted: bool = False

    def __post_init__(self):
        if self.restricted and self.name is not ArgKind.TMP:
            raise ValueError("solo Tmp admite la marca '*'")

    def __str__(self) -> str:
        return self.name.value + ("*" if self.restricted else "")

@dataclass(frozen=True)
class Form:
    """Combinación concreta de kinds para una sobrecarga."""
    kinds: Tuple[Kind, ...]
    alt_name: Optional[str] = None
    origin: Optional[Origin] = field(default=None, compare=False)

    @property
    def restricted(self) -> bool:
        return any(k.restricted for k in self.kinds)

    def __str__(self) -> str:
        s = ", ".join(str(k) for k in self.kinds) or "<vacía>"
        if self.alt_name:
            s += f" as {self.alt_name}"
        return s

@dataclass(frozen=True)
class Overload:
    signature: Tuple[Arg, ...]
    forms: Tuple[Form, ...]

    @property
    def arity(self) -> int:
        return len(self.signature)

@dataclass(frozen=True)
class Attributes:
    branch: bool = False
    terminal: bool = False
    effects: bool = False

@dataclass(frozen=True)
class Opcode:
    """Opcode del conjunto de instrucciones.

    Los special no tienen sobrecargas: todo su comportamiento lo aporta el
    objeto Special que viaja en el argumento 0 de la instrucción.
    """
    name: str
    special: bool = False
    attributes: Attributes = Attributes()
    overloads: Tuple[Overload, ...] = ()
    origin: Optional[Origin] = field(default=None, compare=False)

    @property
    def masm_name(self) -> str:
        """Nombre del método del encoder: primera letra en minúscula."""
        return self.name[0].lower() + self.name[1:]

    @property
    def max_arity(self) -> int:
        return max((o.arity for o in self.overloads), default=0)

@dataclass(frozen=True)
class OpcodeTable:
    """Tabla de opcodes congelada, en orden de declaración."""
    opcodes: Tuple[Opcode, ...]
    source: str = "<input>"
    _by_name: Mapping[str, Opcode] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_by_name", MappingProxyType({o.name: o for o in self.opcodes}))

    def __getitem__(self, name: str) -> Opcode:
        return self._by_name[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Opcode]:
        return iter(self.opcodes)

    def __len__(self) -> int:
        return len(self.opcodes)

    def get(self, name: str) -> Optional[Opcode]:
        return self._by_name.get(name)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(o.name for o in self.opcodes)

    @property
    def sorted_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._by_name))
