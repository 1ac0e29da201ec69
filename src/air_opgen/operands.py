'''
operandos ligados (Operand), instrucción (Inst) e interfaz del objeto Special
'''

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .ast import ADDR_KINDS, ArgKind, ArgType, Role

@dataclass(frozen=True)
class Operand:
    """Operando concreto de una instrucción.

    `value` depende del kind: nombre de registro para Tmp, entero para
    inmediatos, tupla (base, offset) para direcciones, etc. `bank` solo
    aplica a Tmp.
    """
    kind: ArgKind
    value: Any = None
    bank: Optional[ArgType] = None

    # ---- constructores ----

    @classmethod
    def tmp(cls, name: str, bank: ArgType = ArgType.GP) -> "Operand":
        return cls(ArgKind.TMP, name, bank)

    @classmethod
    def imm(cls, value: int) -> "Operand":
        return cls(ArgKind.IMM, value)

    @classmethod
    def imm64(cls, value: int) -> "Operand":
        return cls(ArgKind.IMM64, value)

    @classmethod
    def addr(cls, base: str, offset: int = 0) -> "Operand":
        return cls(ArgKind.ADDR, (base, offset))

    @classmethod
    def stack(cls, slot: str, offset: int = 0) -> "Operand":
        return cls(ArgKind.STACK, (slot, offset))

    @classmethod
    def call_arg(cls, offset: int) -> "Operand":
        return cls(ArgKind.CALL_ARG, ("sp", offset))

    @classmethod
    def index(cls, base: str, index: str, scale: int = 1, offset: int = 0) -> "Operand":
        return cls(ArgKind.INDEX, (base, index, scale, offset))

    @classmethod
    def rel_cond(cls, cond: str) -> "Operand":
        return cls(ArgKind.REL_COND, cond)

    @classmethod
    def res_cond(cls, cond: str) -> "Operand":
        return cls(ArgKind.RES_COND, cond)

    @classmethod
    def double_cond(cls, cond: str) -> "Operand":
        return cls(ArgKind.DOUBLE_COND, cond)

    @classmethod
    def special_arg(cls, special: "Special") -> "Operand":
        return cls(ArgKind.SPECIAL, special)

    # ---- consultas ----

    def _expect(self, *kinds: ArgKind) -> None:
        if self.kind not in kinds:
            raise ValueError(f"Operando {self.kind.value} no es {'/'.join(k.value for k in kinds)}")

    def is_special(self) -> bool:
        return self.kind is ArgKind.SPECIAL

    def is_bank(self, bank: ArgType) -> bool:
        return self.kind is ArgKind.TMP and self.bank is bank

    # ---- accesores para el encoder ----

    def gpr(self):
        self._expect(ArgKind.TMP)
        if self.bank is not ArgType.GP:
            raise ValueError(f"{self.value} no es un registro de propósito general")
        return self.value

    def fpr(self):
        self._expect(ArgKind.TMP)
        if self.bank is not ArgType.FP:
            raise ValueError(f"{self.value} no es un registro de coma flotante")
        return self.value

    def as_trusted_imm32(self) -> int:
        self._expect(ArgKind.IMM)
        return self.value

    def as_trusted_imm64(self) -> int:
        self._expect(ArgKind.IMM64)
        return self.value

    def as_address(self):
        self._expect(*ADDR_KINDS)
        return self.value

    def as_base_index(self):
        self._expect(ArgKind.INDEX)
        return self.value

    def as_relational_condition(self):
        self._expect(ArgKind.REL_COND)
        return self.value

    def as_result_condition(self):
        self._expect(ArgKind.RES_COND)
        return self.value

    def as_double_condition(self):
        self._expect(ArgKind.DOUBLE_COND)
        return self.value

    def special(self) -> "Special":
        self._expect(ArgKind.SPECIAL)
        return self.value

@dataclass
class Inst:
    """Instrucción: nombre de opcode + operandos ligados."""
    opcode: str
    args: List[Operand] = field(default_factory=list)

# functor(arg, role, type)
ArgVisitor = Callable[[Operand, Role, ArgType], None]

class Special:
    """Objeto lateral de los opcodes special.

    Las subclases implementan todo lo que la tabla no puede decidir: qué
    argumentos visita, validez, admisión de pila, efectos y generación.
    """

    def for_each_arg(self, inst: Inst, functor: ArgVisitor) -> None:
        raise NotImplementedError

    def is_valid(self, inst: Inst) -> bool:
        raise NotImplementedError

    def admits_stack(self, inst: Inst, arg_index: int) -> bool:
        raise NotImplementedError

    def has_non_arg_non_control_effects(self) -> bool:
        raise NotImplementedError

    def generate(self, inst: Inst, jit, context):
        raise NotImplementedError
