'''
diagnósticos y jerarquía de errores del generador

Todo error es fatal: el generador aborta sin escribir ninguna cabecera.
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .ast import Origin

@dataclass(frozen=True)
class Diagnostic:
    """Error localizado en el .opcodes, con una pista opcional para corregirlo."""
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    hint: Optional[str] = None

    @property
    def where(self) -> str:
        if self.file is None:
            return ""
        if self.line is None:
            return f"{self.file}: "
        return f"{self.file}:{self.line}: "

    def __str__(self) -> str:
        out = f"{self.where}ERROR: {self.message}"
        if self.hint:
            out += f"  (pista: {self.hint})"
        return out

def error(message: str, *, line: int | None = None, file: str | None = None,
          hint: str | None = None) -> Diagnostic:
    return Diagnostic(message, file, line, hint)

def error_at(message: str, origin: Optional[Origin], *, hint: str | None = None) -> Diagnostic:
    """Como error(), tomando archivo y línea de un Origin (si lo hay)."""
    if origin is None:
        return Diagnostic(message, hint=hint)
    return Diagnostic(message, origin.file, origin.line, hint)

class OpgenError(Exception):
    """Base de los errores del generador; lleva el Diagnostic asociado."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic

class LexError(OpgenError):
    """Secuencia de caracteres que ninguna regla del lexer reconoce."""

class ParseError(OpgenError):
    """Violación de la gramática del DSL."""

    def __init__(self, diagnostic: Diagnostic, *, token: str | None = None, reason: str | None = None):
        super().__init__(diagnostic)
        self.token = token
        self.reason = reason

class SemanticError(ParseError):
    """Violación de una regla semántica detectada durante el parseo."""

class InvariantError(OpgenError):
    """Invariante interna rota (p.ej. dos formas indistinguibles)."""
