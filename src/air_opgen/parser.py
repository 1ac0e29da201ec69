# src/air_opgen/parser.py
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, NoReturn, Optional

from .lexer import Token, lex
from .ast import (
    Arg, ArgKind, ArgType, Attributes, Form, FORM_KINDS, Kind, Opcode,
    OpcodeTable, Origin, Overload, Role,
)
from .diagnostics import ParseError, SemanticError, error, error_at

ROLE_RE  = re.compile(r"^(U|D|UD|UA)$")
TYPE_RE  = re.compile(r"^(G|F)$")
KIND_RE  = re.compile(r"^(Tmp|Imm|Imm64|Addr|Index|RelCond|ResCond|DoubleCond)$")
IDENT_RE = re.compile(r"^[A-Za-z0-9_]+$")

ATTRIBUTES = ("branch", "terminal", "effects")

def _is_role(tok: Optional[Token]) -> bool:
    return tok is not None and bool(ROLE_RE.match(tok.text))

def _is_type(tok: Optional[Token]) -> bool:
    return tok is not None and bool(TYPE_RE.match(tok.text))

def _is_kind(tok: Optional[Token]) -> bool:
    return tok is not None and bool(KIND_RE.match(tok.text))

def _is_keyword(tok: Token) -> bool:
    return _is_role(tok) or _is_type(tok) or _is_kind(tok) or tok.text in ("special", "as")

def _is_identifier(tok: Optional[Token]) -> bool:
    return tok is not None and bool(IDENT_RE.match(tok.text)) and not _is_keyword(tok)

@dataclass
class _OpcodeBuilder:
    """Opcode en construcción; se congela al terminar el archivo."""
    name: str
    special: bool
    origin: Origin
    attrs: Dict[str, bool] = field(default_factory=dict)
    overloads: List[Overload] = field(default_factory=list)

    def freeze(self) -> Opcode:
        return Opcode(name=self.name, special=self.special,
                      attributes=Attributes(**self.attrs),
                      overloads=tuple(self.overloads), origin=self.origin)

class _Parser:
    def __init__(self, text: str, filename: str):
        self.filename = filename
        self.tokens = lex(text, filename)
        self.idx = 0

    @property
    def token(self) -> Optional[Token]:
        if self.idx < len(self.tokens):
            return self.tokens[self.idx]
        return None

    def advance(self) -> None:
        self.idx += 1

    def _fail(self, reason: str, tok: Optional[Token], exc_type) -> NoReturn:
        if tok is None:
            diag = error(f"Parse error at end of file: {reason}", file=self.filename)
            raise exc_type(diag, token=None, reason=reason)
        diag = error_at(f'Parse error at "{tok.text}": {reason}', tok.origin)
        raise exc_type(diag, token=tok.text, reason=reason)

    def parse_error(self, reason: str, tok: Optional[Token] = None) -> NoReturn:
        self._fail(reason, tok if tok is not None else self.token, ParseError)

    def semantic_error(self, reason: str, tok: Optional[Token] = None) -> NoReturn:
        self._fail(reason, tok if tok is not None else self.token, SemanticError)

    def consume(self, text: str) -> Token:
        tok = self.token
        if tok is None or tok.text != text:
            self.parse_error(f"Expected {text}")
        self.advance()
        return tok

    def consume_identifier(self) -> Token:
        tok = self.token
        if not _is_identifier(tok):
            self.parse_error("Expected identifier")
        self.advance()
        return tok

    def consume_role(self) -> Role:
        tok = self.token
        if not _is_role(tok):
            self.parse_error("Expected role (U, D, UD, or UA)")
        self.advance()
        return Role(tok.text)

    def consume_type(self) -> ArgType:
        tok = self.token
        if not _is_type(tok):
            self.parse_error("Expected type (G or F)")
        self.advance()
        return ArgType(tok.text)

    def consume_kind(self) -> ArgKind:
        tok = self.token
        if not _is_kind(tok):
            self.parse_error("Expected kind (Imm, Imm64, Tmp, Addr, Index, RelCond, ResCond, or DoubleCond)")
        self.advance()
        return FORM_KINDS[tok.text]

    # ---- gramática ----

    def parse(self) -> OpcodeTable:
        result: Dict[str, _OpcodeBuilder] = {}
        while self.token is not None:
            if self.token.text == "special":
                self.consume("special")
                name_tok = self.consume_identifier()
                if name_tok.text in result:
                    self.semantic_error("Cannot overload a special opcode", name_tok)
                result[name_tok.text] = _OpcodeBuilder(name_tok.text, True, name_tok.origin)
                continue

            name_tok = self.consume_identifier()
            opcode = result.get(name_tok.text)
            if opcode is None:
                opcode = _OpcodeBuilder(name_tok.text, False, name_tok.origin)
                result[name_tok.text] = opcode
            elif opcode.special:
                self.semantic_error("Cannot overload a special opcode", name_tok)

            signature = self.parse_signature()
            self.parse_attributes(opcode)
            forms = self.parse_forms(signature) if _is_kind(self.token) else []

            # Sin firma: una única forma vacía
            if not signature:
                forms = [Form((), None, name_tok.origin)]

            if any(o.arity == len(signature) for o in opcode.overloads):
                self.semantic_error(f"Overload with {len(signature)} arguments already declared", name_tok)
            opcode.overloads.append(Overload(tuple(signature), tuple(forms)))

        return OpcodeTable(tuple(b.freeze() for b in result.values()), source=self.filename)

    def parse_signature(self) -> List[Arg]:
        signature: List[Arg] = []
        if not _is_role(self.token):
            return signature
        while True:
            role = self.consume_role()
            self.consume(":")
            signature.append(Arg(role, self.consume_type()))
            if self.token is None or self.token.text != ",":
                return signature
            self.consume(",")

    def parse_attributes(self, opcode: _OpcodeBuilder) -> None:
        while self.token is not None and self.token.text == "/":
            self.consume("/")
            tok = self.token
            if tok is None or tok.text not in ATTRIBUTES:
                self.parse_error("Bad / directive")
            # los atributos se acumulan entre redeclaraciones
            opcode.attrs[tok.text] = True
            self.advance()

    def parse_forms(self, signature: List[Arg]) -> List[Form]:
        forms: List[Form] = []
        while _is_kind(self.token):
            first = self.token
            kinds: List[Kind] = []
            alt_name: Optional[str] = None
            while True:
                kind_tok = self.token
                name = self.consume_kind()
                restricted = False
                if self.token is not None and self.token.text == "*":
                    if name is not ArgKind.TMP:
                        self.semantic_error("Can only apply * to Tmp", kind_tok)
                    self.consume("*")
                    restricted = True
                kinds.append(Kind(name, restricted))
                if self.token is None or self.token.text != ",":
                    break
                self.consume(",")

            if self.token is not None and self.token.text == "as":
                self.consume("as")
                alt_name = self.consume_identifier().text

            if len(kinds) != len(signature):
                self.semantic_error("Form has wrong number of arguments for overload", first)
            for kind, arg in zip(kinds, signature):
                if kind.name in (ArgKind.IMM, ArgKind.IMM64):
                    if arg.role is not Role.USE:
                        self.semantic_error("Form has an immediate for a non-use argument", first)
                    if arg.type is not ArgType.GP:
                        self.semantic_error("Form has an immediate for a non-general-purpose argument", first)
            forms.append(Form(tuple(kinds), alt_name, first.origin))
        return forms

def parse(text: str, *, filename: Optional[str] = None) -> OpcodeTable:
    """
    Devuelve la tabla de opcodes congelada (orden de declaración).

    Reglas:
      - Comentarios: '#' hasta fin de línea.
      - 'special Nombre' declara un opcode delegado a un objeto Special.
      - 'Nombre firma? /attr* formas?' añade una sobrecarga al opcode.
      - Cualquier error (léxico, sintáctico o semántico) se lanza de inmediato.
    """
    return _Parser(text, filename or "<input>").parse()
