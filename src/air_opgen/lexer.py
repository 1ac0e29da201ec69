from __future__ import annotations
import re
from dataclasses import dataclass
from typing import List

from .ast import Origin
from .diagnostics import LexError, error

# Rules in priority order; only IDENT and PUNCT produce tokens.
TOKEN_RE = re.compile(r"""
    (?P<COMMENT>\#[^\n]*)
  | (?P<NEWLINE>\n)
  | (?P<IDENT>[A-Za-z0-9_]+)
  | (?P<WS>[ \t\r]+)
  | (?P<PUNCT>[,:*/])
""", re.VERBOSE)

@dataclass(frozen=True)
class Token:
    origin: Origin
    text: str

    def __str__(self) -> str:
        return f'"{self.text}" at {self.origin}'

def lex(text: str, filename: str = "<input>") -> List[Token]:
    """Split DSL text into tokens, dropping comments, newlines and whitespace."""
    tokens: List[Token] = []
    line = 1
    pos = 0
    while pos < len(text):
        m = TOKEN_RE.match(text, pos)
        if not m:
            bad = text[pos:pos + 20]
            raise LexError(error(f"Lexer error, unexpected sequence {bad!r}",
                                 line=line, file=filename))
        kind = m.lastgroup
        if kind == "NEWLINE":
            line += 1
        elif kind in ("IDENT", "PUNCT"):
            tokens.append(Token(Origin(filename, line), m.group()))
        pos = m.end()
    return tokens
