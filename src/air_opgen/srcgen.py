'''
acumulador de texto C++ con control de indentado
'''

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List, Optional

class Formatter:
    """Junta las líneas de una cabecera y lleva la indentación actual.

    Ejemplo:

        >>> f = Formatter()
        >>> f.line('Hello line 1')
        >>> with f.indented('switch (x) {', '}'):
        ...     f.line('case 1:')
        >>> f.lines
        ['Hello line 1\\n', 'switch (x) {\\n', '    case 1:\\n', '}\\n']
    """

    shiftwidth = 4

    def __init__(self) -> None:
        self.indent = ''
        self.lines: List[str] = []

    def indent_push(self) -> None:
        self.indent += ' ' * self.shiftwidth

    def indent_pop(self) -> None:
        assert self.indent != '', 'Already at top level indentation'
        self.indent = self.indent[0:-self.shiftwidth]

    def line(self, s: Optional[str] = None) -> None:
        """Añade una línea al nivel actual; sin texto, una línea en blanco."""
        if s:
            self.lines.append('{}{}\n'.format(self.indent, s))
        else:
            self.lines.append('\n')

    def outdented_line(self, s: str) -> None:
        """Línea un nivel a la izquierda: etiquetas `case` dentro de un switch."""
        self.lines.append('{}{}\n'.format(self.indent[self.shiftwidth:], s))

    def raw_line(self, s: str) -> None:
        """Línea sin indentar (directivas del preprocesador)."""
        self.lines.append(s + '\n')

    @contextmanager
    def indented(self, before: Optional[str] = None, after: Optional[str] = None) -> Iterator[None]:
        """Indenta el bloque; `before` y `after` se emiten al nivel exterior."""
        if before:
            self.line(before)
        self.indent_push()
        try:
            yield
        finally:
            self.indent_pop()
        if after:
            self.line(after)

    def text(self) -> str:
        return ''.join(self.lines)
