'''
árbol de decisión sobre kinds: construcción (match_forms) y evaluación (select)
'''

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .ast import ArgKind, Form, arg_kinds
from .diagnostics import InvariantError, error_at

class Speed(Enum):
    """fast elide las columnas sin elección; safe emite siempre la rama."""
    FAST = "fast"
    SAFE = "safe"

@dataclass(frozen=True)
class Leaf:
    form: Form

@dataclass(frozen=True)
class Case:
    """Grupo de formas con el mismo kind en la columna del Branch."""
    key: ArgKind
    arg_kinds: Tuple[ArgKind, ...]
    subtree: "Tree"

@dataclass(frozen=True)
class Branch:
    column: int
    cases: Tuple[Case, ...]

@dataclass(frozen=True)
class Empty:
    pass

EMPTY = Empty()

Tree = Union[Leaf, Branch, Empty]

# filtro: True descarta el subconjunto (no se genera nada para él)
FormFilter = Callable[[Sequence[Form]], bool]

def match_forms(forms: Sequence[Form], speed: Speed, *, column: int = 0,
                prune: Optional[FormFilter] = None) -> Tree:
    """Construye el árbol que discrimina `forms` columna a columna.

    Todas las formas deben tener la misma aridad. Lanza InvariantError si al
    agotar las columnas queda más de una forma: el DSL declaró dos formas
    indistinguibles en la misma sobrecarga.
    """
    if not forms:
        return EMPTY
    if prune is not None and prune(forms):
        return EMPTY

    if column >= len(forms[0].kinds):
        if len(forms) != 1:
            raise InvariantError(error_at(
                "Did not reduce to one form: " + "; ".join(str(f) for f in forms),
                forms[0].origin,
                hint="dos formas de la misma sobrecarga tienen los mismos kinds"))
        return Leaf(forms[0])

    # dict conserva el orden de primera aparición
    groups: Dict[ArgKind, List[Form]] = {}
    for form in forms:
        groups.setdefault(form.kinds[column].name, []).append(form)

    if speed is Speed.FAST and len(groups) == 1:
        return match_forms(forms, speed, column=column + 1, prune=prune)

    cases = tuple(
        Case(key, arg_kinds(key), match_forms(group, speed, column=column + 1, prune=prune))
        for key, group in groups.items()
    )
    return Branch(column, cases)

def select(tree: Tree, column_getter: Callable[[int], ArgKind]) -> Optional[Form]:
    """Recorre el árbol; None equivale a caer en el 'default' de un switch."""
    while isinstance(tree, Branch):
        kind = column_getter(tree.column)
        for case in tree.cases:
            if kind in case.arg_kinds:
                tree = case.subtree
                break
        else:
            return None
    if isinstance(tree, Leaf):
        return tree.form
    return None

def leaves(tree: Tree) -> List[Form]:
    """Formas alcanzables, en orden de aparición."""
    if isinstance(tree, Leaf):
        return [tree.form]
    if isinstance(tree, Branch):
        out: List[Form] = []
        for case in tree.cases:
            out.extend(leaves(case.subtree))
        return out
    return []

def tree_size(tree: Tree) -> int:
    """Número de Branch (switches que se emitirían)."""
    if isinstance(tree, Branch):
        return 1 + sum(tree_size(c.subtree) for c in tree.cases)
    return 0
