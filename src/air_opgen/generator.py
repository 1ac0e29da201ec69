from __future__ import annotations
import argparse, logging, sys
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .ast import OpcodeTable
from .parser import parse
from .enumeration import OpcodeEnum, build_enum, emit_enum, emit_print_internal
from .visitation import ArgVisitation
from .validity import InstValidator, KindValidator, Validity
from .stack import StackAdmission
from .effects import Effects
from .cxx import air_namespace, header, opgen_return_prelude
from .srcgen import Formatter
from .diagnostics import OpgenError
from .writers import write_headers

LOG = logging.getLogger("air_opgen")

@dataclass(frozen=True)
class Artifacts:
    """Los cinco artefactos construidos sobre la misma tabla congelada."""
    table: OpcodeTable
    enumeration: OpcodeEnum
    visitation: ArgVisitation
    validity: Validity
    stack: StackAdmission
    effects: Effects

def build_artifacts(table: OpcodeTable, *,
                    custom_validators: Optional[Mapping[str, InstValidator]] = None,
                    restricted_form_hook: Optional[KindValidator] = None) -> Artifacts:
    return Artifacts(
        table=table,
        enumeration=build_enum(table),
        visitation=ArgVisitation(table),
        validity=Validity(table, custom_validators=custom_validators,
                          restricted_form_hook=restricted_form_hook),
        stack=StackAdmission(table),
        effects=Effects(table),
    )

def generate_text(text: str, *, filename: str | None = None, **hooks) -> Artifacts:
    """Parsea el DSL y construye todos los artefactos. Cualquier error se lanza."""
    table = parse(text, filename=filename)
    return build_artifacts(table, **hooks)

def render_headers(artifacts: Artifacts, *, prefix: str = "Air") -> Dict[str, str]:
    """Devuelve {nombre de cabecera: contenido}. No toca el disco."""
    source = artifacts.table.source
    out: Dict[str, str] = {}

    fmt = Formatter()
    with header(fmt, f"{prefix}Opcode", source):
        emit_enum(fmt, artifacts.enumeration)
    out[f"{prefix}Opcode.h"] = fmt.text()

    fmt = Formatter()
    with header(fmt, f"{prefix}OpcodeUtils", source):
        fmt.line(f'#include "{prefix}Inst.h"')
        fmt.line(f'#include "{prefix}Special.h"')
        with air_namespace(fmt):
            opgen_return_prelude(fmt)
            artifacts.visitation.emit(fmt)
            artifacts.validity.emit_static(fmt)
            artifacts.effects.emit_terminal(fmt)
    out[f"{prefix}OpcodeUtils.h"] = fmt.text()

    fmt = Formatter()
    with header(fmt, f"{prefix}OpcodeGenerated", source):
        fmt.line(f'#include "{prefix}InstInlines.h"')
        fmt.line('#include "wtf/PrintStream.h"')
        emit_print_internal(fmt, artifacts.enumeration)
        with air_namespace(fmt):
            artifacts.validity.emit_inst(fmt)
            artifacts.stack.emit(fmt)
            artifacts.effects.emit_effects(fmt)
            artifacts.effects.emit_generate(fmt)
    out[f"{prefix}OpcodeGenerated.h"] = fmt.text()
    return out

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Air opcode table generator")
    ap.add_argument("source", help="archivo .opcodes de entrada")
    ap.add_argument("-o", "--output-dir", default=".", help="directorio de las cabeceras generadas")
    ap.add_argument("--prefix", default="Air", help="prefijo de los nombres de cabecera")
    ap.add_argument("-v", "--verbose", action="store_true", help="log de depuración")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s: %(message)s")

    try:
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as ex:
        print(f"ERROR: no pude leer {args.source}: {ex}", file=sys.stderr)
        return 2

    LOG.info("Generating code for %s.", args.source)
    try:
        artifacts = generate_text(text, filename=args.source)
        headers = render_headers(artifacts, prefix=args.prefix)
    except OpgenError as ex:
        # fail-fast: nada se escribe si el DSL tiene errores
        print(ex.diagnostic, file=sys.stderr)
        return 1

    try:
        paths = write_headers(headers, args.output_dir)
    except OSError as ex:
        print(f"ERROR al escribir salidas: {ex}", file=sys.stderr)
        return 3

    for path in paths:
        LOG.debug("wrote %s", path)
    LOG.info("OK: %d opcodes → %s", artifacts.enumeration.count, ", ".join(paths))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
