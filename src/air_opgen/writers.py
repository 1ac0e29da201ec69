from __future__ import annotations
import errno, os
from typing import List, Mapping, Tuple

def write_text(text: str, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)

def write_headers(headers: Mapping[str, str], out_dir: str) -> List[str]:
    """Escribe cada cabecera (nombre → contenido) en out_dir; devuelve las rutas escritas.

    Todo o nada: cada cabecera va primero a `<ruta>.tmp` y solo cuando todas
    se escribieron se renombran sobre las definitivas. Si algo falla se borran
    los temporales y las cabeceras previas quedan como estaban.
    """
    os.makedirs(out_dir, exist_ok=True)
    staged: List[Tuple[str, str]] = []
    try:
        for name, text in headers.items():
            path = os.path.join(out_dir, name)
            # os.replace no puede pisar un directorio
            if os.path.isdir(path):
                raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
            tmp = path + ".tmp"
            staged.append((tmp, path))
            write_text(text, tmp)
    except OSError:
        for tmp, _ in staged:
            if os.path.isfile(tmp):
                os.remove(tmp)
        raise
    for tmp, path in staged:
        os.replace(tmp, path)
    return [path for _, path in staged]
