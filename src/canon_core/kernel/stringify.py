"""
src/canon_core/kernel/stringify.py
Serialización JSON estable: claves de cada dict en orden lexicográfico.
Reutiliza el cache de firmas del canon para no reordenar claves repetidas.
"""
import json
from typing import Any, Optional

from .canon import ObjectCanon, Pass, default_canon


def canonical_stringify(value: Any, canon: Optional[ObjectCanon] = None) -> str:
    """
    JSON compacto donde dos valores profundamente iguales producen el
    mismo texto, sin importar el orden de inserción de sus claves.
    """
    canon = canon if canon is not None else default_canon()
    return json.dumps(_ordered(value, canon), separators=(",", ":"), ensure_ascii=False)


def _ordered(value: Any, canon: ObjectCanon) -> Any:
    if isinstance(value, Pass):
        value = value.value
    if isinstance(value, dict):
        if all(type(key) is str for key in value):
            signature = canon.sorted_keys(value)
            return {key: _ordered(value[key], canon) for key in signature.keys}
        return {key: _ordered(item, canon) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_ordered(item, canon) for item in value]
    return value
