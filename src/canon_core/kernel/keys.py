"""
src/canon_core/kernel/keys.py
Cache de Firmas de Claves.
Ordenar listas de claves cuesta O(N log N); recorrer el Trie cuesta O(N).
"""
import json
from typing import Dict, Sequence, Tuple

from ..ds.trie import Trie


class KeySignature:
    """Contenedor inmutable: claves ordenadas + forma serializada."""
    __slots__ = ('keys', 'json')

    def __init__(self, keys: Tuple[str, ...], json_form: str):
        self.keys = keys
        self.json = json_form

    def __len__(self) -> int:
        return len(self.keys)

    def __repr__(self):
        return f"<KeySignature {self.json}>"


def serialize_keys(keys: Sequence[str]) -> str:
    """JSON compacto y estable de una lista de claves ya ordenada."""
    return json.dumps(list(keys), separators=(",", ":"), ensure_ascii=False)


class KeySignatureCache:
    """
    Deduplicación en dos niveles:
    1. Nodo del pool para la secuencia SIN ordenar (evita reordenar).
    2. Mapa por forma serializada (órdenes distintos -> misma firma).
    """
    __slots__ = ('_by_json',)

    def __init__(self):
        self._by_json: Dict[str, KeySignature] = {}

    def sorted_keys(self, keys: Sequence[str], pool: Trie) -> KeySignature:
        slot = pool.lookup_array(keys).data
        if slot.keys is None:
            ordered = tuple(sorted(keys))
            serialized = serialize_keys(ordered)
            signature = self._by_json.get(serialized)
            if signature is None:
                signature = self._by_json[serialized] = KeySignature(ordered, serialized)
            slot.keys = signature
        return slot.keys

    def __len__(self) -> int:
        return len(self._by_json)
