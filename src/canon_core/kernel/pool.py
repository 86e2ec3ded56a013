"""
src/canon_core/kernel/pool.py
Pool Canónico: datos de cada nodo del Trie.
"""
import weakref
from typing import Any, Optional

from ..ds.trie import Trie


class PoolSlot:
    """
    Contenido lazy de un nodo del pool.
    A lo sumo un representante de lista, uno de objeto y una firma de claves.
    En modo débil los representantes se guardan como weakref: el pool nunca
    es la única razón por la que un representante sigue vivo.
    """
    __slots__ = ('_weak', '_array', '_object', 'keys')

    def __init__(self, weak: bool):
        self._weak = weak
        self._array: Any = None
        self._object: Any = None
        self.keys = None

    @property
    def array(self) -> Optional[list]:
        return self._load(self._array)

    @array.setter
    def array(self, value: list):
        self._array = self._store(value)

    @property
    def object(self) -> Optional[dict]:
        return self._load(self._object)

    @object.setter
    def object(self, value: dict):
        self._object = self._store(value)

    def _store(self, value: Any) -> Any:
        return weakref.ref(value) if self._weak else value

    def _load(self, stored: Any) -> Any:
        if stored is None or not self._weak:
            return stored
        return stored()


def new_pool(weak: bool) -> Trie:
    """Trie raíz cuyos nodos guardan un PoolSlot."""
    return Trie(weak, lambda: PoolSlot(weak))
