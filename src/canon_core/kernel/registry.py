"""
src/canon_core/kernel/registry.py
Registro de Identidad: "¿ya es canónico?" en O(1).
"""
import weakref
from typing import Any, Dict


class IdentityRegistry:
    """
    Conjunto de valores canónicos comparados por identidad.
    Modo débil: id -> weakref (la entrada muere con el valor).
    Modo fuerte: id -> valor (retención durante toda la vida del registro).
    """
    __slots__ = ('_weak', '_entries', '__weakref__')

    def __init__(self, weak: bool = True):
        self._weak = weak
        self._entries: Dict[int, Any] = {}

    def has(self, value: Any) -> bool:
        entry = self._entries.get(id(value))
        if entry is None:
            return False
        if self._weak:
            return entry() is value
        return entry is value

    def add(self, value: Any):
        ident = id(value)
        if not self._weak:
            self._entries[ident] = value
            return

        owner = weakref.ref(self)

        def _forget(ref, ident=ident, owner=owner):
            registry = owner()
            if registry is not None and registry._entries.get(ident) is ref:
                del registry._entries[ident]

        self._entries[ident] = weakref.ref(value, _forget)

    def __len__(self) -> int:
        return len(self._entries)
