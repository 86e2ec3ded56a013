"""
src/canon_core/ds/trie.py
Estructura de Datos: Trie Discriminante v2.1.
Un nodo estable por cada secuencia única de claves.

GARANTÍA: lookup_array(a) is lookup_array(b) si a y b tienen la misma
longitud y sus elementos coinciden uno a uno:
- Primitivos por (tipo, valor). Los NaN float coinciden entre sí
  (en complex, componente a componente).
- Cualquier otro objeto por identidad.
"""
import weakref
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

PRIMITIVE_TYPES = (type(None), bool, int, float, complex, str, bytes)
_PRIMITIVES = frozenset(PRIMITIVE_TYPES)

# Marcadores internos
_NAN = object()
_NO_DATA = object()


def _real_key(value: float) -> Any:
    return _NAN if value != value else value


def primitive_key(value: Any) -> Tuple[Any, ...]:
    """
    (tipo, valor): evita que 1, 1.0 y True colapsen en la misma rama.
    Los NaN se unifican por componente: complex(nan, 1) != complex(1, nan).
    """
    cls = type(value)
    if cls is float:
        return (cls, _real_key(value))
    if cls is complex:
        return (cls, _real_key(value.real), _real_key(value.imag))
    return (cls, value)


class _StrongRef:
    """Imita la interfaz de weakref.ref pero retiene el objeto."""
    __slots__ = ('_obj',)

    def __init__(self, obj: Any):
        self._obj = obj

    def __call__(self) -> Any:
        return self._obj


class Trie:
    """
    Árbol de prefijos sobre secuencias de claves.
    Con `weakness=True` las ramas indexadas por objetos referenciables se
    desprenden solas cuando la clave es recolectada.
    """
    __slots__ = ('_weakness', '_make_data', '_data', '_strong', '_objects', '__weakref__')

    def __init__(self, weakness: bool = True, make_data: Optional[Callable[[], Any]] = None):
        self._weakness = weakness
        self._make_data = make_data if make_data is not None else dict
        # Inicialización Lazy: nada se reserva hasta el primer uso
        self._data: Any = _NO_DATA
        self._strong: Optional[Dict[Tuple[Any, ...], 'Trie']] = None
        self._objects: Optional[Dict[int, Tuple[Callable[[], Any], 'Trie']]] = None

    @property
    def weakness(self) -> bool:
        return self._weakness

    # --- Navegación ---

    def lookup(self, *keys: Any) -> 'Trie':
        return self.lookup_array(keys)

    def lookup_array(self, keys: Iterable[Any]) -> 'Trie':
        node = self
        for key in keys:
            node = node._child(key, create=True)
        return node

    def peek(self, *keys: Any) -> Optional['Trie']:
        return self.peek_array(keys)

    def peek_array(self, keys: Iterable[Any]) -> Optional['Trie']:
        """Como lookup_array, pero nunca crea nodos."""
        node = self
        for key in keys:
            node = node._child(key, create=False)
            if node is None:
                return None
        return node

    def remove(self, *keys: Any) -> Any:
        return self.remove_array(keys)

    def remove_array(self, keys: Sequence[Any]) -> Any:
        """
        Desprende el dato del nodo final y poda las ramas que queden vacías.
        Retorna el dato eliminado (o None si no existía).
        """
        path: List[Tuple['Trie', Any]] = []
        node = self
        for key in keys:
            child = node._child(key, create=False)
            if child is None:
                return None
            path.append((node, key))
            node = child

        data = node._data if node._data is not _NO_DATA else None
        node._data = _NO_DATA

        # Poda iterativa (sin recursión, seguro para secuencias largas)
        while path and node._is_empty():
            parent, key = path.pop()
            parent._detach(key)
            node = parent
        return data

    # --- Datos ---

    @property
    def data(self) -> Any:
        if self._data is _NO_DATA:
            self._data = self._make_data()
        return self._data

    @property
    def has_data(self) -> bool:
        return self._data is not _NO_DATA

    def size(self) -> int:
        """Nodos alcanzables desde aquí (incluido este)."""
        count = 0
        stack = [self]
        while stack:
            node = stack.pop()
            count += 1
            if node._strong:
                stack.extend(node._strong.values())
            if node._objects:
                stack.extend(child for _, child in node._objects.values())
        return count

    # --- Lógica Interna ---

    def _child(self, key: Any, create: bool) -> Optional['Trie']:
        if type(key) in _PRIMITIVES:
            slot = primitive_key(key)
            table = self._strong
            child = table.get(slot) if table is not None else None
            if child is None and create:
                if table is None:
                    table = self._strong = {}
                child = table[slot] = Trie(self._weakness, self._make_data)
            return child

        ident = id(key)
        table = self._objects
        entry = table.get(ident) if table is not None else None
        if entry is not None and entry[0]() is key:
            return entry[1]
        if not create:
            return None

        if table is None:
            table = self._objects = {}
        child = Trie(self._weakness, self._make_data)
        table[ident] = (self._reference(key, ident), child)
        return child

    def _reference(self, key: Any, ident: int) -> Callable[[], Any]:
        if self._weakness:
            owner = weakref.ref(self)

            def _evict(ref, ident=ident, owner=owner):
                node = owner()
                if node is None or node._objects is None:
                    return
                entry = node._objects.get(ident)
                if entry is not None and entry[0] is ref:
                    del node._objects[ident]

            try:
                return weakref.ref(key, _evict)
            except TypeError:
                # Objeto no referenciable débilmente: almacenamiento normal
                pass
        return _StrongRef(key)

    def _detach(self, key: Any):
        if type(key) in _PRIMITIVES:
            if self._strong is not None:
                self._strong.pop(primitive_key(key), None)
        elif self._objects is not None:
            self._objects.pop(id(key), None)

    def _is_empty(self) -> bool:
        return self._data is _NO_DATA and not self._strong and not self._objects

    def __repr__(self):
        branches = len(self._strong or ()) + len(self._objects or ())
        return f"<Trie branches={branches} data={self.has_data} weak={self._weakness}>"
