"""
src/canon_core/kernel/canon.py
Canon de Objetos v1.4.
Proyecta cada árbol de listas/dicts sobre su representante canónico.

GARANTÍA: si a y b son profundamente iguales (misma etiqueta de tipo en
cada dict, claves en cualquier orden), admit(a) is admit(b).

Los escalares opacos (tuplas, fechas, clases propias, dicts con claves no
str, subclases de list) no se canonizan: se asume que ya son canónicos.
La entrada debe ser un árbol; un ciclo termina en RecursionError.
"""
import logging
import threading
from typing import Any, ContextManager, Dict, List, Optional

from ..ds.trie import PRIMITIVE_TYPES
from ..memory.frozen import build_list, build_object, type_tag
from . import settings
from .keys import KeySignature, KeySignatureCache
from .pool import new_pool
from .registry import IdentityRegistry

logger = logging.getLogger(__name__)

_PRIMITIVES = frozenset(PRIMITIVE_TYPES)


class Pass:
    """Marca un valor como ya canónico: admit() lo devuelve sin recorrerlo."""
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self):
        return f"Pass({self.value!r})"


def _is_plain_object(value: dict) -> bool:
    for key in value:
        if type(key) is not str:
            return False
    return True


class ObjectCanon:
    """
    Motor de canonización.
    Registro de identidad + pool (Trie discriminante) + cache de firmas.
    Sin control de concurrencia propio salvo que se pase `lock`.

    Aun en modo débil, los escalares opacos que no admiten weakref (tuplas,
    fechas, object()) usados como hijos quedan retenidos junto con su rama
    del pool mientras viva el canon. reset() los libera.
    """

    def __init__(self,
                 weak: Optional[bool] = None,
                 freeze: Optional[bool] = None,
                 lock: Optional[ContextManager] = None):
        self._weak = settings.CAN_USE_WEAK_REFS if weak is None else weak
        self._freeze = settings.FREEZE_REPRESENTATIVES if freeze is None else freeze
        self._lock = lock
        if not self._weak:
            logger.warning(
                "Referencias débiles desactivadas: el canon retendrá toda "
                "subestructura admitida mientras viva la instancia."
            )
        self._build()

    def _build(self):
        # Conjunto de todo valor canónico admitido
        self._known = IdentityRegistry(self._weak)
        # Almacenamiento de representantes (y firmas de claves)
        self._pool = new_pool(self._weak)
        # Órdenes distintos del mismo conjunto de claves comparten firma
        self._signatures = KeySignatureCache()

    @property
    def weak(self) -> bool:
        return self._weak

    @property
    def freeze(self) -> bool:
        return self._freeze

    # =========================================================================
    # API PÚBLICA
    # =========================================================================

    def pass_(self, value: Any) -> Any:
        """Envuelve listas/dicts en Pass. El resto se devuelve tal cual."""
        if isinstance(value, (list, dict)):
            return Pass(value)
        return value

    def admit(self, value: Any) -> Any:
        """Retorna la versión canónica de `value`."""
        if self._lock is None:
            return self._admit(value)
        with self._lock:
            return self._admit(value)

    def is_canonical(self, value: Any) -> bool:
        return self._known.has(value)

    def sorted_keys(self, mapping: Dict[str, Any]) -> KeySignature:
        return self._signatures.sorted_keys(list(mapping), self._pool)

    def stats(self) -> Dict[str, Any]:
        """Introspección para monitoreo."""
        return {
            "known": len(self._known),
            "pool_nodes": self._pool.size(),
            "key_signatures": len(self._signatures),
            "weak": self._weak,
            "freeze": self._freeze,
        }

    def reset(self):
        """
        Nueva generación: descarta registro, pool y firmas.
        Los representantes ya entregados siguen siendo válidos pero dejan
        de ser reconocidos como canónicos.
        """
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Reset del canon: %s", self.stats())
        self._build()

    # =========================================================================
    # ADMISIÓN (Recursiva, hojas primero)
    # =========================================================================

    def _admit(self, value: Any) -> Any:
        cls = type(value)
        if cls in _PRIMITIVES:
            return value
        if isinstance(value, Pass):
            return value.value

        if isinstance(value, list):
            # Las subclases de list ajenas al canon son opacas
            if (cls is not list and type_tag(cls) is not list) or self._known.has(value):
                return value
            return self._admit_array(value)

        if isinstance(value, dict):
            if self._known.has(value) or not _is_plain_object(value):
                return value
            return self._admit_object(value)

        return value

    def _admit_array(self, value: list) -> list:
        # Las listas se buscan por sus elementos ya canonizados
        array = [self._admit(item) for item in value]
        slot = self._pool.lookup_array(array).data
        rep = slot.array
        if rep is None:
            rep = build_list(array, self._freeze)
            slot.array = rep
            self._known.add(rep)
            logger.debug("Lista canónica instalada (len=%d)", len(rep))
        return rep

    def _admit_object(self, value: dict) -> dict:
        # Secuencia: [etiqueta, claves serializadas, valor canónico por clave]
        # La etiqueta se compara por identidad y nunca se canoniza.
        tag = type_tag(type(value))
        signature = self.sorted_keys(value)
        array: List[Any] = [tag, signature.json]
        first_value = len(array)
        for key in signature.keys:
            array.append(self._admit(value[key]))

        slot = self._pool.lookup_array(array).data
        rep = slot.object
        if rep is None:
            rep = build_object(tag, zip(signature.keys, array[first_value:]), self._freeze)
            slot.object = rep
            self._known.add(rep)
            logger.debug("Objeto canónico instalado (%s, claves=%s)", tag.__name__, signature.json)
        return rep


# =============================================================================
# CANON GLOBAL DEL PROCESO
# =============================================================================
_default: Optional[ObjectCanon] = None
_default_lock = threading.Lock()


def default_canon() -> ObjectCanon:
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = ObjectCanon()
    return _default


def admit(value: Any) -> Any:
    return default_canon().admit(value)


def pass_(value: Any) -> Any:
    return default_canon().pass_(value)
