"""
src/canon_core/memory/frozen.py
Tipos Representantes v1.2.
Subclases generadas de list/dict para los representantes canónicos.

Las instancias planas de list/dict no admiten referencias débiles, así que
todo representante vive en una subclase generada (una por etiqueta de tipo).
La variante congelada bloquea los métodos mutadores.
"""
import logging
import weakref
from typing import Any, Dict, Iterable, List, Tuple

from ..errors import CanonicalMutationError

logger = logging.getLogger(__name__)

# Atributo de clase que apunta a la etiqueta original
_TAG_ATTR = "_canon_tag_"

LIST_MUTATORS = (
    "__init__", "__setitem__", "__delitem__", "__iadd__", "__imul__",
    "append", "extend", "insert", "pop", "remove", "clear", "sort", "reverse",
)
DICT_MUTATORS = (
    "__init__", "__setitem__", "__delitem__", "__ior__",
    "clear", "pop", "popitem", "setdefault", "update",
)

# (id(etiqueta), congelado) -> clase generada.
# Débil: la clase (y con ella la etiqueta) muere con su último representante.
_types: "weakref.WeakValueDictionary[Tuple[int, bool], type]" = weakref.WeakValueDictionary()


def _blocked(name: str):
    def method(self, *args, **kwargs):
        raise CanonicalMutationError(
            f"Representante canónico inmutable: {type(self).__name__}.{name}()"
        )
    method.__name__ = name
    return method


def _rebuild_list(items: List[Any]) -> List[Any]:
    return list(items)


def _rebuild_object(tag: type, items: List[Tuple[str, Any]]) -> Any:
    obj = tag.__new__(tag)
    for key, value in items:
        tag.__setitem__(obj, key, value)
    return obj


def _reduce_list(self, protocol):
    # Copias y pickles producen una lista mutable normal
    return (_rebuild_list, (list(self),))


def _reduce_object(self, protocol):
    tag = type_tag(type(self))
    return (_rebuild_object, (tag, list(dict.items(self))))


def type_tag(cls: type) -> type:
    """Etiqueta de tipo original de una clase (identidad si no es generada)."""
    return cls.__dict__.get(_TAG_ATTR, cls)


def representative_type(tag: type, frozen: bool) -> type:
    """
    Devuelve (y cachea) la subclase representante para `tag`.
    `tag` debe derivar de list o dict.
    """
    key = (id(tag), frozen)
    cls = _types.get(key)
    if cls is not None and type_tag(cls) is tag:
        return cls

    if issubclass(tag, dict):
        mutators = DICT_MUTATORS
        reducer = _reduce_object
    elif issubclass(tag, list):
        mutators = LIST_MUTATORS
        reducer = _reduce_list
    else:
        raise TypeError(f"CRITICAL: Etiqueta no representable: {tag!r}")

    namespace: Dict[str, Any] = {
        _TAG_ATTR: tag,
        "__module__": tag.__module__,
        "__reduce_ex__": reducer,
    }
    if frozen:
        for name in mutators:
            namespace[name] = _blocked(name)

    prefix = "Frozen" if frozen else "Canonical"
    name = f"{prefix}{tag.__name__[:1].upper()}{tag.__name__[1:]}"
    cls = type(name, (tag,), namespace)
    cls.__qualname__ = name
    _types[key] = cls
    logger.debug("Tipo representante generado: %s (frozen=%s)", name, frozen)
    return cls


def build_list(items: Iterable[Any], frozen: bool) -> List[Any]:
    """Construye un representante de lista sin pasar por __init__."""
    cls = representative_type(list, frozen)
    rep = list.__new__(cls)
    list.extend(rep, items)
    return rep


def build_object(tag: type, items: Iterable[Tuple[str, Any]], frozen: bool) -> Dict[str, Any]:
    """
    Construye un representante con la misma etiqueta de tipo.
    Equivale a crear el objeto desde el prototipo y asignar cada clave.
    """
    cls = representative_type(tag, frozen)
    rep = cls.__new__(cls)
    for key, value in items:
        # Setter de la etiqueta: el de la clase generada puede estar bloqueado
        tag.__setitem__(rep, key, value)
    return rep
