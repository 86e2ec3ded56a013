"""
src/canon_core/kernel/settings.py
Configuración de Runtime v1.0.
Capacidades del intérprete y banderas globales del Canon.
"""
import logging
import os
import weakref

logger = logging.getLogger(__name__)

# Variables de entorno reconocidas
ENV_WEAK_REFS = "CANON_CORE_WEAK_REFS"
ENV_FREEZE = "CANON_CORE_FREEZE"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def env_flag(name: str, default: bool) -> bool:
    """
    Lee una bandera booleana del entorno.
    Valores no reconocidos se ignoran (con aviso) y se usa el default.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Valor inválido %s=%r, se usa %s", name, raw, default)
    return default


def _probe_weak_refs() -> bool:
    """
    Verifica que el runtime soporte referencias débiles sobre subclases
    de list/dict (las instancias planas no son referenciables).
    """
    class _Probe(list):
        pass

    try:
        probe = _Probe()
        ref = weakref.ref(probe)
        return ref() is probe
    except TypeError:
        return False


# Bandera de capacidad: "colecciones débiles disponibles"
CAN_USE_WEAK_REFS: bool = _probe_weak_refs() and env_flag(ENV_WEAK_REFS, True)

# Congelación de representantes: activa salvo con `python -O`
FREEZE_REPRESENTATIVES: bool = env_flag(ENV_FREEZE, __debug__)
