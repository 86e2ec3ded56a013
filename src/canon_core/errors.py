"""
src/canon_core/errors.py
Tipos de excepción del Canon.
"""


class CanonError(Exception):
    """Base de todos los errores propios del Canon."""
    pass


class CanonicalMutationError(CanonError, TypeError):
    """Se intentó mutar un representante canónico congelado."""
    pass
