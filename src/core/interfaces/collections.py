"""Contratos de colecciones del build.

Por qué Protocol:
- El builder del sitio solo necesita "algo awaitable que devuelva una
  secuencia"; funciones async, closures o clases sirven por igual.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from adapters.site_builder import CollectionApi


@runtime_checkable
class CollectionProvider(Protocol):
    """Provider de una colección con nombre.

    Reglas de diseño:
    - Es asíncrono porque típicamente hará I/O (HTTP).
    - Se ejecuta una vez por build, antes de renderizar cualquier template.
    """

    async def __call__(self, collections: CollectionApi) -> Sequence[Any]:
        ...
