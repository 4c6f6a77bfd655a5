"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan los providers del build.
"""

from core.interfaces.collections import CollectionProvider

__all__ = ["CollectionProvider"]
