"""Errores del dominio.

Dos familias para Salesforce (login y query) y una para el build del sitio.
"""

from __future__ import annotations


class SalesforceError(Exception):
    """Base para fallos al hablar con Salesforce."""


class AuthenticationError(SalesforceError):
    """Login rechazado: red, credenciales inválidas o fault del servicio."""


class QueryError(SalesforceError):
    """Query fallida, incluida una query sin sesión autenticada."""


class BuildError(Exception):
    """El build del sitio no pudo completarse."""
