"""Orquestación del build: Salesforce → colección → templates.

Este módulo conecta el cliente de Salesforce con el builder del sitio. Es el
equivalente al fichero de configuración del generador: registra los datos
globales y la colección `salesforce_users`.
"""

from __future__ import annotations

import os
from pathlib import Path

import httpx

from adapters.salesforce import SessionManager, search
from adapters.site_builder import BuildReport, CollectionApi, SiteBuilder
from core.config import AppSettings
from core.domain.models import UserRecord
from core.log import get_logger

logger = get_logger(__name__)

SALESFORCE_USERS_COLLECTION = "salesforce_users"
DEFAULT_LAST_NAME_INITIAL = "S"

# Nunca se exponen a los templates.
_PRIVATE_ENV_KEYS = frozenset({"SF_PASSWORD", "SF_TOKEN"})


def public_environment(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Entorno del proceso sin los secretos de Salesforce."""

    environ = dict(os.environ if environ is None else environ)
    return {k: v for k, v in environ.items() if k.upper() not in _PRIVATE_ENV_KEYS}


def template_environment(settings: AppSettings, environ: dict[str, str] | None = None) -> dict[str, str]:
    """Entorno público + la config no secreta, aunque venga solo del `.env`.

    Las variables reales del proceso tienen prioridad.
    """

    from_settings = {
        "SF_LOGIN_URL": settings.login_url,
        "SF_USERNAME": settings.username,
        "SF_API_VERSION": settings.api_version,
    }
    return {**from_settings, **public_environment(environ)}


async def fetch_salesforce_users(
    *,
    settings: AppSettings | None = None,
    manager: SessionManager | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    last_name_initial: str = DEFAULT_LAST_NAME_INITIAL,
) -> list[UserRecord]:
    """Login y luego búsqueda, en ese orden.

    Con `strict_auth` un login fallido aborta con `AuthenticationError`.
    Sin él solo queda logueado y la búsqueda falla con `QueryError` sobre la
    sesión sin autenticar.
    """

    settings = settings or AppSettings()
    owns_manager = manager is None
    manager = manager or SessionManager(settings, transport=transport)
    try:
        result = await manager.login()
        if not result.ok:
            if settings.strict_auth:
                result.raise_for_error()
            logger.warning("Continuing without an authenticated Salesforce session")
        return await search(result.session, last_name_initial)
    finally:
        if owns_manager:
            await manager.aclose()


def configure_site(
    builder: SiteBuilder,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SiteBuilder:
    settings = settings or AppSettings()

    builder.add_global_data("env", template_environment(settings))

    async def salesforce_users(collections: CollectionApi) -> list[UserRecord]:
        return await fetch_salesforce_users(settings=settings, transport=transport)

    builder.add_collection(SALESFORCE_USERS_COLLECTION, salesforce_users)
    return builder


async def build_site(
    *,
    settings: AppSettings | None = None,
    input_dir: Path | None = None,
    output_dir: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BuildReport:
    settings = settings or AppSettings()
    builder = SiteBuilder(
        input_dir=input_dir or settings.site_input_dir,
        output_dir=output_dir or settings.site_output_dir,
    )
    configure_site(builder, settings=settings, transport=transport)
    return await builder.build()
