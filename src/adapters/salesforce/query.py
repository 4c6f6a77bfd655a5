"""Query de usuarios sobre una sesión autenticada (REST API).

Nota conocida:
- `search()` recibe la inicial del apellido pero la query es fija y no
  filtra: siempre trae los primeros 100 usuarios en el orden del servidor.
  Se conserva así a propósito; hay un test de regresión que lo fija.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from adapters.salesforce.session import SalesforceSession
from core.domain.models import UserRecord
from core.errors import QueryError
from core.log import get_logger

logger = get_logger(__name__)

USER_QUERY_LIMIT = 100
USER_QUERY = f"SELECT Id, FirstName, LastName, Email, SmallPhotoUrl FROM User LIMIT {USER_QUERY_LIMIT}"


def _describe_error(resp: httpx.Response) -> str:
    """Mensaje legible a partir del cuerpo de error de la REST API."""

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, list):
        messages = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            code = item.get("errorCode")
            message = item.get("message")
            messages.append(f"{code}: {message}" if code else str(message))
        if messages:
            return "; ".join(messages)
    return f"HTTP {resp.status_code}"


async def run_query(session: SalesforceSession, soql: str) -> dict[str, Any]:
    """Ejecuta una SOQL y devuelve el JSON de la primera (y única) página."""

    if not session.is_authenticated:
        raise QueryError("Cannot query Salesforce: session is not authenticated")

    info = session.info
    url = f"{info.instance_url}/services/data/v{session.api_version}/query"
    try:
        resp = await session.client.get(
            url,
            params={"q": soql},
            headers={"Authorization": f"Bearer {info.access_token}"},
        )
    except httpx.HTTPError as exc:
        raise QueryError(f"Query request failed: {exc}") from exc

    if resp.status_code != 200:
        raise QueryError(f"Query failed: {_describe_error(resp)}")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise QueryError("Query response is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise QueryError("Query response is not a JSON object")
    return payload


async def search(session: SalesforceSession, last_name_initial: str) -> list[UserRecord]:
    """Devuelve hasta `USER_QUERY_LIMIT` usuarios.

    `last_name_initial` no se aplica a la query (ver nota del módulo).
    """

    logger.debug("Searching users (last_name_initial=%r is not applied)", last_name_initial)
    payload = await run_query(session, USER_QUERY)

    raw_records = payload.get("records")
    if not isinstance(raw_records, list):
        raise QueryError("Query response has no 'records' list")

    users: list[UserRecord] = []
    for raw in raw_records[:USER_QUERY_LIMIT]:
        if not isinstance(raw, dict):
            raise QueryError(f"Unexpected record in query response: {raw!r}")
        try:
            users.append(UserRecord.model_validate(raw))
        except ValidationError as exc:
            raise QueryError(f"Invalid user record: {exc}") from exc

    logger.info("Fetched %d Salesforce users", len(users))
    return users
