"""Sesión autenticada contra Salesforce.

Login SOAP (partner API) con usuario y `password + security token`, el mismo
flujo que usan los clientes oficiales. La sesión resultante se devuelve al
llamador en vez de vivir en un singleton de módulo: quien quiera hacer una
query necesita tener la sesión en la mano.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit
from xml.sax.saxutils import escape

import httpx
from bs4 import BeautifulSoup
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import SessionInfo
from core.errors import AuthenticationError
from core.log import get_logger

logger = get_logger(__name__)

_LOGIN_ENVELOPE = """<?xml version="1.0" encoding="utf-8" ?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:urn="urn:partner.soap.sforce.com">
  <soapenv:Body>
    <urn:login>
      <urn:username>{username}</urn:username>
      <urn:password>{password}</urn:password>
    </urn:login>
  </soapenv:Body>
</soapenv:Envelope>"""


class SalesforceSession:
    """Handle de conexión: cliente HTTP + identificadores del último login."""

    def __init__(self, client: httpx.AsyncClient, *, api_version: str) -> None:
        self.client = client
        self.api_version = api_version
        self.info: SessionInfo | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.info is not None

    async def aclose(self) -> None:
        await self.client.aclose()


@dataclass
class LoginResult:
    """Resultado tipado de `SessionManager.login()`.

    El login no lanza: el fallo viaja en `error` y el llamador decide si
    aborta el build o sigue adelante con la sesión sin autenticar.
    """

    session: SalesforceSession
    error: AuthenticationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.session.is_authenticated

    def raise_for_error(self) -> SalesforceSession:
        if self.error is not None:
            raise self.error
        if not self.session.is_authenticated:
            raise AuthenticationError("Login did not establish a session")
        return self.session


def build_login_envelope(*, username: str, secret: str) -> str:
    return _LOGIN_ENVELOPE.format(username=escape(username), password=escape(secret))


def _find_text(soup: BeautifulSoup, tag: str) -> str | None:
    node = soup.find(tag)
    if node is None:
        return None
    text = node.get_text(strip=True)
    return text or None


def parse_login_response(*, status_code: int, body: str) -> SessionInfo:
    """Extrae `SessionInfo` de la respuesta SOAP o lanza `AuthenticationError`."""

    soup = BeautifulSoup(body or "", "xml")

    fault = _find_text(soup, "faultstring")
    if fault:
        code = _find_text(soup, "faultcode")
        raise AuthenticationError(f"{code}: {fault}" if code else fault)
    if status_code != 200:
        raise AuthenticationError(f"Login failed with HTTP {status_code}")

    session_id = _find_text(soup, "sessionId")
    server_url = _find_text(soup, "serverUrl")
    user_id = _find_text(soup, "userId")
    organization_id = _find_text(soup, "organizationId")
    if not (session_id and server_url and user_id and organization_id):
        raise AuthenticationError("Login response is missing session identifiers")

    parts = urlsplit(server_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise AuthenticationError(f"Login response has an invalid serverUrl: {server_url!r}")

    try:
        return SessionInfo(
            access_token=session_id,
            instance_url=f"{parts.scheme}://{parts.netloc}",
            user_id=user_id,
            organization_id=organization_id,
        )
    except ValidationError as exc:
        raise AuthenticationError(f"Login response is invalid: {exc}") from exc


class SessionManager:
    """Dueño de la única sesión del proceso (o del build que lo crea).

    La sesión se crea de forma perezosa en el primer `login()`; cada llamada
    a `login()` hace un round-trip nuevo.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._session: SalesforceSession | None = None

    @property
    def session(self) -> SalesforceSession:
        if self._session is None:
            client = build_async_client(self._settings, transport=self._transport)
            self._session = SalesforceSession(client, api_version=self._settings.api_version)
        return self._session

    @property
    def login_endpoint(self) -> str:
        base = self._settings.login_url.rstrip("/")
        return f"{base}/services/Soap/u/{self._settings.api_version}"

    async def login(self) -> LoginResult:
        session = self.session
        try:
            info = await self._authenticate(session)
        except AuthenticationError as exc:
            session.info = None
            logger.error("Salesforce login failed: %s", exc)
            return LoginResult(session=session, error=exc)

        session.info = info
        logger.info("User ID: %s", info.user_id)
        logger.info("Org ID: %s", info.organization_id)
        return LoginResult(session=session)

    async def _authenticate(self, session: SalesforceSession) -> SessionInfo:
        if not self._settings.has_credentials:
            raise AuthenticationError("Missing Salesforce credentials (SF_USERNAME / SF_PASSWORD)")

        envelope = build_login_envelope(
            username=self._settings.username,
            secret=self._settings.login_secret(),
        )
        try:
            resp = await session.client.post(
                self.login_endpoint,
                content=envelope.encode("utf-8"),
                headers={
                    "Content-Type": "text/xml; charset=utf-8",
                    "SOAPAction": "login",
                    "Accept": "text/xml",
                },
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Login request failed: {exc}") from exc

        return parse_login_response(status_code=resp.status_code, body=resp.text)

    async def aclose(self) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None

    async def __aenter__(self) -> SessionManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
