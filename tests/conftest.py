"""
Shared test fixtures.

Provides: settings with fixed credentials, a fake Salesforce served through
httpx.MockTransport (SOAP login + REST query).
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from core.config import AppSettings

INSTANCE_URL = "https://na1.example.my.salesforce.com"
SESSION_ID = "00Dxx0000001gPL!AQ4AQFakeSessionId"
USER_ID = "005xx000001Sv6AAAS"
ORG_ID = "00Dxx0000001gPLEAY"

LOGIN_OK = f"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns="urn:partner.soap.sforce.com">
<soapenv:Body><loginResponse><result>
<metadataServerUrl>{INSTANCE_URL}/services/Soap/m/50.0/00Dxx0000001gPL</metadataServerUrl>
<passwordExpired>false</passwordExpired>
<sandbox>false</sandbox>
<serverUrl>{INSTANCE_URL}/services/Soap/u/50.0/00Dxx0000001gPL</serverUrl>
<sessionId>{SESSION_ID}</sessionId>
<userId>{USER_ID}</userId>
<userInfo><organizationId>{ORG_ID}</organizationId><userEmail>a@b.com</userEmail></userInfo>
</result></loginResponse></soapenv:Body></soapenv:Envelope>"""

LOGIN_FAULT = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" xmlns:sf="urn:fault.partner.soap.sforce.com">
<soapenv:Body><soapenv:Fault>
<faultcode>INVALID_LOGIN</faultcode>
<faultstring>INVALID_LOGIN: Invalid username, password, security token; or user locked out.</faultstring>
</soapenv:Fault></soapenv:Body></soapenv:Envelope>"""


def make_user(index: int, **overrides: Any) -> dict[str, Any]:
    record = {
        "attributes": {"type": "User", "url": f"/services/data/v50.0/sobjects/User/005{index:015d}"},
        "Id": f"005{index:015d}",
        "FirstName": f"First{index}",
        "LastName": f"Last{index}",
        "Email": f"user{index}@example.com",
        "SmallPhotoUrl": f"{INSTANCE_URL}/profilephoto/005/T/{index}",
    }
    record.update(overrides)
    return record


class FakeSalesforce:
    """Fake remote service. Records every request it receives."""

    def __init__(
        self,
        *,
        records: list[dict[str, Any]] | None = None,
        login_status: int = 200,
        login_body: str = LOGIN_OK,
        login_error: Exception | None = None,
        query_status: int = 200,
        query_payload: Any = None,
        query_error: Exception | None = None,
    ) -> None:
        self.records = records if records is not None else [make_user(i) for i in range(3)]
        self.login_status = login_status
        self.login_body = login_body
        self.login_error = login_error
        self.query_status = query_status
        self.query_payload = query_payload
        self.query_error = query_error
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def login_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/services/Soap/u/" in r.url.path]

    @property
    def query_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/query")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "/services/Soap/u/" in request.url.path:
            if self.login_error is not None:
                raise self.login_error
            return httpx.Response(
                self.login_status,
                text=self.login_body,
                headers={"Content-Type": "text/xml; charset=utf-8"},
            )
        if request.url.path.endswith("/query"):
            if self.query_error is not None:
                raise self.query_error
            payload = self.query_payload
            if payload is None:
                payload = {"totalSize": len(self.records), "done": True, "records": self.records}
            return httpx.Response(
                self.query_status,
                content=json.dumps(payload).encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        return httpx.Response(404, json=[{"errorCode": "NOT_FOUND", "message": "unknown"}])


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    """Settings from the documented example credentials, isolated from .env files."""
    return AppSettings(
        _env_file=None,
        login_url="https://login.example.com",
        username="a@b.com",
        password="p",
        token="t",
        site_input_dir=tmp_path / "site",
        site_output_dir=tmp_path / "dist",
    )


@pytest.fixture
def fake_salesforce() -> FakeSalesforce:
    return FakeSalesforce()
