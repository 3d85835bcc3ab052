"""Pytest configuration and fixtures."""

import itertools
import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

# Set test environment variables before importing app
os.environ.setdefault("SALESFORCE_CLIENT_ID", "test-client-id")
os.environ.setdefault("SALESFORCE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SALESFORCE_USERNAME", "proxy@example.com")
os.environ.setdefault("SALESFORCE_PASSWORD", "secret")
os.environ.setdefault("SALESFORCE_LOGIN_URL", "https://login.example.com")

from salesforce_proxy.config import Settings  # noqa: E402
from salesforce_proxy.core.exceptions import SalesforceAPIError  # noqa: E402
from salesforce_proxy.infrastructure.salesforce.auth import SalesforceSession  # noqa: E402
from salesforce_proxy.infrastructure.salesforce.soap import (  # noqa: E402
    LeadConvertRequest,
    LeadConvertResult,
)

INSTANCE_URL = "https://oxygen.my.salesforce.com"


@pytest.fixture
def mock_settings() -> Settings:
    """Settings with both credential sets complete."""
    return Settings(
        _env_file=None,
        salesforce_client_id="client-id",
        salesforce_client_secret="client-secret",
        salesforce_login_url="https://login.example.com/",
        salesforce_refresh_token="refresh-token",
        salesforce_username="proxy@example.com",
        salesforce_password="secret",
        salesforce_security_token="TOKEN",
        salesforce_session_ttl_minutes=90,
    )


class FakeClock:
    """Controllable clock for session expiry tests."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class FakeSalesforce:
    """In-memory Salesforce org exposing the SalesforceClient interface."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_create: set[str] = set()
        self.fail_update: set[str] = set()
        self.converted_status: str | None = "Qualified - Converted"
        self.convert_result: LeadConvertResult | None = None
        self.convert_error: Exception | None = None
        self.convert_requests: list[LeadConvertRequest] = []
        self._ids = itertools.count(1)
        self.session = SalesforceSession(
            access_token="token",
            instance_url=INSTANCE_URL,
            owner_id="005OWNER",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    def _new_id(self, sobject: str) -> str:
        return f"{sobject[:3].upper()}{next(self._ids):06d}"

    def add(self, sobject: str, **fields: Any) -> str:
        record_id = self._new_id(sobject)
        self.records.setdefault(sobject, {})[record_id] = dict(fields)
        return record_id

    def all(self, sobject: str) -> list[dict[str, Any]]:
        return list(self.records.get(sobject, {}).values())

    def get(self, sobject: str, record_id: str) -> dict[str, Any]:
        return self.records[sobject][record_id]

    async def get_session(self) -> SalesforceSession:
        return self.session

    async def query(self, soql: str) -> dict[str, Any]:
        self.calls.append(("query", soql))
        return {"totalSize": 0, "done": True, "records": []}

    async def find_record_id(self, sobject: str, field: str, value: str) -> str | None:
        self.calls.append(("find", sobject))
        for record_id, fields in self.records.get(sobject, {}).items():
            if fields.get(field) == value:
                return record_id
        return None

    async def create(self, sobject: str, fields: dict[str, Any]) -> str:
        self.calls.append(("create", sobject))
        if sobject in self.fail_create:
            raise SalesforceAPIError(f"Failed to create {sobject}: FIELD_CUSTOM_VALIDATION_EXCEPTION")
        payload = {k: v for k, v in fields.items() if v is not None}
        return self.add(sobject, **payload)

    async def update(self, sobject: str, record_id: str, fields: dict[str, Any]) -> None:
        self.calls.append(("update", sobject))
        if sobject in self.fail_update:
            raise SalesforceAPIError(f"Salesforce API error: 400 - cannot update {sobject}")
        record = self.records.setdefault(sobject, {}).setdefault(record_id, {})
        record.update({k: v for k, v in fields.items() if v is not None})

    async def get_converted_lead_status(self) -> str:
        self.calls.append(("query", "LeadStatus"))
        if self.converted_status is None:
            raise SalesforceAPIError("Salesforce API error: 500 - query failed")
        return self.converted_status

    async def convert_lead(self, request: LeadConvertRequest) -> LeadConvertResult:
        self.calls.append(("convert", request.lead_id))
        self.convert_requests.append(request)
        if self.convert_error is not None:
            raise self.convert_error
        if self.convert_result is not None:
            return self.convert_result

        account_id = self.add("Account", Name="Converted Account")
        contact_id = self.add("Contact", AccountId=account_id)
        opportunity_id = self.add(
            "Opportunity", Name=request.opportunity_name, AccountId=account_id
        )
        return LeadConvertResult(
            success=True,
            lead_id=request.lead_id,
            account_id=account_id,
            contact_id=contact_id,
            opportunity_id=opportunity_id,
        )

    async def get_content_document_id(self, content_version_id: str) -> str | None:
        self.calls.append(("query", "ContentVersion"))
        if content_version_id in self.records.get("ContentVersion", {}):
            return f"069{content_version_id}"
        return None


@pytest.fixture
def fake_salesforce() -> FakeSalesforce:
    return FakeSalesforce()


@pytest.fixture
def lead_payload() -> dict[str, Any]:
    """Step-1 form data."""
    return {
        "contactName": "Jane Doe",
        "companyName": "Acme Ltd",
        "email": "jane@acme.com",
        "phone": "555-1000",
        "jobTitle": "CFO",
        "website": "https://acme.example",
        "userType": "direct",
    }


@pytest.fixture
def submission_payload() -> dict[str, Any]:
    """Final submission without a Lead id or sites."""
    return {
        "companyName": "Acme Ltd",
        "contactName": "Jane Doe",
        "email": "jane@acme.com",
        "phone": "555-1000",
        "jobTitle": "CFO",
        "industry": "electricity",
        "companySize": "51-200",
        "useCase": "billing",
        "sites": [],
    }


@pytest.fixture
def site_payload() -> dict[str, Any]:
    return {
        "name": "HQ",
        "address": "1 Main St",
        "meterPoints": [{"mpan": "123", "meterNumber": "M1", "fuelType": "electricity"}],
    }
