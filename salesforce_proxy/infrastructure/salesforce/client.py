"""Salesforce REST/SOAP client with rate limit retry."""

from functools import lru_cache
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from salesforce_proxy.config import Settings, get_settings
from salesforce_proxy.core.exceptions import (
    SalesforceAPIError,
    SalesforceRateLimitError,
)
from salesforce_proxy.core.logging import get_logger
from salesforce_proxy.infrastructure.salesforce.auth import (
    SalesforceSession,
    SessionProvider,
)
from salesforce_proxy.infrastructure.salesforce.soap import (
    LeadConvertRequest,
    LeadConvertResult,
    build_convert_lead_envelope,
    parse_convert_lead_response,
)

logger = get_logger(__name__)

DEFAULT_CONVERTED_STATUS = "Closed - Converted"


def soql_literal(value: str) -> str:
    """Quote a value as a SOQL string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _error_messages(payload: Any) -> list[str]:
    """Flatten a Salesforce error body (list of {message, errorCode})."""
    if isinstance(payload, list):
        messages = []
        for item in payload:
            if isinstance(item, dict):
                code = item.get("errorCode") or item.get("statusCode")
                message = item.get("message", str(item))
                messages.append(f"{code}: {message}" if code else message)
            else:
                messages.append(str(item))
        return messages
    if isinstance(payload, dict):
        return [payload.get("message") or payload.get("error_description") or str(payload)]
    return [str(payload)]


class SalesforceClient:
    """Async client for the Salesforce REST API.

    - Bearer session from an injected SessionProvider
    - Retry with exponential backoff on REQUEST_LIMIT_EXCEEDED only
    - Session invalidation on 401
    - Lead conversion through the partner SOAP endpoint
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._sessions = session_provider
        self._settings = settings or get_settings()
        self._transport = transport
        self._api_version = self._settings.salesforce_api_version

    @property
    def data_path(self) -> str:
        return f"/services/data/v{self._api_version}"

    async def get_session(self) -> SalesforceSession:
        return await self._sessions.get_valid_session()

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self._settings.salesforce_timeout_seconds,
        )

    def _raise_for_status(self, response: httpx.Response, method: str, path: str) -> None:
        if response.is_success:
            return

        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        messages = _error_messages(payload)
        details = {"method": method, "path": path, "errors": messages}

        if response.status_code == 401:
            self._sessions.invalidate()
        if any("REQUEST_LIMIT_EXCEEDED" in m for m in messages):
            raise SalesforceRateLimitError(
                f"Rate limit exceeded: {'; '.join(messages)}",
                details,
                response_status=response.status_code,
            )
        raise SalesforceAPIError(
            f"Salesforce API error: {response.status_code} - {'; '.join(messages)}",
            details,
            response_status=response.status_code,
        )

    @retry(
        retry=retry_if_exception_type((SalesforceRateLimitError,)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make a single authenticated REST call.

        Args:
            method: HTTP method
            path: Path relative to the instance URL
            json: JSON body

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            SalesforceAPIError: On non-2xx responses and transport errors
            SalesforceRateLimitError: On rate limit (triggers retry)
        """
        session = await self._sessions.get_valid_session()
        headers = {
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
            "Sforce-Duplicate-Rule-Header": "allowSave=true",
        }

        logger.debug("Calling Salesforce API", method=method, path=path)
        try:
            async with self._http() as client:
                response = await client.request(
                    method, f"{session.instance_url}{path}", headers=headers, json=json
                )
        except httpx.HTTPError as e:
            logger.error("Salesforce API call failed", method=method, path=path, error=str(e))
            raise SalesforceAPIError(f"API call failed: {e}") from e

        self._raise_for_status(response, method, path)

        if "application/json" in response.headers.get("content-type", "") and response.content:
            return response.json()
        return None

    async def query(self, soql: str) -> dict[str, Any]:
        """Run a SOQL query and return the raw result."""
        return await self._request("GET", f"{self.data_path}/query?q={quote(soql)}")

    async def find_record_id(self, sobject: str, field: str, value: str) -> str | None:
        """Return the Id of the first record whose field equals value exactly."""
        result = await self.query(
            f"SELECT Id FROM {sobject} WHERE {field} = {soql_literal(value)} LIMIT 1"
        )
        records = result.get("records") or []
        return records[0]["Id"] if records else None

    async def create(self, sobject: str, fields: dict[str, Any]) -> str:
        """Create a record and return its Id. None values are not sent."""
        payload = {k: v for k, v in fields.items() if v is not None}
        result = await self._request("POST", f"{self.data_path}/sobjects/{sobject}", json=payload)

        if not result or not result.get("success", False):
            errors = _error_messages((result or {}).get("errors") or [])
            raise SalesforceAPIError(
                f"Failed to create {sobject}: {'; '.join(errors) or 'no id returned'}",
                {"sobject": sobject, "errors": errors},
            )
        logger.info("Created record", sobject=sobject, record_id=result["id"])
        return result["id"]

    async def update(self, sobject: str, record_id: str, fields: dict[str, Any]) -> None:
        """PATCH a record. None values are not sent."""
        payload = {k: v for k, v in fields.items() if v is not None}
        await self._request(
            "PATCH", f"{self.data_path}/sobjects/{sobject}/{record_id}", json=payload
        )
        logger.info("Updated record", sobject=sobject, record_id=record_id)

    async def get_converted_lead_status(self) -> str:
        """Label of the org's lead status flagged IsConverted."""
        result = await self.query(
            "SELECT MasterLabel FROM LeadStatus WHERE IsConverted = true LIMIT 1"
        )
        records = result.get("records") or []
        if records and records[0].get("MasterLabel"):
            return records[0]["MasterLabel"]
        return DEFAULT_CONVERTED_STATUS

    async def get_content_document_id(self, content_version_id: str) -> str | None:
        result = await self.query(
            "SELECT ContentDocumentId FROM ContentVersion "
            f"WHERE Id = {soql_literal(content_version_id)} LIMIT 1"
        )
        records = result.get("records") or []
        return records[0].get("ContentDocumentId") if records else None

    async def convert_lead(self, request: LeadConvertRequest) -> LeadConvertResult:
        """Convert a Lead through the partner SOAP API.

        Raises:
            SalesforceAPIError: On transport errors or unparseable responses.
                Non-2xx responses carrying a SOAP Fault are returned as a
                failed result instead.
        """
        session = await self._sessions.get_valid_session()
        envelope = build_convert_lead_envelope(session.access_token, request)
        url = f"{session.instance_url}/services/Soap/u/{self._api_version}"

        logger.info("Converting lead", lead_id=request.lead_id)
        try:
            async with self._http() as client:
                response = await client.post(
                    url,
                    content=envelope,
                    headers={
                        "Content-Type": "text/xml; charset=UTF-8",
                        "SOAPAction": "convertLead",
                    },
                )
        except httpx.HTTPError as e:
            raise SalesforceAPIError(f"convertLead call failed: {e}") from e

        try:
            result = parse_convert_lead_response(response.content)
        except ValueError as e:
            raise SalesforceAPIError(
                f"convertLead failed with status {response.status_code}: {e}",
                response_status=response.status_code,
            ) from e

        if response.status_code == 401:
            self._sessions.invalidate()
        if not response.is_success and result.success:
            return LeadConvertResult(
                success=False,
                errors=[f"HTTP {response.status_code}"],
            )
        return result


# Dependency injection helpers
@lru_cache
def get_session_provider() -> SessionProvider:
    """Process-wide SessionProvider shared by every request."""
    return SessionProvider()


def get_salesforce_client() -> SalesforceClient:
    """Get SalesforceClient instance for dependency injection."""
    return SalesforceClient(get_session_provider())
