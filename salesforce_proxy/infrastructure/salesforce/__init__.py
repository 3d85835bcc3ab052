"""Salesforce connectivity: OAuth sessions, REST client and SOAP codec."""

from salesforce_proxy.infrastructure.salesforce.auth import (
    SalesforceSession,
    SessionProvider,
)
from salesforce_proxy.infrastructure.salesforce.client import (
    SalesforceClient,
    get_salesforce_client,
    get_session_provider,
)

__all__ = [
    "SalesforceClient",
    "SalesforceSession",
    "SessionProvider",
    "get_salesforce_client",
    "get_session_provider",
]
