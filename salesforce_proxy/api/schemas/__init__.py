"""API schemas."""

from salesforce_proxy.api.schemas.common import ErrorResponse, HealthResponse
from salesforce_proxy.api.schemas.salesforce import (
    LeadResponse,
    QueryRequest,
    ServicePointRecord,
    SubmissionRecords,
    SubmissionResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LeadResponse",
    "QueryRequest",
    "ServicePointRecord",
    "SubmissionRecords",
    "SubmissionResponse",
]
