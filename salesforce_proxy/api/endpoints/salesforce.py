"""Salesforce lead and submission endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from salesforce_proxy.api.schemas.common import ErrorResponse
from salesforce_proxy.api.schemas.salesforce import (
    LeadResponse,
    QueryRequest,
    SubmissionRecords,
    SubmissionResponse,
)
from salesforce_proxy.core.exceptions import AppException
from salesforce_proxy.core.logging import get_logger
from salesforce_proxy.domain.entities.submission import InvoiceSubmission, LeadForm
from salesforce_proxy.domain.services.conversion_service import ConversionService
from salesforce_proxy.domain.services.lead_service import LeadService
from salesforce_proxy.infrastructure.salesforce.client import (
    SalesforceClient,
    get_salesforce_client,
)

logger = get_logger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def get_lead_service(
    client: SalesforceClient = Depends(get_salesforce_client),
) -> LeadService:
    return LeadService(client)


def get_conversion_service(
    client: SalesforceClient = Depends(get_salesforce_client),
) -> ConversionService:
    return ConversionService(client)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post("/lead", response_model=LeadResponse, responses=_ERROR_RESPONSES)
async def create_lead(
    form: LeadForm,
    service: LeadService = Depends(get_lead_service),
):
    """Create a Lead from the first form step."""
    logger.info("Received lead data", company=form.company_name)
    try:
        lead_id = await service.create_lead(form)
    except AppException as e:
        logger.error("Create lead failed", error=e.message)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Unexpected error creating lead")
        return error_response(500, str(e))

    return LeadResponse(lead_id=lead_id)


@router.post("/invoice", response_model=SubmissionResponse, responses=_ERROR_RESPONSES)
async def submit_invoice(
    submission: InvoiceSubmission,
    service: ConversionService = Depends(get_conversion_service),
):
    """Process the full form submission, converting the Lead when present."""
    logger.info(
        "Received form submission",
        company=submission.company_name,
        lead_id=submission.lead_id,
    )
    try:
        outcome = await service.process_submission(submission)
    except AppException as e:
        logger.error("Salesforce integration error", error=e.message, details=e.details)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Unexpected error processing submission")
        return error_response(500, str(e))

    return SubmissionResponse(records=SubmissionRecords.from_outcome(outcome))


@router.post("/query", responses=_ERROR_RESPONSES)
async def run_query(
    body: QueryRequest,
    client: SalesforceClient = Depends(get_salesforce_client),
) -> Any:
    """Run a SOQL query (debugging aid)."""
    if not body.soql:
        return error_response(400, "SOQL query is required")

    try:
        return await client.query(body.soql)
    except AppException as e:
        logger.error("Query error", error=e.message)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Unexpected error running query")
        return error_response(500, str(e))
