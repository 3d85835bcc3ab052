"""Pydantic schemas for Salesforce endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from salesforce_proxy.domain.entities.records import SubmissionOutcome


class CamelModel(BaseModel):
    """Serializes with camelCase aliases, as the browser expects."""

    model_config = ConfigDict(populate_by_name=True)


class LeadResponse(CamelModel):
    success: bool = True
    lead_id: str = Field(..., alias="leadId")
    message: str = "Lead created successfully"


class ServicePointRecord(BaseModel):
    id: str
    mpan: Optional[str] = None


class SubmissionRecords(CamelModel):
    """Identifiers of the records resolved for a submission."""

    instance_url: str = Field(..., alias="instanceUrl")
    account_id: str = Field(..., alias="accountId")
    contact_id: Optional[str] = Field(None, alias="contactId")
    opportunity_id: str = Field(..., alias="opportunityId")
    stage: str
    sites_created: int = Field(0, alias="sitesCreated")
    service_points_created: int = Field(0, alias="servicePointsCreated")
    service_points: list[ServicePointRecord] = Field(default_factory=list, alias="servicePoints")
    content_document_id: Optional[str] = Field(None, alias="contentDocumentId")
    lead_converted: bool = Field(False, alias="leadConverted")
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: SubmissionOutcome) -> "SubmissionRecords":
        return cls(
            instance_url=outcome.instance_url,
            account_id=outcome.account_id,
            contact_id=outcome.contact_id,
            opportunity_id=outcome.opportunity_id,
            stage=outcome.stage,
            sites_created=outcome.sites_created,
            service_points_created=outcome.service_points_created,
            service_points=[
                ServicePointRecord(id=sp.id, mpan=sp.mpan) for sp in outcome.service_points
            ],
            content_document_id=outcome.content_document_id,
            lead_converted=outcome.lead_converted,
            warnings=outcome.warnings,
        )


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Application processed successfully"
    records: SubmissionRecords


class QueryRequest(BaseModel):
    soql: Optional[str] = None

