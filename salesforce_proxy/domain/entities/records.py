"""Salesforce object names and submission result types."""

from dataclasses import dataclass, field
from typing import Union


class SObjectType:
    """Enum-like class for the Salesforce objects the proxy writes."""

    LEAD = "Lead"
    ACCOUNT = "Account"
    CONTACT = "Contact"
    OPPORTUNITY = "Opportunity"
    PREMISES = "vlocity_cmt__Premises__c"
    SERVICE_POINT = "gtx_sales__Service_Point__c"
    CONTENT_VERSION = "ContentVersion"
    CONTENT_DOCUMENT_LINK = "ContentDocumentLink"


class OpportunityStage:
    QUALIFICATION = "Qualification"
    PROSPECTING = "Prospecting"

    @classmethod
    def for_submission(cls, site_count: int) -> str:
        """Qualification once a portfolio (at least one site) is known."""
        return cls.QUALIFICATION if site_count > 0 else cls.PROSPECTING


@dataclass(frozen=True)
class Converted:
    """convertLead succeeded."""

    account_id: str
    contact_id: str | None
    opportunity_id: str | None


@dataclass(frozen=True)
class ConversionFailed:
    """convertLead failed; the caller falls back to manual resolution."""

    reason: str


ConversionResult = Union[Converted, ConversionFailed]


@dataclass(frozen=True)
class CreatedServicePoint:
    id: str
    mpan: str | None


@dataclass
class SubmissionOutcome:
    """Identifiers resolved for one invoice submission."""

    instance_url: str
    account_id: str
    opportunity_id: str
    stage: str
    contact_id: str | None = None
    sites_created: int = 0
    service_points: list[CreatedServicePoint] = field(default_factory=list)
    content_document_id: str | None = None
    lead_converted: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def service_points_created(self) -> int:
        return len(self.service_points)
