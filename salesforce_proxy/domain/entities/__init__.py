"""Domain entities for the lead-capture workflow."""

from salesforce_proxy.domain.entities.records import (
    ConversionFailed,
    ConversionResult,
    Converted,
    CreatedServicePoint,
    OpportunityStage,
    SObjectType,
    SubmissionOutcome,
)
from salesforce_proxy.domain.entities.submission import (
    InvoiceSubmission,
    LeadForm,
    MeterPoint,
    Site,
    split_contact_name,
)

__all__ = [
    "ConversionFailed",
    "ConversionResult",
    "Converted",
    "CreatedServicePoint",
    "InvoiceSubmission",
    "LeadForm",
    "MeterPoint",
    "OpportunityStage",
    "SObjectType",
    "Site",
    "SubmissionOutcome",
    "split_contact_name",
]
