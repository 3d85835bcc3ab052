"""Domain services."""

from salesforce_proxy.domain.services.conversion_service import ConversionService
from salesforce_proxy.domain.services.field_mapper import FieldMapper
from salesforce_proxy.domain.services.lead_service import LeadService
from salesforce_proxy.domain.services.steps import STEP_POLICIES, StepPolicy, StepRunner

__all__ = [
    "ConversionService",
    "FieldMapper",
    "LeadService",
    "STEP_POLICIES",
    "StepPolicy",
    "StepRunner",
]
