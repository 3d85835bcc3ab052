"""Lead creation from the first form step."""

from salesforce_proxy.core.exceptions import LeadValidationError, SalesforceAPIError
from salesforce_proxy.core.logging import get_logger
from salesforce_proxy.domain.entities.records import SObjectType
from salesforce_proxy.domain.entities.submission import LeadForm
from salesforce_proxy.domain.services.field_mapper import FieldMapper
from salesforce_proxy.infrastructure.salesforce.client import SalesforceClient

logger = get_logger(__name__)


class LeadService:
    """Creates Salesforce Leads."""

    def __init__(self, client: SalesforceClient):
        self._client = client

    async def create_lead(self, form: LeadForm) -> str:
        """Create a Lead and return its Id.

        Raises:
            LeadValidationError: If Salesforce rejects the fields
            SalesforceAPIError: On any other Salesforce failure
        """
        logger.info("Creating lead", company=form.company_name)
        try:
            lead_id = await self._client.create(SObjectType.LEAD, FieldMapper.lead_fields(form))
        except SalesforceAPIError as e:
            if e.response_status == 400 or (e.response_status is None and e.details.get("errors")):
                raise LeadValidationError(
                    f"Failed to create Lead: {e.message}", e.details
                ) from e
            raise

        logger.info("Created lead", lead_id=lead_id)
        return lead_id
