"""Lead conversion orchestration for completed form submissions."""

from salesforce_proxy.core.exceptions import SalesforceAPIError
from salesforce_proxy.core.logging import get_logger
from salesforce_proxy.domain.entities.records import (
    ConversionFailed,
    ConversionResult,
    Converted,
    CreatedServicePoint,
    OpportunityStage,
    SObjectType,
    SubmissionOutcome,
)
from salesforce_proxy.domain.entities.submission import InvoiceSubmission, Site
from salesforce_proxy.domain.services.field_mapper import FieldMapper
from salesforce_proxy.domain.services.steps import StepRunner
from salesforce_proxy.infrastructure.salesforce.client import (
    DEFAULT_CONVERTED_STATUS,
    SalesforceClient,
)
from salesforce_proxy.infrastructure.salesforce.soap import LeadConvertRequest

logger = get_logger(__name__)


class ConversionService:
    """Turns a completed submission into Account/Contact/Opportunity/Site records.

    With a Lead id the Lead is converted through convertLead; without one,
    or when conversion fails, Account and Contact are found or created
    directly. Records created before a fatal failure are left in place.
    """

    def __init__(self, client: SalesforceClient):
        self._client = client

    async def process_submission(self, submission: InvoiceSubmission) -> SubmissionOutcome:
        """Run the full submission workflow.

        Raises:
            StepFailedError: If Account, Contact or Opportunity creation fails
            ConfigurationError, AuthError: If no Salesforce session can be had
        """
        runner = StepRunner()
        session = await self._client.get_session()
        logger.info(
            "Processing submission",
            company=submission.company_name,
            lead_id=submission.lead_id,
            sites=len(submission.sites),
        )

        account_id: str | None = None
        contact_id: str | None = None
        opportunity_id: str | None = None
        lead_converted = False

        if submission.lead_id:
            result = await self._convert_lead(runner, submission, session.owner_id)
            if isinstance(result, Converted):
                account_id = result.account_id
                contact_id = result.contact_id
                opportunity_id = result.opportunity_id
                lead_converted = True
                logger.info(
                    "Lead converted",
                    lead_id=submission.lead_id,
                    account_id=account_id,
                    contact_id=contact_id,
                    opportunity_id=opportunity_id,
                )
            else:
                logger.warning(
                    "Lead conversion failed, resolving records manually",
                    lead_id=submission.lead_id,
                    reason=result.reason,
                )

        if account_id is None:
            account_id = await runner.run("account.resolve", self._resolve_account, submission)
        if contact_id is None and submission.has_contact:
            contact_id = await runner.run(
                "contact.resolve", self._resolve_contact, submission, account_id
            )

        await runner.run(
            "account.sync",
            self._client.update,
            SObjectType.ACCOUNT,
            account_id,
            FieldMapper.account_fields(submission),
        )

        stage = OpportunityStage.for_submission(len(submission.sites))
        opportunity_fields = FieldMapper.opportunity_fields(
            submission, account_id, stage, contact_id
        )
        if opportunity_id:
            opportunity_fields.pop("Name")
            await runner.run(
                "opportunity.update",
                self._client.update,
                SObjectType.OPPORTUNITY,
                opportunity_id,
                opportunity_fields,
            )
        else:
            opportunity_id = await runner.run(
                "opportunity.create",
                self._client.create,
                SObjectType.OPPORTUNITY,
                opportunity_fields,
            )

        sites_created = 0
        service_points: list[CreatedServicePoint] = []
        for site in submission.sites:
            created = await self._create_site(runner, submission, site, opportunity_id)
            if created is not None:
                sites_created += 1
                service_points.extend(created)

        content_document_id = None
        if submission.has_file:
            content_document_id = await self._attach_file(
                runner, submission, account_id, opportunity_id
            )

        outcome = SubmissionOutcome(
            instance_url=session.instance_url,
            account_id=account_id,
            contact_id=contact_id,
            opportunity_id=opportunity_id,
            stage=stage,
            sites_created=sites_created,
            service_points=service_points,
            content_document_id=content_document_id,
            lead_converted=lead_converted,
            warnings=runner.failed_steps,
        )
        logger.info(
            "Submission processed",
            account_id=account_id,
            opportunity_id=opportunity_id,
            stage=stage,
            sites_created=sites_created,
            service_points_created=outcome.service_points_created,
            warnings=outcome.warnings,
        )
        return outcome

    async def _convert_lead(
        self,
        runner: StepRunner,
        submission: InvoiceSubmission,
        owner_id: str | None,
    ) -> ConversionResult:
        lead_id = submission.lead_id

        # The Lead may already be converted; the update then fails harmlessly.
        await runner.run(
            "lead.sync",
            self._client.update,
            SObjectType.LEAD,
            lead_id,
            FieldMapper.lead_sync_fields(submission),
        )

        converted_status = (
            await runner.run("lead.status", self._client.get_converted_lead_status)
            or DEFAULT_CONVERTED_STATUS
        )

        request = LeadConvertRequest(
            lead_id=lead_id,
            converted_status=converted_status,
            owner_id=owner_id,
            opportunity_name=FieldMapper.opportunity_name(submission),
            do_not_create_opportunity=False,
        )
        result = await runner.run("lead.convert", self._client.convert_lead, request)
        if result is None:
            return ConversionFailed(reason=runner.last_error or "convertLead call failed")
        if not result.success or not result.account_id:
            return ConversionFailed(reason="; ".join(result.errors) or "convertLead reported failure")

        return Converted(
            account_id=result.account_id,
            contact_id=result.contact_id,
            opportunity_id=result.opportunity_id,
        )

    async def _resolve_account(self, submission: InvoiceSubmission) -> str:
        """Find an Account by exact name or create it."""
        account_id = await self._client.find_record_id(
            SObjectType.ACCOUNT, "Name", submission.company_name
        )
        if account_id:
            logger.info("Found existing account", account_id=account_id)
            return account_id

        logger.info("Creating new account", company=submission.company_name)
        return await self._client.create(
            SObjectType.ACCOUNT, FieldMapper.new_account_fields(submission)
        )

    async def _resolve_contact(self, submission: InvoiceSubmission, account_id: str) -> str:
        """Find a Contact by exact email or create it under the Account."""
        email = submission.resolved_email
        if email:
            contact_id = await self._client.find_record_id(SObjectType.CONTACT, "Email", email)
            if contact_id:
                logger.info("Found existing contact", contact_id=contact_id)
                return contact_id

        return await self._client.create(
            SObjectType.CONTACT, FieldMapper.contact_fields(submission, account_id)
        )

    async def _create_site(
        self,
        runner: StepRunner,
        submission: InvoiceSubmission,
        site: Site,
        opportunity_id: str,
    ) -> list[CreatedServicePoint] | None:
        """Create a Premises and its Service Points.

        Returns None when the Premises could not be created; its meter
        points are then skipped.
        """
        premises_id = await runner.run(
            "premises.create",
            self._client.create,
            SObjectType.PREMISES,
            FieldMapper.premises_fields(site),
        )
        if premises_id is None:
            return None

        created: list[CreatedServicePoint] = []
        for meter_point in site.meter_points:
            service_point_id = await runner.run(
                "service_point.create",
                self._client.create,
                SObjectType.SERVICE_POINT,
                FieldMapper.service_point_fields(
                    meter_point, submission, premises_id, opportunity_id
                ),
            )
            if service_point_id is not None:
                created.append(CreatedServicePoint(id=service_point_id, mpan=meter_point.mpan))
        return created

    async def _attach_file(
        self,
        runner: StepRunner,
        submission: InvoiceSubmission,
        account_id: str,
        opportunity_id: str,
    ) -> str | None:
        """Upload the file to the Account and share it with the Opportunity."""
        version_id = await runner.run(
            "file.upload",
            self._client.create,
            SObjectType.CONTENT_VERSION,
            FieldMapper.content_version_fields(submission, account_id),
        )
        if version_id is None:
            return None

        document_id = await runner.run(
            "file.link", self._link_file, version_id, opportunity_id
        )
        return document_id

    async def _link_file(self, version_id: str, opportunity_id: str) -> str:
        document_id = await self._client.get_content_document_id(version_id)
        if not document_id:
            raise SalesforceAPIError(
                f"No ContentDocumentId for uploaded file {version_id}",
                {"content_version_id": version_id},
            )

        await self._client.create(
            SObjectType.CONTENT_DOCUMENT_LINK,
            FieldMapper.content_link_fields(document_id, opportunity_id),
        )
        return document_id
