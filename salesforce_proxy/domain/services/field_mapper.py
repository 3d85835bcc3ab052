"""Field mapper for transforming form submissions to Salesforce record fields."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

from salesforce_proxy.domain.entities.submission import (
    InvoiceSubmission,
    LeadForm,
    MeterPoint,
    Site,
    split_contact_name,
)

# Fuel type values accepted by gtx_sales__Service_Type__c
SERVICE_TYPES: dict[str, str] = {
    "electricity": "Electricity",
    "electric": "Electricity",
    "power": "Electricity",
    "gas": "Gas",
    "natural gas": "Gas",
}
DEFAULT_SERVICE_TYPE = "Electricity"

OPPORTUNITY_CLOSE_DAYS = 30


class FieldMapper:
    """Builds Salesforce field dictionaries from form data.

    None values are left in place; the client drops them before sending.
    """

    @staticmethod
    def industry_label(industry: str | None) -> str | None:
        """Form values are lowercase picklist keys ("electricity" -> "Electricity")."""
        if not industry:
            return None
        return industry[0].upper() + industry[1:]

    @staticmethod
    def employee_count(company_size: str | None) -> int | None:
        """Lower bound of an employee band such as "51-200" or "500+"."""
        if not company_size:
            return None
        match = re.match(r"\s*(\d+)", company_size.replace(",", ""))
        return int(match.group(1)) if match else None

    @staticmethod
    def service_type(fuel_type: str | None) -> str:
        if not fuel_type:
            return DEFAULT_SERVICE_TYPE
        return SERVICE_TYPES.get(fuel_type.strip().lower(), DEFAULT_SERVICE_TYPE)

    @staticmethod
    def opportunity_name(submission: InvoiceSubmission) -> str:
        return f"{submission.company_name} - {submission.use_case or 'Energy'} Opportunity"

    @staticmethod
    def close_date(today: date | None = None) -> str:
        return ((today or date.today()) + timedelta(days=OPPORTUNITY_CLOSE_DAYS)).isoformat()

    @staticmethod
    def lead_fields(form: LeadForm) -> dict[str, Any]:
        """Fields for a new Lead from step-1 data."""
        first_name, last_name = split_contact_name(form.contact_name)
        description = f"Created via Web Form. TPI: {'Yes' if form.is_tpi else 'No'}"
        if form.tpi_identifier:
            description += f"\nTPI Identifier: {form.tpi_identifier}"

        return {
            "FirstName": first_name,
            "LastName": last_name,
            "Company": form.company_name,
            "Email": form.email,
            "Phone": form.phone,
            "Title": form.job_title,
            "Website": form.website,
            "LeadSource": "Web",
            "Status": "Open - Not Contacted",
            "Description": description,
        }

    @classmethod
    def lead_sync_fields(cls, submission: InvoiceSubmission) -> dict[str, Any]:
        """Latest form state written onto the Lead right before conversion."""
        first_name, last_name = submission.contact_names()
        has_name = bool(submission.contact_name or submission.contact_last_name)
        return {
            "Company": submission.company_name,
            "FirstName": first_name if has_name else None,
            "LastName": last_name if has_name else None,
            "Email": submission.resolved_email,
            "Phone": submission.resolved_phone,
            "Title": submission.job_title,
            "Website": submission.website,
            "Industry": cls.industry_label(submission.industry),
            "NumberOfEmployees": cls.employee_count(submission.company_size),
        }

    @classmethod
    def account_fields(
        cls,
        submission: InvoiceSubmission,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Fields applied to both new and existing Accounts."""
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        description = f"Updated from Web Form on {timestamp}"
        if submission.use_case or submission.timeline or submission.budget:
            description += (
                "\n\nRequirements:"
                f"\nUse Case: {submission.use_case or ''}"
                f"\nTimeline: {submission.timeline or ''}"
                f"\nBudget: {submission.budget or ''}"
            )

        return {
            "Industry": cls.industry_label(submission.industry),
            "NumberOfEmployees": cls.employee_count(submission.company_size),
            "Website": submission.website,
            "Description": description,
        }

    @classmethod
    def new_account_fields(cls, submission: InvoiceSubmission) -> dict[str, Any]:
        return {
            "Name": submission.company_name,
            "AccountNumber": submission.company_number,
            "Type": "Prospect",
            **cls.account_fields(submission),
        }

    @staticmethod
    def contact_fields(submission: InvoiceSubmission, account_id: str) -> dict[str, Any]:
        first_name, last_name = submission.contact_names()
        phone = submission.resolved_phone
        return {
            "AccountId": account_id,
            "FirstName": first_name,
            "LastName": last_name,
            "Email": submission.resolved_email,
            "Phone": phone,
            "MobilePhone": phone,
            "Title": submission.job_title,
        }

    @classmethod
    def opportunity_fields(
        cls,
        submission: InvoiceSubmission,
        account_id: str,
        stage: str,
        contact_id: str | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        """Fields for creating, or updating a converted, Opportunity."""
        description = (
            "Generated from Web Form."
            f"\nUse Case: {submission.use_case or ''}"
            f"\nTimeline: {submission.timeline or ''}"
            f"\nBudget: {submission.budget or ''}"
            f"\nPortfolio Size: {submission.portfolio_size or ''}"
        )
        return {
            "Name": cls.opportunity_name(submission),
            "AccountId": account_id,
            "ContactId": contact_id,
            "StageName": stage,
            "Amount": submission.total_amount,
            "CloseDate": cls.close_date(today),
            "Description": description,
        }

    @staticmethod
    def premises_fields(site: Site) -> dict[str, Any]:
        return {
            "Name": site.name or "Site",
            "vlocity_cmt__StreetAddress__c": site.address or None,
            "vlocity_cmt__Status__c": "Active",
            "vlocity_cmt__PremisesType__c": "Commercial",
        }

    @classmethod
    def service_point_fields(
        cls,
        meter_point: MeterPoint,
        submission: InvoiceSubmission,
        premises_id: str,
        opportunity_id: str,
    ) -> dict[str, Any]:
        consumption = meter_point.annual_consumption
        if consumption is None:
            consumption = submission.total_consumption

        return {
            "gtx_sales__Market_Identifier__c": meter_point.mpan or None,
            "gtx_sales__Service_External_Id__c": meter_point.meter_number or None,
            "gtx_sales__Service_Type__c": cls.service_type(meter_point.fuel_type),
            "gtx_sales__Annual_Consumption__c": consumption,
            "gtx_sales__Product_Preference__c": meter_point.product_preference,
            "gtx_sales__Contract_Duration__c": ";".join(meter_point.duration_options) or None,
            "gtx_sales__Site_Contact_Name__c": meter_point.contact_name,
            "gtx_sales__Site_Contact_Email__c": meter_point.contact_email,
            "gtx_sales__Site_Contact_Phone__c": meter_point.contact_phone,
            "gtx_sales__Opportunity__c": opportunity_id,
            "vlocity_cmt__PremisesId__c": premises_id,
        }

    @staticmethod
    def content_version_fields(submission: InvoiceSubmission, account_id: str) -> dict[str, Any]:
        return {
            "Title": submission.file_name,
            "PathOnClient": submission.file_name,
            "VersionData": submission.file_content,
            "FirstPublishLocationId": account_id,
        }

    @staticmethod
    def content_link_fields(content_document_id: str, linked_entity_id: str) -> dict[str, Any]:
        return {
            "ContentDocumentId": content_document_id,
            "LinkedEntityId": linked_entity_id,
            "ShareType": "V",
            "Visibility": "AllUsers",
        }
