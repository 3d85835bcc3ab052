"""Unit tests for FieldMapper."""

from datetime import date, datetime, timezone

import pytest

from salesforce_proxy.domain.entities.submission import (
    InvoiceSubmission,
    LeadForm,
    MeterPoint,
    Site,
    split_contact_name,
)
from salesforce_proxy.domain.services.field_mapper import FieldMapper


class TestNameSplitting:
    """Test suite for contact name handling."""

    @pytest.mark.parametrize("full_name,expected", [
        ("Jane Doe", ("Jane", "Doe")),
        ("Mary Ann van Dyke", ("Mary", "Ann van Dyke")),
        ("Prince", ("Prince", "Unknown")),
        ("  Jane   Doe  ", ("Jane", "Doe")),
        ("", (None, "Unknown")),
        (None, (None, "Unknown")),
    ])
    def test_split_contact_name(self, full_name, expected):
        assert split_contact_name(full_name) == expected

    def test_split_fields_used_without_full_name(self):
        submission = InvoiceSubmission(
            companyName="Acme", contactFirstName="Jane", contactLastName="Doe"
        )

        assert submission.contact_names() == ("Jane", "Doe")

    def test_missing_last_name_defaults(self):
        submission = InvoiceSubmission(companyName="Acme", contactFirstName="Jane")

        assert submission.contact_names() == ("Jane", "Unknown")


class TestLeadFields:
    """Test suite for Lead field mapping."""

    def test_lead_fields(self, lead_payload):
        fields = FieldMapper.lead_fields(LeadForm(**lead_payload))

        assert fields["FirstName"] == "Jane"
        assert fields["LastName"] == "Doe"
        assert fields["Company"] == "Acme Ltd"
        assert fields["Email"] == "jane@acme.com"
        assert fields["Title"] == "CFO"
        assert fields["LeadSource"] == "Web"
        assert fields["Status"] == "Open - Not Contacted"
        assert fields["Description"] == "Created via Web Form. TPI: No"

    def test_tpi_lead_description(self, lead_payload):
        lead_payload.update(userType="tpi", tpiIdentifier="BROKER-42")

        fields = FieldMapper.lead_fields(LeadForm(**lead_payload))

        assert fields["Description"] == (
            "Created via Web Form. TPI: Yes\nTPI Identifier: BROKER-42"
        )

    def test_lead_sync_fields_keep_names_when_absent(self):
        submission = InvoiceSubmission(companyName="Acme", industry="gas", companySize="11-50")

        fields = FieldMapper.lead_sync_fields(submission)

        assert fields["Company"] == "Acme"
        assert fields["FirstName"] is None
        assert fields["LastName"] is None
        assert fields["Industry"] == "Gas"
        assert fields["NumberOfEmployees"] == 11


class TestAccountFields:
    """Test suite for Account field mapping."""

    def test_account_fields(self, submission_payload):
        submission = InvoiceSubmission(**submission_payload)
        now = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)

        fields = FieldMapper.account_fields(submission, now=now)

        assert fields["Industry"] == "Electricity"
        assert fields["NumberOfEmployees"] == 51
        assert fields["Description"].startswith(
            "Updated from Web Form on 2026-01-15T10:00:00+00:00"
        )
        assert "Use Case: billing" in fields["Description"]

    def test_account_description_without_requirements(self):
        submission = InvoiceSubmission(companyName="Acme")

        fields = FieldMapper.account_fields(submission)

        assert "Requirements" not in fields["Description"]

    def test_new_account_fields(self, submission_payload):
        submission_payload["companyNumber"] = "01234567"
        submission = InvoiceSubmission(**submission_payload)

        fields = FieldMapper.new_account_fields(submission)

        assert fields["Name"] == "Acme Ltd"
        assert fields["AccountNumber"] == "01234567"
        assert fields["Type"] == "Prospect"
        assert fields["Industry"] == "Electricity"

    @pytest.mark.parametrize("size,expected", [
        ("51-200", 51),
        ("500+", 500),
        ("1,000-5,000", 1000),
        ("small", None),
        (None, None),
    ])
    def test_employee_count(self, size, expected):
        assert FieldMapper.employee_count(size) == expected


class TestOpportunityFields:
    """Test suite for Opportunity field mapping."""

    def test_opportunity_fields(self, submission_payload):
        submission_payload["totalAmount"] = 12500.5
        submission = InvoiceSubmission(**submission_payload)

        fields = FieldMapper.opportunity_fields(
            submission, "001A", "Prospecting", "003A", today=date(2026, 1, 15)
        )

        assert fields["Name"] == "Acme Ltd - billing Opportunity"
        assert fields["AccountId"] == "001A"
        assert fields["ContactId"] == "003A"
        assert fields["StageName"] == "Prospecting"
        assert fields["Amount"] == 12500.5
        assert fields["CloseDate"] == "2026-02-14"

    def test_opportunity_name_defaults_use_case(self):
        submission = InvoiceSubmission(companyName="Acme")

        assert FieldMapper.opportunity_name(submission) == "Acme - Energy Opportunity"


class TestSiteFields:
    """Test suite for Premises and Service Point mapping."""

    def test_premises_fields(self, site_payload):
        fields = FieldMapper.premises_fields(Site(**site_payload))

        assert fields["Name"] == "HQ"
        assert fields["vlocity_cmt__StreetAddress__c"] == "1 Main St"

    def test_service_point_fields(self):
        meter_point = MeterPoint(
            mpan="1200012345678",
            meterNumber="M1",
            fuelType="gas",
            annualConsumption=42000,
            durationOptions="12;24",
            siteContactName="Sam Site",
        )
        submission = InvoiceSubmission(companyName="Acme")

        fields = FieldMapper.service_point_fields(meter_point, submission, "PREM1", "OPP1")

        assert fields["gtx_sales__Market_Identifier__c"] == "1200012345678"
        assert fields["gtx_sales__Service_External_Id__c"] == "M1"
        assert fields["gtx_sales__Service_Type__c"] == "Gas"
        assert fields["gtx_sales__Annual_Consumption__c"] == 42000
        assert fields["gtx_sales__Contract_Duration__c"] == "12;24"
        assert fields["gtx_sales__Site_Contact_Name__c"] == "Sam Site"
        assert fields["gtx_sales__Opportunity__c"] == "OPP1"
        assert fields["vlocity_cmt__PremisesId__c"] == "PREM1"

    def test_consumption_falls_back_to_submission_total(self):
        submission = InvoiceSubmission(companyName="Acme", totalConsumption=9000)

        fields = FieldMapper.service_point_fields(MeterPoint(mpan="1"), submission, "P", "O")

        assert fields["gtx_sales__Annual_Consumption__c"] == 9000
        assert fields["gtx_sales__Contract_Duration__c"] is None

    @pytest.mark.parametrize("fuel_type,expected", [
        ("electricity", "Electricity"),
        ("Gas", "Gas"),
        ("water", "Electricity"),
        (None, "Electricity"),
    ])
    def test_service_type(self, fuel_type, expected):
        assert FieldMapper.service_type(fuel_type) == expected


class TestFileFields:
    """Test suite for file attachment mapping."""

    def test_content_version_fields(self):
        submission = InvoiceSubmission(
            companyName="Acme", fileName="invoice.pdf", fileContent="JVBERi0x"
        )

        fields = FieldMapper.content_version_fields(submission, "001A")

        assert fields == {
            "Title": "invoice.pdf",
            "PathOnClient": "invoice.pdf",
            "VersionData": "JVBERi0x",
            "FirstPublishLocationId": "001A",
        }

    def test_content_link_fields(self):
        fields = FieldMapper.content_link_fields("069A", "006A")

        assert fields["ContentDocumentId"] == "069A"
        assert fields["LinkedEntityId"] == "006A"
        assert fields["ShareType"] == "V"
