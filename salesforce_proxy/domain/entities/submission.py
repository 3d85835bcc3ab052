"""Form submission models posted by the lead-capture form."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FormModel(BaseModel):
    """Base for camelCase JSON payloads from the browser."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


def split_contact_name(full_name: str | None) -> tuple[str | None, str]:
    """Split a full name into (first, last).

    The first whitespace-delimited token is the first name, the remainder
    the last name. An empty last name becomes "Unknown".
    """
    parts = (full_name or "").split()
    if not parts:
        return None, "Unknown"
    return parts[0], " ".join(parts[1:]) or "Unknown"


class LeadForm(FormModel):
    """Step-1 data used to create a Lead."""

    contact_name: str = Field(..., alias="contactName", min_length=1)
    company_name: str = Field(..., alias="companyName", min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = Field(None, alias="jobTitle")
    website: Optional[str] = None
    user_type: Optional[str] = Field(None, alias="userType")
    tpi_identifier: Optional[str] = Field(None, alias="tpiIdentifier")

    @property
    def is_tpi(self) -> bool:
        """Third-party intermediary (broker) submission."""
        return (self.user_type or "").lower() == "tpi"


class MeterPoint(FormModel):
    """A supply point at a site, identified by its MPAN."""

    mpan: Optional[str] = None
    meter_number: Optional[str] = Field(None, alias="meterNumber")
    fuel_type: Optional[str] = Field(None, alias="fuelType")
    annual_consumption: Optional[float] = Field(None, alias="annualConsumption")
    product_preference: Optional[str] = Field(None, alias="productPreference")
    duration_options: list[str] = Field(default_factory=list, alias="durationOptions")
    contact_name: Optional[str] = Field(None, alias="siteContactName")
    contact_email: Optional[str] = Field(None, alias="siteContactEmail")
    contact_phone: Optional[str] = Field(None, alias="siteContactPhone")

    @field_validator("duration_options", mode="before")
    @classmethod
    def _split_durations(cls, value: Union[str, list, None]) -> list:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(";") if part.strip()]
        return value


class Site(FormModel):
    """A physical location in the prospect's portfolio."""

    name: Optional[str] = None
    address: Optional[str] = None
    meter_points: list[MeterPoint] = Field(default_factory=list, alias="meterPoints")


class InvoiceSubmission(FormModel):
    """Final multi-step submission: business details, parsed invoice, sites."""

    lead_id: Optional[str] = Field(None, alias="leadId")

    # Company
    company_name: str = Field(..., alias="companyName", min_length=1)
    company_number: Optional[str] = Field(None, alias="companyNumber")
    website: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = Field(None, alias="companySize")

    # Contact, either as a full name or as split names
    contact_name: Optional[str] = Field(None, alias="contactName")
    contact_first_name: Optional[str] = Field(None, alias="contactFirstName")
    contact_last_name: Optional[str] = Field(None, alias="contactLastName")
    email: Optional[str] = None
    contact_email: Optional[str] = Field(None, alias="contactEmail")
    phone: Optional[str] = None
    contact_phone: Optional[str] = Field(None, alias="contactPhone")
    job_title: Optional[str] = Field(None, alias="jobTitle")

    # Requirements
    use_case: Optional[str] = Field(None, alias="useCase")
    timeline: Optional[str] = None
    budget: Optional[str] = None
    portfolio_size: Optional[str] = Field(None, alias="portfolioSize")

    # Parsed invoice
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    total_consumption: Optional[float] = Field(None, alias="totalConsumption")
    sites: list[Site] = Field(default_factory=list)

    # Uploaded file
    file_content: Optional[str] = Field(None, alias="fileContent", repr=False)
    file_name: Optional[str] = Field(None, alias="fileName")

    @field_validator("sites", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []

    @property
    def resolved_email(self) -> str | None:
        return self.email or self.contact_email

    @property
    def resolved_phone(self) -> str | None:
        return self.phone or self.contact_phone

    @property
    def has_contact(self) -> bool:
        return bool(
            self.contact_name
            or self.contact_first_name
            or self.contact_last_name
            or self.resolved_email
        )

    def contact_names(self) -> tuple[str | None, str]:
        """(first, last) from contactName, else from the split fields."""
        if self.contact_name:
            return split_contact_name(self.contact_name)
        return self.contact_first_name, self.contact_last_name or "Unknown"

    @property
    def has_file(self) -> bool:
        return bool(self.file_content and self.file_name)
