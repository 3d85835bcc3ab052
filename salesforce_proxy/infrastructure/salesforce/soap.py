"""Typed convertLead request/response and their SOAP (partner API) XML codec.

The REST API has no lead conversion resource, so conversion goes through
the partner SOAP endpoint ``/services/Soap/u/<version>``.
"""

from dataclasses import dataclass, field
from xml.etree import ElementTree as ET

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
PARTNER_NS = "urn:partner.soap.sforce.com"

ET.register_namespace("soapenv", SOAP_ENV_NS)
ET.register_namespace("urn", PARTNER_NS)


@dataclass(frozen=True)
class LeadConvertRequest:
    """One ``leadConverts`` element of a convertLead call."""

    lead_id: str
    converted_status: str
    owner_id: str | None = None
    opportunity_name: str | None = None
    do_not_create_opportunity: bool = False
    account_id: str | None = None
    contact_id: str | None = None
    overwrite_lead_source: bool = False
    send_notification_email: bool = False


@dataclass(frozen=True)
class LeadConvertResult:
    """Parsed ``convertLeadResponse/result``."""

    success: bool
    lead_id: str | None = None
    account_id: str | None = None
    contact_id: str | None = None
    opportunity_id: str | None = None
    errors: list[str] = field(default_factory=list)


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _partner(tag: str) -> str:
    return f"{{{PARTNER_NS}}}{tag}"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element:
        if _local_name(child.tag) == name:
            text = (child.text or "").strip()
            return text or None
    return None


def build_convert_lead_envelope(session_id: str, request: LeadConvertRequest) -> bytes:
    """Serialize a convertLead call into a SOAP envelope.

    Element order follows the partner WSDL ``LeadConvert`` sequence.
    """
    envelope = ET.Element(f"{{{SOAP_ENV_NS}}}Envelope")

    header = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Header")
    session_header = ET.SubElement(header, _partner("SessionHeader"))
    ET.SubElement(session_header, _partner("sessionId")).text = session_id

    body = ET.SubElement(envelope, f"{{{SOAP_ENV_NS}}}Body")
    convert = ET.SubElement(body, _partner("convertLead"))
    lead_converts = ET.SubElement(convert, _partner("leadConverts"))

    fields: list[tuple[str, str | None]] = [
        ("accountId", request.account_id),
        ("contactId", request.contact_id),
        ("convertedStatus", request.converted_status),
        ("doNotCreateOpportunity", _bool(request.do_not_create_opportunity)),
        ("leadId", request.lead_id),
        ("opportunityName", request.opportunity_name),
        ("overwriteLeadSource", _bool(request.overwrite_lead_source)),
        ("ownerId", request.owner_id),
        ("sendNotificationEmail", _bool(request.send_notification_email)),
    ]
    for name, value in fields:
        if value is not None:
            ET.SubElement(lead_converts, _partner(name)).text = value

    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def parse_convert_lead_response(payload: bytes | str) -> LeadConvertResult:
    """Parse a convertLead response envelope.

    A SOAP Fault or a ``<success>false</success>`` result yields
    ``success=False`` with the reported messages in ``errors``.

    Raises:
        ValueError: If the payload is not XML or has no result element
    """
    try:
        root = ET.fromstring(payload)
    except ET.ParseError as e:
        raise ValueError(f"Invalid SOAP response: {e}") from e

    for element in root.iter():
        if _local_name(element.tag) == "Fault":
            message = _child_text(element, "faultstring") or "SOAP fault"
            code = _child_text(element, "faultcode")
            return LeadConvertResult(
                success=False,
                errors=[f"{code}: {message}" if code else message],
            )

    result = next(
        (el for el in root.iter() if _local_name(el.tag) == "result"),
        None,
    )
    if result is None:
        raise ValueError("SOAP response contains no convertLead result")

    errors = []
    for child in result:
        if _local_name(child.tag) == "errors":
            message = _child_text(child, "message") or "Unknown error"
            code = _child_text(child, "statusCode")
            errors.append(f"{code}: {message}" if code else message)

    return LeadConvertResult(
        success=(_child_text(result, "success") or "").lower() == "true",
        lead_id=_child_text(result, "leadId"),
        account_id=_child_text(result, "accountId"),
        contact_id=_child_text(result, "contactId"),
        opportunity_id=_child_text(result, "opportunityId"),
        errors=errors,
    )
