"""
Lead Validation
Sanitizes raw lead payloads (webhooks, bulk imports) before ingestion
"""
import logging
import re
from datetime import datetime
from typing import Any, Mapping, Optional

from leadflow.domain.models.lead import LeadDraft

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGITS = re.compile(r"\D")
MIN_PHONE_DIGITS = 10
DEFAULT_SOURCE = "API_IMPORT"


class LeadValidationError(ValueError):
    """Raised when a raw lead payload cannot be ingested"""
    pass


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_date(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise LeadValidationError(f"Invalid {field_name}: {value}")


def validate_and_sanitize(raw: Mapping[str, Any]) -> LeadDraft:
    """
    Validate and normalize a raw lead payload.

    Rules:
    1. first_name, date_reponse and at least one of email/phone are required
    2. email is trimmed, lower-cased and must look like an address
    3. phone keeps digits only and needs at least 10 of them
    4. source is upper-cased (default API_IMPORT)
    5. date_consentement, when present, must be a valid date

    Args:
        raw: Payload using the public API field names

    Returns:
        LeadDraft ready for scoring and injection

    Raises:
        LeadValidationError: On the first rule violated
    """
    first_name = _clean(raw.get("first_name"))
    if not first_name:
        raise LeadValidationError("First name is required")

    email = _clean(raw.get("email"))
    phone = _clean(raw.get("phone"))
    if not email and not phone:
        raise LeadValidationError("Either email or phone is required")

    if raw.get("date_reponse") in (None, ""):
        raise LeadValidationError("Response date is required")

    if email:
        email = email.lower()
        if not EMAIL_PATTERN.match(email):
            raise LeadValidationError(f"Invalid email format: {email}")

    if phone:
        digits = NON_DIGITS.sub("", phone)
        if len(digits) < MIN_PHONE_DIGITS:
            raise LeadValidationError(f"Invalid phone format: {raw.get('phone')}")
        phone = digits

    response_date = _parse_date(raw["date_reponse"], "response date")

    consent_date = None
    if raw.get("date_consentement"):
        consent_date = _parse_date(raw["date_consentement"], "consent date")

    source = (_clean(raw.get("source")) or DEFAULT_SOURCE).upper()

    draft = LeadDraft(
        first_name=first_name,
        last_name=_clean(raw.get("last_name")) or "",
        email=email,
        phone=phone,
        source=source,
        job_status=_clean(raw.get("job_status")),
        exam_id=_clean(raw.get("exam_id")),
        consent_date=consent_date,
        response_date=response_date,
    )
    logger.debug(
        f"Validated lead payload for {first_name} (source {source})",
        extra={"source": source}
    )
    return draft
