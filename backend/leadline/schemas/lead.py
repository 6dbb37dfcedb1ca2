"""Lead submission schemas."""

import secrets
import time
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

LeadType = Literal["quick", "brief", "callback"]

LEAD_TYPES: tuple[str, ...] = ("quick", "brief", "callback")
UTM_FIELDS: tuple[str, ...] = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_lead_id() -> str:
    """Lead id of the form lead_<base36 ms timestamp>_<6 random base36 chars>."""
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"lead_{timestamp}_{random_part}"


class LeadAttribution(BaseModel):
    """Attribution sent alongside form values."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source: str = Field("unknown", max_length=100)
    source_page: str = Field("unknown", alias="sourcePage", max_length=500)
    timestamp: Optional[str] = Field(None, max_length=64)
    utm_source: Optional[str] = Field(None, max_length=255)
    utm_medium: Optional[str] = Field(None, max_length=255)
    utm_campaign: Optional[str] = Field(None, max_length=255)
    utm_term: Optional[str] = Field(None, max_length=255)
    utm_content: Optional[str] = Field(None, max_length=255)


class LeadSubmission(BaseModel):
    """Canonical, immutable lead record handed to the notification channels.

    Fields are already validated; renderers display them as-is.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    type: LeadType
    source: str = "unknown"
    source_page: str = Field("unknown", alias="sourcePage")
    timestamp: str

    # Contacts
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    telegram: Optional[str] = None

    # Quick / contact
    message: Optional[str] = None

    # Brief
    site_type: Optional[str] = Field(None, alias="siteType")
    goal: Optional[str] = None
    timeline: Optional[str] = None
    budget: Optional[str] = None
    references: Optional[str] = None
    comment: Optional[str] = None

    # UTM
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None

    @property
    def contact_label(self) -> Optional[str]:
        return self.name or self.phone or self.email

    def utm_summary(self) -> str:
        """'source / medium / campaign' with absent parts skipped."""
        parts = [self.utm_source, self.utm_medium, self.utm_campaign]
        return " / ".join(p for p in parts if p)

    def formatted_timestamp(self) -> str:
        """Timestamp as DD.MM.YYYY, HH:MM:SS; unparseable values are returned raw."""
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            return self.timestamp
        return parsed.strftime("%d.%m.%Y, %H:%M:%S")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class FieldError(BaseModel):
    field: str
    message: str


class LeadResponse(BaseModel):
    """Response of the lead endpoint."""
    success: bool
    message: str
    leadId: Optional[str] = None
    errors: Optional[list[FieldError]] = None
