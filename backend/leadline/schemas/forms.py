"""Form validation schemas shared by all lead forms.

Every form kind (quick, contact, brief, callback) is a pydantic model built
from the same field rules. ``validate_form`` never raises for bad input: it
returns either a ``ValidationSuccess`` holding the parsed record or a
``ValidationFailure`` holding one human-readable message per field, keyed by
the field name the UI uses (``siteType``, not ``site_type``).
"""

import re
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, ClassVar, Literal, Optional, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

FormKind = Literal["quick", "contact", "brief", "callback"]

NAME_PATTERN = re.compile(r"^[a-zA-Zа-яА-ЯёЁіІїЇєЄґҐ\s\-']+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")
TELEGRAM_PATTERN = re.compile(r"^@?[a-zA-Z][a-zA-Z0-9_]{4,31}$")
NON_DIGITS = re.compile(r"\D")

MESSAGE_MAX_LENGTH = 2000
CONTACT_MESSAGE_MIN_LENGTH = 10
REQUIRED_MESSAGE = "This field is required"


# --- Field rules ---

def check_name(value: str) -> str:
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    if len(value) > 50:
        raise ValueError("Name must not exceed 50 characters")
    if not NAME_PATTERN.match(value):
        raise ValueError("Name contains invalid characters")
    return value


def check_phone(value: str) -> str:
    if len(value) < 10:
        raise ValueError("Phone number is too short")
    if len(value) > 20:
        raise ValueError("Phone number is too long")
    if not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone format")
    digits = NON_DIGITS.sub("", value)
    if not 10 <= len(digits) <= 15:
        raise ValueError("Enter a valid phone number")
    return value


def check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Enter a valid email")
    if len(value) < 5:
        raise ValueError("Email is too short")
    if len(value) > 100:
        raise ValueError("Email is too long")
    return value


def check_telegram(value: str) -> str:
    if not TELEGRAM_PATTERN.match(value):
        raise ValueError("Invalid Telegram username")
    return value


def check_message(value: str) -> str:
    if len(value) > MESSAGE_MAX_LENGTH:
        raise ValueError(f"Message is too long (maximum {MESSAGE_MAX_LENGTH} characters)")
    return value


def check_contact_message(value: str) -> str:
    if len(value) < CONTACT_MESSAGE_MIN_LENGTH:
        raise ValueError(f"Message must be at least {CONTACT_MESSAGE_MIN_LENGTH} characters")
    return check_message(value)


def _required(message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not value:
            raise ValueError(message)
        return value
    return check


def _optional(check: Callable[[str], str]) -> Callable[[Optional[str]], Optional[str]]:
    def wrapper(value: Optional[str]) -> Optional[str]:
        return value if value is None else check(value)
    return wrapper


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def _blank_to_none(value: Any) -> Any:
    value = _clean(value)
    return None if value == "" else value


Name = Annotated[str, BeforeValidator(_clean), AfterValidator(check_name)]
Phone = Annotated[str, BeforeValidator(_clean), AfterValidator(check_phone)]
Email = Annotated[str, BeforeValidator(_clean), AfterValidator(check_email)]

OptionalName = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional(check_name))]
OptionalPhone = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional(check_phone))]
OptionalEmail = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional(check_email))]
OptionalTelegram = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional(check_telegram))]
OptionalMessage = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_optional(check_message))]
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


# --- Form schemas ---

class FormSchema(BaseModel):
    """Base for form schemas. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    # Field that receives errors raised by cross-field rules
    cross_field_error_field: ClassVar[str] = "__root__"

    def to_payload(self) -> dict:
        """Form values keyed by UI field names, absent values omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class QuickLeadForm(FormSchema):
    """Short lead form: any one contact channel is enough."""

    cross_field_error_field: ClassVar[str] = "phone"

    name: OptionalName = None
    phone: OptionalPhone = None
    email: OptionalEmail = None
    message: OptionalMessage = None

    @model_validator(mode="after")
    def require_contact_channel(self) -> "QuickLeadForm":
        if not (self.phone or self.email):
            raise ValueError("Provide a phone number or email so we can reach you")
        return self


class ContactForm(FormSchema):
    name: Name
    email: Email
    phone: OptionalPhone = None
    message: Annotated[str, BeforeValidator(_clean), AfterValidator(check_contact_message)]


class BriefForm(FormSchema):
    # Project
    site_type: Annotated[str, BeforeValidator(_clean), AfterValidator(_required("Select a site type"))] = Field(
        alias="siteType"
    )
    goal: Annotated[str, BeforeValidator(_clean), AfterValidator(_required("Select the main goal"))]
    timeline: OptionalText = None
    budget: OptionalText = None
    references: OptionalMessage = None

    # Contacts
    name: Name
    email: Email
    phone: Phone
    telegram: OptionalTelegram = None

    # Additional
    comment: OptionalMessage = None


class CallbackForm(FormSchema):
    name: OptionalName = None
    phone: Phone


FORM_SCHEMAS: dict[str, type[FormSchema]] = {
    "quick": QuickLeadForm,
    "contact": ContactForm,
    "brief": BriefForm,
    "callback": CallbackForm,
}

# Lead type each form submits as; the contact page posts quick leads
FORM_LEAD_TYPES: dict[str, str] = {
    "quick": "quick",
    "contact": "quick",
    "brief": "brief",
    "callback": "callback",
}


# --- Results ---

@dataclass(frozen=True)
class ValidationSuccess:
    data: FormSchema
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ValidationFailure:
    errors: dict[str, str]
    ok: bool = field(default=False, init=False)


ValidationResult = Union[ValidationSuccess, ValidationFailure]


def _error_message(error: dict) -> str:
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    if error["type"] in ("missing", "string_type"):
        return REQUIRED_MESSAGE
    return error["msg"]


def collect_errors(exc: ValidationError, schema: type[FormSchema]) -> dict[str, str]:
    """Flatten a pydantic error into {field: first message}."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error["loc"]
        name = str(loc[0]) if loc else schema.cross_field_error_field
        errors.setdefault(name, _error_message(error))
    return errors


def get_schema(kind: str) -> type[FormSchema]:
    try:
        return FORM_SCHEMAS[kind]
    except KeyError:
        raise ValueError(f"Unknown form kind: {kind!r}")


def validate_form(kind: str, values: dict[str, Any]) -> ValidationResult:
    """Validate raw form values for the given form kind."""
    schema = get_schema(kind)
    try:
        data = schema.model_validate(values)
    except ValidationError as exc:
        return ValidationFailure(errors=collect_errors(exc, schema))
    return ValidationSuccess(data=data)


def validate_field(kind: str, name: str, values: dict[str, Any]) -> Optional[str]:
    """Error message for a single field, or None when that field is valid.

    The whole form is validated so cross-field rules attached to ``name``
    are reported as well.
    """
    result = validate_form(kind, values)
    if isinstance(result, ValidationFailure):
        return result.errors.get(name)
    return None


# --- Helpers ---

def is_valid_phone(phone: str) -> bool:
    try:
        check_phone(phone)
    except ValueError:
        return False
    return True


def is_valid_email(email: str) -> bool:
    try:
        check_email(email)
    except ValueError:
        return False
    return True


def normalize_phone(phone: str) -> str:
    """Normalize to +<digits>; bare 10-digit and 8-prefixed numbers are Russian."""
    digits = NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+7{digits}"
    if len(digits) == 11 and digits.startswith("7"):
        return f"+{digits}"
    if len(digits) == 11 and digits.startswith("8"):
        return f"+7{digits[1:]}"
    return f"+{digits}"


def format_phone_display(phone: str) -> str:
    digits = NON_DIGITS.sub("", phone)
    if len(digits) == 11 and digits.startswith("7"):
        return f"+7 ({digits[1:4]}) {digits[4:7]}-{digits[7:9]}-{digits[9:]}"
    if len(digits) == 10:
        return f"+7 ({digits[0:3]}) {digits[3:6]}-{digits[6:8]}-{digits[8:]}"
    return phone
