"""Tests for form validation schemas and lead payload normalization."""

import re

import pytest

from leadline.schemas.forms import (
    REQUIRED_MESSAGE,
    ValidationFailure,
    ValidationSuccess,
    format_phone_display,
    is_valid_email,
    is_valid_phone,
    normalize_phone,
    validate_field,
    validate_form,
)
from leadline.schemas.lead import LeadSubmission, generate_lead_id


def _brief_values(**overrides) -> dict:
    values = {
        "siteType": "landing",
        "goal": "leads",
        "timeline": "",
        "budget": "",
        "references": "",
        "name": "Anna",
        "email": "anna@gmail.com",
        "phone": "+1 (555) 123-4567",
        "telegram": "",
        "comment": "",
    }
    values.update(overrides)
    return values


class TestFieldRules:
    @pytest.mark.parametrize("name", ["Anna", "Анна-Мария", "O'Brien", "Jean Luc", "Ґалина"])
    def test_valid_names(self, name):
        result = validate_form("callback", {"name": name, "phone": "+15551234567"})
        assert isinstance(result, ValidationSuccess)
        assert result.data.name == name

    def test_name_too_short(self):
        result = validate_form("callback", {"name": "A", "phone": "+15551234567"})
        assert result.errors == {"name": "Name must be at least 2 characters"}

    def test_name_too_long(self):
        result = validate_form("callback", {"name": "a" * 51, "phone": "+15551234567"})
        assert result.errors["name"] == "Name must not exceed 50 characters"

    def test_name_invalid_characters(self):
        result = validate_form("callback", {"name": "Anna123", "phone": "+15551234567"})
        assert result.errors["name"] == "Name contains invalid characters"

    @pytest.mark.parametrize("phone", ["+1 (555) 123-4567", "5551234567", "+44 20 7946 0958", "123456789012345"])
    def test_valid_phones(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize("phone", ["555 123 456", "(555) 12-34", "1234567890123456", "+1 234 567 890 123 45"])
    def test_phone_digit_count_out_of_range(self, phone):
        result = validate_form("callback", {"phone": phone})
        assert isinstance(result, ValidationFailure)
        assert "phone" in result.errors

    def test_phone_invalid_characters(self):
        result = validate_form("callback", {"phone": "555-123-4567 ext"})
        assert result.errors["phone"] == "Invalid phone format"

    def test_phone_too_short(self):
        result = validate_form("callback", {"phone": "12345"})
        assert result.errors["phone"] == "Phone number is too short"

    @pytest.mark.parametrize("email", ["anna@gmail.com", "a.b+leads@studio.io"])
    def test_valid_emails(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["not-an-email", "anna@", "@gmail.com", "anna gmail.com"])
    def test_invalid_emails(self, email):
        assert not is_valid_email(email)

    def test_email_too_long(self):
        email = "a" * 60 + "@" + "b" * 40 + ".com"
        result = validate_form("quick", {"email": email})
        assert result.errors["email"] == "Email is too long"

    @pytest.mark.parametrize("handle", ["@anna_dev", "anna_dev", "@A1234"])
    def test_valid_telegram(self, handle):
        assert isinstance(validate_form("brief", _brief_values(telegram=handle)), ValidationSuccess)

    @pytest.mark.parametrize("handle", ["@ann", "1anna_dev", "@anna-dev", "@" + "a" * 33])
    def test_invalid_telegram(self, handle):
        result = validate_form("brief", _brief_values(telegram=handle))
        assert result.errors == {"telegram": "Invalid Telegram username"}

    def test_free_text_cap(self):
        result = validate_form("brief", _brief_values(comment="x" * 2001))
        assert "comment" in result.errors
        assert isinstance(validate_form("brief", _brief_values(comment="x" * 2000)), ValidationSuccess)


class TestQuickLeadSchema:
    def test_phone_only(self):
        result = validate_form("quick", {"name": "Anna", "phone": "+15551234567"})
        assert isinstance(result, ValidationSuccess)
        assert result.data.email is None

    def test_email_only(self):
        result = validate_form("quick", {"email": "anna@gmail.com"})
        assert isinstance(result, ValidationSuccess)

    @pytest.mark.parametrize("values", [{}, {"name": "Anna"}, {"phone": "", "email": ""}, {"phone": "  ", "email": ""}])
    def test_no_contact_channel_attaches_error_to_phone(self, values):
        result = validate_form("quick", values)
        assert isinstance(result, ValidationFailure)
        assert list(result.errors) == ["phone"]

    def test_empty_strings_are_absent(self):
        result = validate_form("quick", {"name": "", "phone": "", "email": "anna@gmail.com"})
        assert result.data.name is None
        assert result.data.to_payload() == {"email": "anna@gmail.com"}

    def test_values_are_trimmed(self):
        result = validate_form("quick", {"email": "  anna@gmail.com "})
        assert result.data.email == "anna@gmail.com"


class TestFormSchemas:
    def test_brief_valid(self):
        result = validate_form("brief", _brief_values())
        assert isinstance(result, ValidationSuccess)
        payload = result.data.to_payload()
        assert payload["siteType"] == "landing"
        assert "telegram" not in payload
        assert "timeline" not in payload

    def test_brief_errors_use_ui_field_names(self):
        result = validate_form("brief", _brief_values(siteType="", goal=""))
        assert result.errors == {"siteType": "Select a site type", "goal": "Select the main goal"}

    def test_brief_missing_required_keys(self):
        result = validate_form("brief", {})
        assert result.errors["name"] == REQUIRED_MESSAGE
        assert result.errors["phone"] == REQUIRED_MESSAGE
        assert result.errors["siteType"] == REQUIRED_MESSAGE

    def test_contact_message_min_length(self):
        values = {"name": "Anna", "email": "anna@gmail.com", "message": "Hi"}
        result = validate_form("contact", values)
        assert result.errors == {"message": "Message must be at least 10 characters"}

    def test_contact_phone_optional(self):
        values = {"name": "Anna", "email": "anna@gmail.com", "phone": "", "message": "Need a landing page"}
        assert isinstance(validate_form("contact", values), ValidationSuccess)

    def test_callback_requires_phone(self):
        result = validate_form("callback", {"name": "Anna", "phone": ""})
        assert "phone" in result.errors

    def test_unknown_fields_ignored(self):
        result = validate_form("callback", {"phone": "+15551234567", "utm_source": "google"})
        assert result.data.to_payload() == {"phone": "+15551234567"}

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            validate_form("newsletter", {})


class TestValidateField:
    def test_reports_field_error(self):
        assert validate_field("brief", "email", _brief_values(email="nope")) == "Enter a valid email"

    def test_valid_field_while_other_field_invalid(self):
        assert validate_field("brief", "email", _brief_values(name="A")) is None

    def test_cross_field_rule_on_phone(self):
        assert validate_field("quick", "phone", {"phone": "", "email": ""}) is not None
        assert validate_field("quick", "email", {"phone": "", "email": ""}) is None


class TestPhoneHelpers:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("9001234567", "+79001234567"),
            ("8 (900) 123-45-67", "+79001234567"),
            ("+7 900 123 45 67", "+79001234567"),
            ("+1 555 123 4567", "+15551234567"),
        ],
    )
    def test_normalize_phone(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_format_phone_display(self):
        assert format_phone_display("79001234567") == "+7 (900) 123-45-67"
        assert format_phone_display("9001234567") == "+7 (900) 123-45-67"
        assert format_phone_display("+44 20 7946 0958") == "+44 20 7946 0958"


class TestLeadSubmission:
    def test_lead_id_format(self):
        lead_id = generate_lead_id()
        assert re.fullmatch(r"lead_[0-9a-z]+_[0-9a-z]{6}", lead_id)
        assert generate_lead_id() != lead_id

    def test_immutable(self):
        lead = LeadSubmission(id="lead_1", type="quick", timestamp="2026-10-19T10:00:00Z", phone="+15551234567")
        with pytest.raises(Exception):
            lead.phone = "+15550000000"

    def test_aliases(self):
        lead = LeadSubmission.model_validate(
            {"id": "lead_1", "type": "brief", "timestamp": "2026-10-19T10:00:00Z", "siteType": "expert", "sourcePage": "/brief"}
        )
        assert lead.site_type == "expert"
        assert lead.to_payload()["sourcePage"] == "/brief"

    def test_rejects_unknown_type(self):
        with pytest.raises(Exception):
            LeadSubmission(id="lead_1", type="newsletter", timestamp="2026-10-19T10:00:00Z")

    def test_formatted_timestamp(self):
        lead = LeadSubmission(id="lead_1", type="quick", timestamp="2026-10-19T14:03:05.123Z")
        assert lead.formatted_timestamp() == "19.10.2026, 14:03:05"

    def test_unparseable_timestamp_rendered_raw(self):
        lead = LeadSubmission(id="lead_1", type="quick", timestamp="yesterday")
        assert lead.formatted_timestamp() == "yesterday"

    def test_utm_summary(self):
        lead = LeadSubmission(
            id="lead_1", type="quick", timestamp="t", utm_source="google", utm_campaign="brand"
        )
        assert lead.utm_summary() == "google / brand"
