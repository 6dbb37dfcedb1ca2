"""Shared fixtures."""

import pytest

from leadline.config import Settings
from leadline.schemas.lead import LeadSubmission


def make_lead(**overrides) -> LeadSubmission:
    data = {
        "id": "lead_mgx1abc_q7w8e9",
        "type": "quick",
        "source": "hero_form",
        "sourcePage": "/",
        "timestamp": "2026-10-19T14:03:05.123Z",
        "name": "Anna",
        "phone": "+15551234567",
    }
    data.update(overrides)
    return LeadSubmission.model_validate(data)


def make_brief(**overrides) -> LeadSubmission:
    data = {
        "type": "brief",
        "source": "brief_form",
        "sourcePage": "/brief",
        "email": "anna@gmail.com",
        "siteType": "ecommerce",
        "goal": "sales",
        "timeline": "normal",
        "budget": "1000-2500",
    }
    data.update(overrides)
    return make_lead(**data)


@pytest.fixture
def lead() -> LeadSubmission:
    return make_lead()


@pytest.fixture
def brief() -> LeadSubmission:
    return make_brief()


@pytest.fixture
def smtp_settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_host="smtp.example.org",
        smtp_port=587,
        smtp_user="bot@nakoagency.com",
        smtp_password="secret",
        notification_email="leads@nakoagency.com",
        from_email="NAKO Agency <hello@nakoagency.com>",
        telegram_bot_token="",
        telegram_chat_id="",
    )


@pytest.fixture
def telegram_settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_user="",
        smtp_password="",
        telegram_bot_token="123456:ABC-token",
        telegram_chat_id="-1001234567890",
    )


@pytest.fixture
def bare_settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_user="",
        smtp_password="",
        telegram_bot_token="",
        telegram_chat_id="",
        log_leads_to_file=False,
    )
