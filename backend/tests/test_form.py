"""Tests for the lead form state machine."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from leadline.client.analytics import FormAnalytics
from leadline.client.drafts import DraftStore
from leadline.client.form import FormState, LeadForm
from leadline.client.storage import MemoryStorage
from leadline.client.submission import GENERIC_ERROR_MESSAGE, SubmissionFailure, SubmissionSuccess


def _form(kind="quick", submitter=None, **kwargs):
    if submitter is None:
        submitter = MagicMock()
        submitter.submit = AsyncMock(return_value=SubmissionSuccess(lead_id="lead_abc_123456"))
    return LeadForm(kind, submitter, source="hero_form", source_page="/", **kwargs)


def _fill(form, **values):
    for name, value in values.items():
        form.change(name, value)


class GatedSubmitter:
    """Holds every submission until ``release`` is set."""

    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def submit(self, lead_type, data, source, source_page=None):
        self.calls += 1
        await self.release.wait()
        return SubmissionSuccess(lead_id="lead_abc_123456")


class TestSubmit:
    @pytest.mark.asyncio
    async def test_valid_submit_succeeds(self):
        form = _form()
        _fill(form, name="Anna", phone="+15551234567")

        assert await form.submit() is FormState.SUCCESS
        assert form.lead_id == "lead_abc_123456"
        assert form.disabled
        form._submitter.submit.assert_awaited_once_with(
            "quick", {"name": "Anna", "phone": "+15551234567"}, "hero_form", "/"
        )

    @pytest.mark.asyncio
    async def test_invalid_submit_makes_no_request(self):
        form = _form()
        _fill(form, name="Anna")

        assert await form.submit() is FormState.IDLE
        assert "phone" in form.errors
        form._submitter.submit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_then_retry(self):
        submitter = MagicMock()
        submitter.submit = AsyncMock(side_effect=[SubmissionFailure(status_code=500), SubmissionSuccess()])
        form = _form(submitter=submitter)
        _fill(form, email="anna@gmail.com")

        assert await form.submit() is FormState.ERROR
        assert form.error_message
        assert not form.disabled

        form.retry()
        assert form.state is FormState.IDLE
        assert form.values == {"email": "anna@gmail.com"}
        assert await form.submit() is FormState.SUCCESS

    @pytest.mark.asyncio
    async def test_submit_outside_idle_is_ignored(self):
        submitter = MagicMock()
        submitter.submit = AsyncMock(return_value=SubmissionFailure())
        form = _form(submitter=submitter)
        _fill(form, email="anna@gmail.com")

        await form.submit()
        assert await form.submit() is FormState.ERROR
        assert submitter.submit.await_count == 1

    @pytest.mark.asyncio
    async def test_single_submission_in_flight(self):
        submitter = GatedSubmitter()
        form = _form(submitter=submitter)
        _fill(form, phone="+15551234567")

        first = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        assert form.state is FormState.LOADING
        assert form.disabled
        assert await form.submit() is FormState.LOADING

        submitter.release.set()
        assert await first is FormState.SUCCESS
        assert submitter.calls == 1

    @pytest.mark.asyncio
    async def test_submitter_exception_moves_to_error(self):
        submitter = MagicMock()
        submitter.submit = AsyncMock(side_effect=[RuntimeError("client closed"), SubmissionSuccess()])
        form = _form(submitter=submitter)
        _fill(form, phone="+15551234567")

        assert await form.submit() is FormState.ERROR
        assert form.error_message == GENERIC_ERROR_MESSAGE
        assert not form.disabled

        form.retry()
        assert await form.submit() is FormState.SUCCESS

    @pytest.mark.asyncio
    async def test_on_success_receives_validated_data(self):
        received = []
        form = _form(on_success=received.append)
        _fill(form, name=" Anna ", phone="+15551234567")
        await form.submit()
        assert received[0].name == "Anna"

    @pytest.mark.asyncio
    async def test_contact_form_submits_as_quick_lead(self):
        form = _form(kind="contact")
        _fill(form, name="Anna", email="anna@gmail.com", message="Need a new landing page")
        await form.submit()
        assert form._submitter.submit.await_args.args[0] == "quick"


class TestFieldEvents:
    def test_blur_validates_field(self):
        form = _form(kind="callback")
        form.change("phone", "123")
        assert form.errors == {}
        form.blur("phone")
        assert form.errors["phone"] == "Phone number is too short"

    def test_change_revalidates_field_with_error(self):
        form = _form(kind="callback")
        form.change("phone", "123")
        form.blur("phone")
        form.change("phone", "+15551234567")
        assert "phone" not in form.errors

    @pytest.mark.asyncio
    async def test_changes_ignored_after_success(self):
        form = _form()
        _fill(form, phone="+15551234567")
        await form.submit()
        form.change("phone", "+15550000000")
        assert form.values["phone"] == "+15551234567"

    @pytest.mark.asyncio
    async def test_reset_after_success(self):
        form = _form()
        _fill(form, phone="+15551234567")
        await form.submit()
        form.reset()
        assert form.state is FormState.IDLE
        assert form.values == {}
        assert form.lead_id is None


class TestAnalytics:
    @pytest.mark.asyncio
    async def test_funnel_events(self):
        events = []
        form = _form(analytics=FormAnalytics(sink=lambda action, params: events.append(action)))
        form.focus("name")
        form.focus("phone")
        _fill(form, phone="+15551234567")
        await form.submit()

        assert events == ["form_start", "form_submit", "generate_lead"]

    @pytest.mark.asyncio
    async def test_validation_error_event(self):
        events = []
        form = _form(analytics=FormAnalytics(sink=lambda action, params: events.append((action, params))))
        await form.submit()
        assert events == [("form_error", {"form_name": "quick", "error_message": "validation_failed"})]


class TestDrafts:
    def test_restore_fills_only_untouched_empty_fields(self):
        drafts = DraftStore(MemoryStorage())
        form = _form(kind="brief", drafts=drafts)
        form.change("comment", "New comment")
        drafts.save("brief", {"name": "Anna", "comment": "Old comment"})

        applied = form.restore_draft()

        assert applied == {"name": "Anna"}
        assert form.values["comment"] == "New comment"
        assert form.restore_draft() == {}

    @pytest.mark.asyncio
    async def test_draft_cleared_after_success(self):
        drafts = DraftStore(MemoryStorage(), delay=10)
        form = _form(drafts=drafts)
        _fill(form, phone="+15551234567")
        drafts.flush()
        assert drafts.load("quick") == {"phone": "+15551234567"}

        await form.submit()
        await asyncio.sleep(0)
        assert drafts.load("quick") is None

    @pytest.mark.asyncio
    async def test_draft_kept_after_failure(self):
        submitter = MagicMock()
        submitter.submit = AsyncMock(return_value=SubmissionFailure())
        drafts = DraftStore(MemoryStorage(), delay=0.01)
        form = _form(submitter=submitter, drafts=drafts)
        _fill(form, phone="+15551234567")

        await form.submit()
        await asyncio.sleep(0.05)
        assert drafts.load("quick") == {"phone": "+15551234567"}
