"""Form state machine shared by all lead forms.

    idle --submit (valid)--> loading --ok--> success
      ^                         |
      +------ retry ---- error <+ (network error / non-2xx)

An invalid submit stays in idle with per-field errors and makes no request.
Only one submission can be in flight: submit() outside idle is a no-op.
"""

from enum import Enum
from typing import Callable, Optional

import structlog

from leadline.client.analytics import FormAnalytics
from leadline.client.drafts import DraftStore
from leadline.client.submission import SubmissionClient, SubmissionFailure
from leadline.schemas.forms import FORM_LEAD_TYPES, FormSchema, ValidationFailure, get_schema, validate_field, validate_form

logger = structlog.get_logger()


class FormState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class LeadForm:
    """Controller for one rendered form instance.

    The UI forwards focus/change/blur events and renders ``state``,
    ``values``, ``errors`` and ``error_message``.
    """

    def __init__(
        self,
        kind: str,
        submitter: SubmissionClient,
        source: str,
        source_page: Optional[str] = None,
        drafts: Optional[DraftStore] = None,
        analytics: Optional[FormAnalytics] = None,
        on_success: Optional[Callable[[FormSchema], None]] = None,
    ):
        get_schema(kind)
        self.kind = kind
        self.lead_type = FORM_LEAD_TYPES[kind]
        self.source = source
        self.source_page = source_page
        self._submitter = submitter
        self._drafts = drafts
        self._analytics = analytics or FormAnalytics()
        self._on_success = on_success

        self.state = FormState.IDLE
        self.values: dict[str, str] = {}
        self.errors: dict[str, str] = {}
        self.error_message = ""
        self.lead_id: Optional[str] = None
        self._touched: set[str] = set()
        self._started = False

    @property
    def disabled(self) -> bool:
        return self.state in (FormState.LOADING, FormState.SUCCESS)

    def restore_draft(self) -> dict[str, str]:
        """Fill empty, untouched fields from the saved draft. Safe to call repeatedly."""
        if self._drafts is None:
            return {}
        draft = self._drafts.load(self.kind) or {}
        applied = {
            name: value
            for name, value in draft.items()
            if name not in self._touched and not self.values.get(name)
        }
        self.values.update(applied)
        return applied

    def focus(self, field: str) -> None:
        if not self._started:
            self._started = True
            self._analytics.form_start(self.kind)

    def change(self, field: str, value: str) -> None:
        if self.disabled:
            return
        self.values[field] = value
        self._touched.add(field)
        # Fields already showing an error are re-validated as the user types
        if field in self.errors:
            self._revalidate(field)
        if self._drafts is not None:
            self._drafts.save(self.kind, self.values)

    def blur(self, field: str) -> None:
        if self.disabled:
            return
        self._revalidate(field)

    def _revalidate(self, field: str) -> None:
        error = validate_field(self.kind, field, self.values)
        if error:
            self.errors[field] = error
        else:
            self.errors.pop(field, None)

    async def submit(self) -> FormState:
        if self.state is not FormState.IDLE:
            return self.state

        result = validate_form(self.kind, self.values)
        if isinstance(result, ValidationFailure):
            self.errors = dict(result.errors)
            self._analytics.form_error(self.kind, "validation_failed")
            return self.state

        self.errors = {}
        self.error_message = ""
        self.state = FormState.LOADING

        try:
            outcome = await self._submitter.submit(
                self.lead_type, result.data.to_payload(), self.source, self.source_page
            )
        except Exception as e:
            logger.exception("form_submit_error", form=self.kind, error=str(e))
            outcome = SubmissionFailure()
        if isinstance(outcome, SubmissionFailure):
            self.state = FormState.ERROR
            self.error_message = outcome.message
            self._analytics.form_error(self.kind, "submission_failed")
            return self.state

        self.state = FormState.SUCCESS
        self.lead_id = outcome.lead_id
        if self._drafts is not None:
            self._drafts.clear(self.kind)
        self._analytics.form_submit(self.kind)
        self._analytics.conversion(self.source, self.lead_type)
        if self._on_success is not None:
            self._on_success(result.data)
        return self.state

    def retry(self) -> None:
        """Back to idle after a failed submission; field values are kept."""
        if self.state is FormState.ERROR:
            self.state = FormState.IDLE
            self.error_message = ""

    def reset(self) -> None:
        """Empty the form for a new lead. Ignored while a submission is in flight."""
        if self.state is FormState.LOADING:
            return
        self.state = FormState.IDLE
        self.values = {}
        self.errors = {}
        self.error_message = ""
        self.lead_id = None
        self._touched.clear()
