"""Lead intake endpoint for quick, brief and callback forms."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from leadline.api.health import LEADS_RECEIVED, NOTIFICATIONS, VALIDATION_ERRORS
from leadline.schemas.forms import ValidationFailure, validate_form
from leadline.schemas.lead import (
    LEAD_TYPES,
    FieldError,
    LeadAttribution,
    LeadResponse,
    LeadSubmission,
    generate_lead_id,
)
from leadline.services.dispatcher import LeadNotificationDispatcher
from leadline.services.lead_log import LeadLog

logger = structlog.get_logger()
router = APIRouter(tags=["leads"])

SUCCESS_MESSAGES = {
    "quick": "Your request has been sent. We will contact you shortly.",
    "callback": "Thank you! We will call you back shortly.",
    "brief": "Your brief has been sent. We will review it and get in touch.",
}


def get_dispatcher(request: Request) -> LeadNotificationDispatcher:
    return request.app.state.dispatcher


def get_lead_log(request: Request) -> LeadLog:
    return request.app.state.lead_log


def _respond(status_code: int, response: LeadResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.model_dump(exclude_none=True))


def _validation_failed(lead_type: str, errors: list[FieldError]) -> JSONResponse:
    VALIDATION_ERRORS.labels(type=lead_type).inc()
    return _respond(400, LeadResponse(success=False, message="Validation failed", errors=errors))


def _build_submission(lead_type: str, body: dict) -> LeadSubmission | list[FieldError]:
    """Validate the body for its lead type; field errors are returned, not raised."""
    result = validate_form(lead_type, body)
    if isinstance(result, ValidationFailure):
        return [FieldError(field=name, message=message) for name, message in result.errors.items()]

    try:
        attribution = LeadAttribution.model_validate(body)
    except ValidationError as exc:
        return [
            FieldError(field=".".join(str(part) for part in err["loc"]), message=err["msg"])
            for err in exc.errors()
        ]

    timestamp = attribution.timestamp or datetime.now(timezone.utc).isoformat()
    return LeadSubmission(
        id=generate_lead_id(),
        type=lead_type,
        timestamp=timestamp,
        **attribution.model_dump(by_alias=True, exclude_none=True, exclude={"timestamp"}),
        **result.data.to_payload(),
    )


@router.post("/lead", response_model=LeadResponse)
async def submit_lead(
    request: Request,
    dispatcher: LeadNotificationDispatcher = Depends(get_dispatcher),
    lead_log: LeadLog = Depends(get_lead_log),
):
    """Accept a lead, record it and notify staff on every configured channel."""
    try:
        body = await request.json()
    except ValueError:
        return _respond(400, LeadResponse(success=False, message="Invalid request format"))
    if not isinstance(body, dict):
        return _respond(400, LeadResponse(success=False, message="Invalid request format"))

    lead_type = body.get("type")
    if lead_type not in LEAD_TYPES:
        return _validation_failed("unknown", [FieldError(field="type", message="Unknown lead type")])

    try:
        submission = _build_submission(lead_type, body)
        if isinstance(submission, list):
            return _validation_failed(lead_type, submission)

        LEADS_RECEIVED.labels(type=lead_type).inc()
        await lead_log.log_lead(submission)

        report = await dispatcher.dispatch(submission)
        for channel, outcome in report.outcomes.items():
            NOTIFICATIONS.labels(channel=channel, status=outcome.status).inc()
    except Exception:
        logger.exception("lead_api_error", type=lead_type)
        return _respond(500, LeadResponse(success=False, message="Internal server error. Please try again later."))

    return _respond(
        200,
        LeadResponse(success=True, message=SUCCESS_MESSAGES[lead_type], leadId=submission.id),
    )
