"""Submission client - posts a validated lead to the lead endpoint."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

import httpx
import structlog

from leadline.client.utm import UtmTracker

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "We could not send your request. Please try again."


@dataclass(frozen=True)
class SubmissionSuccess:
    lead_id: Optional[str] = None
    message: Optional[str] = None
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class SubmissionFailure:
    message: str = GENERIC_ERROR_MESSAGE
    status_code: Optional[int] = None
    ok: bool = field(default=False, init=False)


SubmissionResult = Union[SubmissionSuccess, SubmissionFailure]


def iso_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_payload(
    lead_type: str,
    data: dict,
    source: str,
    source_page: Optional[str] = None,
    utm: Optional[dict[str, str]] = None,
    timestamp: Optional[str] = None,
) -> dict:
    """Form data plus type, attribution and timestamp. Empty values are left out."""
    payload: dict = {"type": lead_type, "source": source}
    if source_page:
        payload["sourcePage"] = source_page
    payload.update({k: v for k, v in data.items() if v not in (None, "")})
    payload["timestamp"] = timestamp or iso_timestamp()
    payload.update({k: v for k, v in (utm or {}).items() if v})
    return payload


class SubmissionClient:
    """One POST per submission, no automatic retry.

    Transport errors and non-2xx responses both yield a SubmissionFailure
    carrying a message safe to show to visitors.
    """

    def __init__(
        self,
        endpoint_url: str,
        client: Optional[httpx.AsyncClient] = None,
        utm: Optional[UtmTracker] = None,
        timeout: float = 15.0,
    ):
        self.endpoint_url = endpoint_url
        self.utm = utm or UtmTracker()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def submit(
        self,
        lead_type: str,
        data: dict,
        source: str,
        source_page: Optional[str] = None,
    ) -> SubmissionResult:
        payload = build_payload(lead_type, data, source, source_page, self.utm.get())
        try:
            resp = await self._client.post(self.endpoint_url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("lead_submission_failed", type=lead_type, source=source, error=str(e))
            return SubmissionFailure()

        if not resp.is_success:
            logger.warning("lead_submission_rejected", type=lead_type, source=source, status_code=resp.status_code)
            return SubmissionFailure(status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        logger.info("lead_submitted", type=lead_type, source=source, lead_id=body.get("leadId"))
        return SubmissionSuccess(lead_id=body.get("leadId"), message=body.get("message"))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
