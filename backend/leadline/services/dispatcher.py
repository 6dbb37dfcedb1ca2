"""Notification dispatch - fans one lead out to every channel sender."""

import asyncio
from typing import Protocol, Sequence

import structlog

from leadline.schemas.common import ChannelOutcome, DispatchReport, SendResult
from leadline.schemas.lead import LeadSubmission

logger = structlog.get_logger()


class ChannelSender(Protocol):
    name: str

    def is_configured(self) -> bool: ...

    async def send(self, lead: LeadSubmission) -> SendResult: ...


class LeadNotificationDispatcher:
    """Sends one lead through all channels concurrently.

    Channels are independent: a failure, timeout or crash in one never
    prevents or masks another's attempt, and nothing is raised to the
    caller. Unconfigured channels are skipped, not failed. There is one
    attempt per channel and no retry.
    """

    def __init__(self, senders: Sequence[ChannelSender], timeout: float = 10.0):
        names = [sender.name for sender in senders]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate channel names: {', '.join(duplicates)}")
        self.senders = list(senders)
        self.timeout = timeout

    def configured_channels(self) -> dict[str, bool]:
        return {sender.name: sender.is_configured() for sender in self.senders}

    async def dispatch(self, lead: LeadSubmission) -> DispatchReport:
        outcomes = await asyncio.gather(*(self._attempt(sender, lead) for sender in self.senders))
        report = DispatchReport(lead_id=lead.id, outcomes={o.channel: o for o in outcomes})
        logger.info(
            "lead_dispatched",
            lead_id=lead.id,
            sent=report.sent,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def _attempt(self, sender: ChannelSender, lead: LeadSubmission) -> ChannelOutcome:
        if not sender.is_configured():
            logger.info("notification_skipped", channel=sender.name, lead_id=lead.id, reason="not_configured")
            return ChannelOutcome(channel=sender.name, status="skipped", error="not configured")

        try:
            result = await asyncio.wait_for(sender.send(lead), timeout=self.timeout)
        except asyncio.TimeoutError:
            result = SendResult(success=False, error=f"timed out after {self.timeout}s")
        except Exception as e:
            result = SendResult(success=False, error=str(e) or e.__class__.__name__)

        if not result.success:
            logger.error("notification_failed", channel=sender.name, lead_id=lead.id, error=result.error)
            return ChannelOutcome(channel=sender.name, status="failed", error=result.error)

        logger.info("notification_sent", channel=sender.name, lead_id=lead.id, message_id=result.message_id)
        return ChannelOutcome(channel=sender.name, status="sent", message_id=result.message_id)
