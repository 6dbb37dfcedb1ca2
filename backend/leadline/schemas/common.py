"""Common response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel

ChannelStatus = Literal["sent", "skipped", "failed"]


class SendResult(BaseModel):
    """Outcome of a single channel send attempt."""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class ChannelOutcome(BaseModel):
    channel: str
    status: ChannelStatus
    message_id: Optional[str] = None
    error: Optional[str] = None


class DispatchReport(BaseModel):
    """Per-channel outcomes of one lead dispatch."""
    lead_id: str
    outcomes: dict[str, ChannelOutcome]

    def status_of(self, channel: str) -> Optional[ChannelStatus]:
        outcome = self.outcomes.get(channel)
        return outcome.status if outcome else None

    @property
    def sent(self) -> list[str]:
        return [name for name, o in self.outcomes.items() if o.status == "sent"]

    @property
    def failed(self) -> list[str]:
        return [name for name, o in self.outcomes.items() if o.status == "failed"]

    @property
    def skipped(self) -> list[str]:
        return [name for name, o in self.outcomes.items() if o.status == "skipped"]


class HealthResponse(BaseModel):
    status: str
    version: str = "1.0.0"
    channels: dict[str, bool]
