"""Form funnel analytics events."""

from typing import Callable, Optional

import structlog

logger = structlog.get_logger()

EventSink = Callable[[str, dict], None]


class FormAnalytics:
    """Emits funnel events as log entries and forwards them to an optional sink."""

    def __init__(self, sink: Optional[EventSink] = None):
        self._sink = sink

    def track(self, action: str, **params) -> None:
        logger.info("analytics_event", action=action, **params)
        if self._sink is not None:
            self._sink(action, params)

    def form_start(self, form_name: str) -> None:
        self.track("form_start", form_name=form_name)

    def form_submit(self, form_name: str) -> None:
        self.track("form_submit", form_name=form_name)

    def form_error(self, form_name: str, error: str) -> None:
        self.track("form_error", form_name=form_name, error_message=error)

    def conversion(self, source: str, lead_type: str) -> None:
        self.track("generate_lead", source=source, lead_type=lead_type)
