"""Lead log - structured log entry per lead plus an optional JSON file record.

The file is a development aid and fallback, not the system of record.
"""

import asyncio
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from leadline.schemas.lead import LEAD_TYPES, LeadSubmission

logger = structlog.get_logger()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class LeadLog:
    def __init__(self, path: str | Path, write_to_file: bool = False):
        self.path = Path(path)
        self.write_to_file = write_to_file
        self._lock = threading.Lock()

    def _read(self) -> dict:
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {"leads": [], "lastUpdated": _now_iso()}
        if not isinstance(content, dict) or not isinstance(content.get("leads"), list):
            return {"leads": [], "lastUpdated": _now_iso()}
        return content

    def _append(self, record: dict) -> None:
        # Read-modify-write of the whole file; runs in worker threads
        with self._lock:
            content = self._read()
            content["leads"].append(record)
            content["lastUpdated"] = record["receivedAt"]
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(content, indent=2, ensure_ascii=False), encoding="utf-8")

    async def log_lead(self, lead: LeadSubmission) -> dict:
        """Log the lead; append it to the file when enabled. Never raises on write failure."""
        received_at = _now_iso()
        payload = lead.to_payload()
        record = {
            "id": lead.id,
            "type": lead.type,
            "source": lead.source or "unknown",
            "sourcePage": lead.source_page or "unknown",
            "timestamp": lead.timestamp or received_at,
            "receivedAt": received_at,
            "data": payload,
        }
        logger.info(
            "lead_received",
            lead_id=lead.id,
            type=lead.type,
            source=record["source"],
            source_page=record["sourcePage"],
            fields=sorted(payload),
        )

        if self.write_to_file:
            try:
                await asyncio.to_thread(self._append, record)
                logger.debug("lead_saved_to_file", lead_id=lead.id, path=str(self.path))
            except OSError as e:
                logger.error("lead_save_failed", lead_id=lead.id, error=str(e))
        return record

    def all_leads(self) -> list[dict]:
        return [lead for lead in self._read()["leads"] if isinstance(lead, dict)]

    def by_type(self, lead_type: str) -> list[dict]:
        return [lead for lead in self.all_leads() if lead.get("type") == lead_type]

    def by_date_range(self, start: datetime, end: datetime) -> list[dict]:
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        matched = []
        for lead in self.all_leads():
            try:
                received_at = _parse_iso(lead["receivedAt"])
            except (KeyError, TypeError, AttributeError, ValueError):
                continue
            if start <= received_at <= end:
                matched.append(lead)
        return matched

    def stats(self) -> dict:
        leads = self.all_leads()
        by_type = {lead_type: 0 for lead_type in LEAD_TYPES}
        for lead in leads:
            lead_type = lead.get("type")
            if isinstance(lead_type, str):
                by_type[lead_type] = by_type.get(lead_type, 0) + 1
        last_lead: Optional[dict] = leads[-1] if leads else None
        return {"total": len(leads), "byType": by_type, "lastLead": last_lead}
