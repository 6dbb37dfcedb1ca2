"""Telegram adapter - Bot API notifications formatted as MarkdownV2."""

import re
from datetime import datetime

import httpx
import structlog

from leadline.adapters.labels import (
    BUDGETS,
    GOALS,
    SITE_TYPES,
    TIMELINES,
    lead_type_emoji,
    lead_type_name,
    option_label,
)
from leadline.config import Settings
from leadline.schemas.common import SendResult
from leadline.schemas.lead import LeadSubmission

logger = structlog.get_logger()

# Characters reserved by MarkdownV2 outside of entities
MARKDOWN_V2_RESERVED = "_*[]()~`>#+-=|{}.!\\"
_RESERVED_PATTERN = re.compile("([" + re.escape(MARKDOWN_V2_RESERVED) + "])")
_CODE_RESERVED_PATTERN = re.compile(r"([`\\])")

REFERENCES_LIMIT = 200
COMMENT_LIMIT = 300


def escape_markdown(text: str) -> str:
    """Prefix every MarkdownV2 reserved character with a backslash."""
    return _RESERVED_PATTERN.sub(r"\\\1", text)


def escape_code(text: str) -> str:
    """Escape text placed inside an inline code entity."""
    return _CODE_RESERVED_PATTERN.sub(r"\\\1", text)


def truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def format_quick_message(lead: LeadSubmission) -> str:
    """Message for quick and callback leads."""
    lines = [f"{lead_type_emoji(lead.type)} *{escape_markdown(lead_type_name(lead.type))}*", ""]
    if lead.name:
        lines.append(f"👤 *Name:* {escape_markdown(lead.name)}")
    if lead.phone:
        lines.append(f"📱 *Phone:* {escape_markdown(lead.phone)}")
    if lead.email:
        lines.append(f"📧 *Email:* {escape_markdown(lead.email)}")
    if lead.telegram:
        lines.append(f"💬 *Telegram:* {escape_markdown(lead.telegram)}")
    if lead.message:
        lines.append(f"📝 *Message:* {escape_markdown(truncate(lead.message, COMMENT_LIMIT))}")

    lines.append("")
    lines.append(f"🔗 *Source:* {escape_markdown(lead.source)}")
    lines.append(f"📄 *Page:* {escape_markdown(lead.source_page)}")
    if lead.utm_source:
        lines.append(f"🎯 *UTM:* {escape_markdown(lead.utm_summary())}")
    lines.append(f"🕐 *Time:* {escape_markdown(lead.formatted_timestamp())}")
    lines.append("")
    lines.append(f"🆔 `{escape_code(lead.id)}`")
    return "\n".join(lines)


def format_brief_message(lead: LeadSubmission) -> str:
    """Message for briefs; long free text is truncated before escaping."""
    lines = ["📋 *New brief*", "", "*👤 Contacts:*"]
    lines.append(f"• Name: {escape_markdown(lead.name or '—')}")
    lines.append(f"• Phone: {escape_markdown(lead.phone or '—')}")
    lines.append(f"• Email: {escape_markdown(lead.email or '—')}")
    if lead.telegram:
        lines.append(f"• Telegram: {escape_markdown(lead.telegram)}")

    lines += ["", "*📊 About the project:*"]
    lines.append(f"• Type: {escape_markdown(option_label(SITE_TYPES, lead.site_type, short=True, missing='—'))}")
    lines.append(f"• Goal: {escape_markdown(option_label(GOALS, lead.goal, short=True, missing='—'))}")
    lines.append(f"• Timeline: {escape_markdown(option_label(TIMELINES, lead.timeline, short=True, missing='—'))}")
    lines.append(f"• Budget: {escape_markdown(option_label(BUDGETS, lead.budget, short=True, missing='—'))}")

    if lead.references:
        lines += ["", "*🔗 References:*", escape_markdown(truncate(lead.references, REFERENCES_LIMIT))]
    if lead.comment:
        lines += ["", "*💬 Comment:*", escape_markdown(truncate(lead.comment, COMMENT_LIMIT))]

    lines.append("")
    lines.append(f"🔗 {escape_markdown(lead.source)} \\| {escape_markdown(lead.source_page)}")
    if lead.utm_source:
        lines.append(f"🎯 {escape_markdown(lead.utm_summary())}")
    lines.append(f"🕐 {escape_markdown(lead.formatted_timestamp())}")
    lines.append(f"🆔 `{escape_code(lead.id)}`")
    return "\n".join(lines)


def format_lead_message(lead: LeadSubmission) -> str:
    if lead.type == "brief":
        return format_brief_message(lead)
    return format_quick_message(lead)


class TelegramSender:
    """Lead notifications to a staff chat through the Telegram Bot API."""

    name = "telegram"

    def __init__(self, config: Settings, client: httpx.AsyncClient | None = None):
        self.token = config.telegram_bot_token
        self.chat_id = config.telegram_chat_id
        self.api_url = config.telegram_api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=10.0)

    def is_configured(self) -> bool:
        return bool(self.token and self.chat_id)

    def _redact(self, text: str) -> str:
        return text.replace(self.token, "***") if self.token else text

    async def send(self, lead: LeadSubmission) -> SendResult:
        result = await self.send_message(format_lead_message(lead))
        if result.success:
            logger.info("telegram_message_sent", lead_id=lead.id, message_id=result.message_id)
        return result

    async def send_message(self, text: str, parse_mode: str = "MarkdownV2") -> SendResult:
        """Single sendMessage call; API and transport errors become a failed result."""
        if not self.is_configured():
            logger.warning("telegram_skipped_not_configured")
            return SendResult(success=False, error="Telegram not configured")

        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "disable_web_page_preview": True,
        }
        try:
            resp = await self._client.post(f"{self.api_url}/bot{self.token}/sendMessage", json=payload)
            data = resp.json()
        except Exception as e:
            error = self._redact(str(e)) or e.__class__.__name__
            logger.error("telegram_send_failed", error=error)
            return SendResult(success=False, error=error)

        if not data.get("ok"):
            error = data.get("description") or "Unknown Telegram API error"
            logger.error("telegram_send_failed", error=error, status_code=resp.status_code)
            return SendResult(success=False, error=error)

        return SendResult(success=True, message_id=str(data["result"]["message_id"]))

    async def send_test_message(self) -> SendResult:
        now = datetime.now().strftime("%d.%m.%Y, %H:%M:%S")
        text = (
            "🧪 *Test message*\n\n"
            "If you can read this, the Telegram integration works\\!\n\n"
            f"🕐 {escape_markdown(now)}"
        )
        return await self.send_message(text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
