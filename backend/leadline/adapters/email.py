"""Email adapter - lead notification templates and SMTP delivery."""

import re
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from html import escape

import aiosmtplib
import structlog

from leadline.adapters.labels import BUDGETS, GOALS, SITE_TYPES, TIMELINES, lead_type_name, option_label
from leadline.config import Settings
from leadline.schemas.common import SendResult
from leadline.schemas.lead import LeadSubmission

logger = structlog.get_logger()

FROM_PATTERN = re.compile(r"^(.+?)\s*<(.+?)>$")

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f5f5f5;">
  <table width="100%" cellpadding="0" cellspacing="0" style="max-width: 600px; margin: 0 auto; background-color: #ffffff;">
    <tr>
      <td style="padding: 40px 30px; background-color: #1a1a1a;">
        <h1 style="margin: 0; color: #ffffff; font-size: 24px; font-weight: 600;">{title}</h1>
      </td>
    </tr>
    <tr>
      <td style="padding: 30px;">
{body}
      </td>
    </tr>
    <tr>
      <td style="padding: 20px 30px; background-color: #f5f5f5; text-align: center;">
        <p style="margin: 0; color: #999999; font-size: 12px;">{brand}</p>
      </td>
    </tr>
  </table>
</body>
</html>"""

_SECTION = (
    '<h2 style="margin: 0 0 20px; color: #1a1a1a; font-size: 18px; font-weight: 600; '
    'border-bottom: 2px solid #1a1a1a; padding-bottom: 10px;">{title}</h2>'
)


def _row(label: str, value_html: str, last: bool = False) -> str:
    border = "" if last else " border-bottom: 1px solid #e5e5e5;"
    return (
        f'<tr><td style="padding: 15px 0;{border}">'
        f'<strong style="color: #666666;">{label}:</strong><br>'
        f'<span style="color: #1a1a1a; font-size: 16px;">{value_html}</span>'
        "</td></tr>"
    )


def _inline_row(label: str, value_html: str) -> str:
    return (
        '<tr><td style="padding: 10px 0;">'
        f'<strong style="color: #666666;">{label}:</strong> '
        f'<span style="color: #1a1a1a; margin-left: 10px;">{value_html}</span>'
        "</td></tr>"
    )


def _link(scheme: str, value: str) -> str:
    return f'<a href="{scheme}:{escape(value)}" style="color: #1a1a1a; text-decoration: none;">{escape(value)}</a>'


def _multiline(value: str) -> str:
    return f'<span style="white-space: pre-wrap;">{escape(value)}</span>'


def _utm_html(lead: LeadSubmission) -> str:
    value = escape(lead.utm_summary())
    if lead.utm_term:
        value += f'<br><span style="color: #999999; font-size: 14px;">Keyword: {escape(lead.utm_term)}</span>'
    if lead.utm_content:
        value += f'<br><span style="color: #999999; font-size: 14px;">Content: {escape(lead.utm_content)}</span>'
    return value


def render_quick_html(lead: LeadSubmission, brand: str) -> str:
    """HTML for quick and callback leads: one row per present field."""
    rows = [_row("Lead ID", escape(lead.id))]
    if lead.name:
        rows.append(_row("Name", escape(lead.name)))
    if lead.phone:
        rows.append(_row("Phone", _link("tel", lead.phone)))
    if lead.email:
        rows.append(_row("Email", _link("mailto", lead.email)))
    if lead.telegram:
        rows.append(_row("Telegram", escape(lead.telegram)))
    if lead.message:
        rows.append(_row("Message", _multiline(lead.message)))
    rows.append(_row("Source", f"{escape(lead.source)} ({escape(lead.source_page)})"))
    if lead.utm_source:
        rows.append(_row("UTM", _utm_html(lead)))
    rows.append(_row("Time", escape(lead.formatted_timestamp()), last=True))

    body = '<table width="100%" cellpadding="0" cellspacing="0">' + "".join(rows) + "</table>"
    return _PAGE.format(title=escape(lead_type_name(lead.type)), body=body, brand=escape(brand))


def render_brief_html(lead: LeadSubmission, brand: str) -> str:
    """HTML for briefs: contacts, project, references, comment, footer."""
    table = '<table width="100%" cellpadding="0" cellspacing="0" style="margin-bottom: 30px;">{}</table>'

    contacts = [
        _inline_row("ID", escape(lead.id)),
        _inline_row("Name", escape(lead.name or "—")),
        _inline_row("Email", _link("mailto", lead.email) if lead.email else "—"),
        _inline_row("Phone", _link("tel", lead.phone) if lead.phone else "—"),
    ]
    if lead.telegram:
        contacts.append(_inline_row("Telegram", escape(lead.telegram)))

    project = [
        _inline_row("Site type", escape(option_label(SITE_TYPES, lead.site_type))),
        _inline_row("Goal", escape(option_label(GOALS, lead.goal))),
        _inline_row("Timeline", escape(option_label(TIMELINES, lead.timeline))),
        _inline_row("Budget", escape(option_label(BUDGETS, lead.budget))),
    ]

    parts = [
        _SECTION.format(title="Contact details"),
        table.format("".join(contacts)),
        _SECTION.format(title="About the project"),
        table.format("".join(project)),
    ]
    paragraph = '<p style="color: #1a1a1a; line-height: 1.6; white-space: pre-wrap;">{}</p>'
    if lead.references:
        parts.append(_SECTION.format(title="References / competitors"))
        parts.append(paragraph.format(escape(lead.references)))
    if lead.comment:
        parts.append(_SECTION.format(title="Comment"))
        parts.append(paragraph.format(escape(lead.comment)))

    footer = [f"Source: {escape(lead.source)} ({escape(lead.source_page)})"]
    if lead.utm_source:
        footer.append(f"UTM: {escape(lead.utm_summary())}")
    footer.append(f"Time: {escape(lead.formatted_timestamp())}")
    parts.append(
        '<table width="100%" cellpadding="0" cellspacing="0" '
        'style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e5e5;">'
        + "".join(
            f'<tr><td style="padding: 5px 0;"><span style="color: #999999; font-size: 12px;">{line}</span></td></tr>'
            for line in footer
        )
        + "</table>"
    )
    return _PAGE.format(title="New brief", body="\n".join(parts), brand=escape(brand))


def render_html(lead: LeadSubmission, brand: str) -> str:
    if lead.type == "brief":
        return render_brief_html(lead, brand)
    return render_quick_html(lead, brand)


def render_plain_text(lead: LeadSubmission) -> str:
    """Plain-text fallback shared by all lead types."""
    lines = [lead_type_name(lead.type), "=" * 40, "", f"ID: {lead.id}"]
    if lead.name:
        lines.append(f"Name: {lead.name}")
    if lead.phone:
        lines.append(f"Phone: {lead.phone}")
    if lead.email:
        lines.append(f"Email: {lead.email}")
    if lead.telegram:
        lines.append(f"Telegram: {lead.telegram}")
    if lead.message:
        lines += ["", "Message:", lead.message]

    if lead.type == "brief":
        lines += [
            "",
            "About the project:",
            "-" * 20,
            f"Site type: {option_label(SITE_TYPES, lead.site_type)}",
            f"Goal: {option_label(GOALS, lead.goal)}",
            f"Timeline: {option_label(TIMELINES, lead.timeline)}",
            f"Budget: {option_label(BUDGETS, lead.budget)}",
        ]
        if lead.references:
            lines += ["", "References:", lead.references]
        if lead.comment:
            lines += ["", "Comment:", lead.comment]

    lines += ["", "-" * 40, f"Source: {lead.source} ({lead.source_page})"]
    if lead.utm_source:
        lines.append(f"UTM: {lead.utm_summary()}")
        if lead.utm_term:
            lines.append(f"Keyword: {lead.utm_term}")
        if lead.utm_content:
            lines.append(f"Content: {lead.utm_content}")
    lines.append(f"Time: {lead.formatted_timestamp()}")
    return "\n".join(lines) + "\n"


def render_subject(lead: LeadSubmission, brand: str) -> str:
    return f"[{brand}] {lead_type_name(lead.type)}: {lead.contact_label or 'New lead'}"


def parse_from_address(raw: str, fallback_name: str, fallback_email: str) -> tuple[str, str]:
    """Split 'Name <addr>' into (name, addr)."""
    match = FROM_PATTERN.match(raw.strip())
    if match:
        return match.group(1).strip(), match.group(2).strip()
    if "@" in raw:
        return fallback_name, raw.strip()
    return fallback_name, fallback_email


class EmailSender:
    """Lead notifications to the staff mailbox over SMTP."""

    name = "email"

    def __init__(self, config: Settings, transport=aiosmtplib.send):
        self.host = config.smtp_host
        self.port = config.smtp_port
        self.user = config.smtp_user
        self.password = config.smtp_password
        self.use_tls = config.smtp_use_tls
        self.recipient = config.notification_email
        self.brand = config.brand_name
        self.from_name, self.from_email = parse_from_address(config.from_email, config.brand_name, config.smtp_user)
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def build_message(self, lead: LeadSubmission) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = render_subject(lead, self.brand)
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = self.recipient
        msg["Message-ID"] = make_msgid(idstring=lead.id, domain=self.from_email.rpartition("@")[2] or None)
        msg.attach(MIMEText(render_plain_text(lead), "plain", "utf-8"))
        msg.attach(MIMEText(render_html(lead, self.brand), "html", "utf-8"))
        return msg

    async def send(self, lead: LeadSubmission) -> SendResult:
        if not self.is_configured():
            logger.warning("email_skipped_not_configured", lead_id=lead.id)
            return SendResult(success=False, error="Email service not configured")

        msg = self.build_message(lead)
        try:
            await self._transport(
                msg,
                hostname=self.host,
                port=self.port,
                username=self.user,
                password=self.password,
                use_tls=self.use_tls,
            )
        except Exception as e:
            logger.error("email_send_failed", lead_id=lead.id, error=str(e))
            return SendResult(success=False, error=str(e))

        logger.info("email_sent", lead_id=lead.id, to=self.recipient)
        return SendResult(success=True, message_id=msg["Message-ID"])
