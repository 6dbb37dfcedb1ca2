"""Human-readable labels for lead type and brief option codes.

Each code maps to (full label, short label). Email uses the full label,
Telegram the short one. Unknown codes are shown as submitted.
"""

from typing import Optional

LEAD_TYPE_NAMES = {
    "quick": "Quick request",
    "callback": "Callback request",
    "brief": "Brief",
}

LEAD_TYPE_EMOJI = {
    "quick": "📩",
    "callback": "📞",
    "brief": "📋",
}

SITE_TYPES = {
    "expert": ("Expert / personal brand website", "Expert / personal brand"),
    "ecommerce": ("Online store", "Online store"),
    "landing": ("Landing / promo page", "Landing"),
    "corporate": ("Corporate website", "Corporate"),
    "portfolio": ("Portfolio", "Portfolio"),
    "other": ("Other", "Other"),
}

GOALS = {
    "sales": ("Selling products or services", "Sales"),
    "leads": ("Collecting requests and leads", "Leads"),
    "brand": ("Image and awareness", "Brand"),
    "info": ("Informing the audience", "Information"),
    "community": ("Building a community", "Community"),
    "other": ("Other", "Other"),
}

TIMELINES = {
    "urgent": ("Urgent (under 2 weeks)", "Urgent"),
    "normal": ("2–4 weeks", "2–4 weeks"),
    "relaxed": ("1–2 months", "1–2 months"),
    "flexible": ("Not urgent, flexible", "Flexible"),
}

BUDGETS = {
    "600-1000": ("€500 – €1 000", "€500–1 000"),
    "1000-2500": ("€1 000 – €2 500", "€1 000–2 500"),
    "2500-5000": ("€2 500 – €5 000", "€2 500–5 000"),
    "5000+": ("From €5 000", "€5 000+"),
    "discuss": ("Let's discuss", "Discuss"),
}


def lead_type_name(lead_type: str) -> str:
    return LEAD_TYPE_NAMES.get(lead_type, "Lead")


def lead_type_emoji(lead_type: str) -> str:
    return LEAD_TYPE_EMOJI.get(lead_type, "📨")


def option_label(
    options: dict[str, tuple[str, str]],
    code: Optional[str],
    short: bool = False,
    missing: str = "Not specified",
) -> str:
    if not code:
        return missing
    labels = options.get(code)
    if labels is None:
        return code
    return labels[1] if short else labels[0]
