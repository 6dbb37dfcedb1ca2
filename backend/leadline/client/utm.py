"""UTM attribution captured from the landing URL and kept for the visit."""

import json
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from leadline.client.storage import KeyValueStorage, MemoryStorage
from leadline.schemas.lead import UTM_FIELDS

STORAGE_KEY = "leadline_utm"


class UtmTracker:
    def __init__(self, storage: Optional[KeyValueStorage] = None):
        self._storage = storage if storage is not None else MemoryStorage()

    def capture(self, url: str) -> dict[str, str]:
        """Store utm_* values from ``url``. URLs without them leave the stored values alone."""
        params = parse_qs(urlsplit(url).query)
        if not any(key in params for key in UTM_FIELDS):
            return {}

        data = {key: params[key][0] for key in UTM_FIELDS if params.get(key) and params[key][0]}
        self._storage.set(STORAGE_KEY, json.dumps(data))
        return data

    def get(self) -> dict[str, str]:
        raw = self._storage.get(STORAGE_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: data[key] for key in UTM_FIELDS if isinstance(data.get(key), str) and data[key]}


def format_utm_string(utm: dict[str, str]) -> str:
    """'google / cpc / brand' or an empty string."""
    parts = [utm.get("utm_source"), utm.get("utm_medium"), utm.get("utm_campaign")]
    return " / ".join(p for p in parts if p)
