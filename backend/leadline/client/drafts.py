"""Draft store - debounced autosave of long-form values between visits.

A draft is a cache, not a record: unreadable drafts are treated as absent,
write failures are logged and dropped.
"""

import asyncio
import json
from typing import Any, Callable, Generic, Optional, TypeVar

import structlog

from leadline.client.storage import KeyValueStorage

logger = structlog.get_logger()

T = TypeVar("T")

DRAFT_KEY_PREFIX = "leadline_draft_"
_NOTHING = object()


class DebouncedSink(Generic[T]):
    """Writes only the latest value, once input has been quiet for ``delay`` seconds.

    ``schedule`` cancels any pending write. Timers run on the current asyncio
    loop; without a running loop the value is written immediately.
    """

    def __init__(self, write: Callable[[T], None], delay: float = 0.5):
        self._write = write
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Any = _NOTHING

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    def schedule(self, value: T) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(value)
            return
        self._pending = value
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = _NOTHING

    def _fire(self) -> None:
        value, self._pending, self._handle = self._pending, _NOTHING, None
        if value is not _NOTHING:
            self._write(value)


def _non_empty(values: dict) -> dict[str, str]:
    return {k: v for k, v in values.items() if isinstance(v, str) and v}


class DraftStore:
    """Per-form-kind drafts of field values."""

    def __init__(self, storage: KeyValueStorage, delay: float = 0.5):
        self._storage = storage
        self.delay = delay
        self._sinks: dict[str, DebouncedSink[dict]] = {}

    @staticmethod
    def key(kind: str) -> str:
        return f"{DRAFT_KEY_PREFIX}{kind}"

    def _sink(self, kind: str) -> DebouncedSink[dict]:
        if kind not in self._sinks:
            self._sinks[kind] = DebouncedSink(lambda values: self._write(kind, values), self.delay)
        return self._sinks[kind]

    def _write(self, kind: str, values: dict) -> None:
        fields = _non_empty(values)
        try:
            if fields:
                self._storage.set(self.key(kind), json.dumps(fields, ensure_ascii=False))
            else:
                self._storage.remove(self.key(kind))
        except OSError as e:
            logger.warning("draft_write_failed", kind=kind, error=str(e))

    def load(self, kind: str) -> Optional[dict[str, str]]:
        """Last saved non-empty fields, or None when there is no usable draft."""
        raw = self._storage.get(self.key(kind))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug("draft_unreadable", kind=kind)
            return None
        if not isinstance(data, dict):
            return None
        return _non_empty(data) or None

    def save(self, kind: str, values: dict[str, str]) -> None:
        self._sink(kind).schedule(dict(values))

    def clear(self, kind: str) -> None:
        """Drop the draft and any write still pending for it."""
        if kind in self._sinks:
            self._sinks[kind].cancel()
        self._storage.remove(self.key(kind))

    def flush(self) -> None:
        for sink in self._sinks.values():
            sink.flush()
