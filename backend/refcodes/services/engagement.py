from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from refcodes.services.models import FAILURE_REASONS, Code, FeedbackEvent
from refcodes.services.repository import ReferralStore

logger = logging.getLogger(__name__)

UTC = timezone.utc
COPY_DELTA = 1


def iso_utc(value: datetime | None = None) -> str:
    dt = (value or datetime.now(tz=UTC)).astimezone(UTC).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def clean_failure_reason(worked: bool, reason: str | None) -> str | None:
    if worked:
        return None
    text = (reason or "").strip()
    if not text:
        return None
    if text not in FAILURE_REASONS:
        logger.warning("Unrecognised feedback reason accepted: %r", text[:80])
    return text


class EngagementTracker:
    """Copy and worked/failed feedback writes for a single code.

    The store is always written first. The in-memory copy of a code is only
    bumped once the write has been confirmed, by the same delta that was sent.
    """

    def __init__(self, store: ReferralStore) -> None:
        self.store = store

    def record_copy(self, code: Code, now: datetime | None = None) -> Code:
        persisted = self.store.increment_copy_count(code.id, COPY_DELTA, iso_utc(now))
        updated = replace(code, copy_count=code.copy_count + COPY_DELTA)
        logger.info(
            "copy recorded code=%s local=%d store=%s",
            code.id,
            updated.copy_count,
            persisted if persisted is not None else "n/a",
        )
        return updated

    def record_feedback(self, code_id: str, worked: bool, reason: str | None = None) -> FeedbackEvent:
        event = FeedbackEvent(
            code_id=code_id,
            worked=bool(worked),
            failure_reason=clean_failure_reason(bool(worked), reason),
        )
        self.store.insert_feedback(event)
        logger.info("feedback recorded code=%s worked=%s reason=%s", code_id, event.worked, event.failure_reason)
        return event
