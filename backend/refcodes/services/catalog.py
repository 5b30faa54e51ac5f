from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

from refcodes.services.models import Service

UTC = timezone.utc


def top_services(services: Iterable[Service], limit: int = 10) -> List[Service]:
    with_codes = [service for service in services if service.code_count > 0]
    with_codes.sort(key=lambda service: service.code_count, reverse=True)
    return with_codes[: max(0, limit)]


def parse_datetime(value: str | None) -> datetime | None:
    text = (value or "").strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_days_ago(created_at: str | None, now: datetime | None = None) -> str:
    created = parse_datetime(created_at)
    if created is None:
        return "Unknown"
    now = (now or datetime.now(tz=UTC)).astimezone(UTC)
    days = int((now - created).total_seconds() // 86400)
    if days <= 0:
        return "Less than a day ago"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"
