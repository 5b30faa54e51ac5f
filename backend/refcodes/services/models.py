"""Typed records for rows coming back from the data store.

Rows from PostgREST are loose dicts. They are parsed here, once, into frozen
dataclasses; missing status and counters get their defaults at this
boundary and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict

from refcodes.services.normalize import normalize

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
CODE_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

FAILURE_REASONS = ("Expired", "Already Used", "Invalid", "Other")

UNKNOWN_SERVICE_NAME = "Unknown"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> str | None:
    text = _text(value).strip()
    return text or None


def _counter(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _status(value: Any) -> str:
    text = _text(value).strip().lower()
    if text in CODE_STATUSES:
        return text
    return STATUS_ACTIVE


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    normalized_name: str
    country: str | None = None
    code_count: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Service":
        name = _text(row.get("name"))
        return cls(
            id=_text(row.get("id")),
            name=name,
            normalized_name=_text(row.get("normalized_name")) or normalize(name),
            country=_optional_text(row.get("country")),
            code_count=_counter(row.get("code_count")),
        )

    def with_code_count(self, count: int) -> "Service":
        return replace(self, code_count=max(0, count))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "normalized_name": self.normalized_name,
            "country": self.country,
            "code_count": self.code_count,
        }


@dataclass(frozen=True)
class Code:
    id: str
    service_id: str
    code_text: str
    description: str = ""
    country: str | None = None
    validity_date: str | None = None
    status: str = STATUS_ACTIVE
    copy_count: int = 0
    feedback_count_worked: int = 0
    feedback_count_failed: int = 0
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Code":
        return cls(
            id=_text(row.get("id")),
            service_id=_text(row.get("service_id")),
            code_text=_text(row.get("code_text")),
            description=_text(row.get("description")),
            country=_optional_text(row.get("country")),
            validity_date=_optional_text(row.get("validity_date")),
            status=_status(row.get("status")),
            copy_count=_counter(row.get("copy_count")),
            feedback_count_worked=_counter(row.get("feedback_count_worked")),
            feedback_count_failed=_counter(row.get("feedback_count_failed")),
            created_at=_optional_text(row.get("created_at")),
        )

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "service_id": self.service_id,
            "code_text": self.code_text,
            "description": self.description,
            "country": self.country,
            "validity_date": self.validity_date,
            "status": self.status,
            "copy_count": self.copy_count,
            "feedback_count_worked": self.feedback_count_worked,
            "feedback_count_failed": self.feedback_count_failed,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class FeedbackEvent:
    code_id: str
    worked: bool
    failure_reason: str | None = None

    def to_row(self) -> Dict[str, Any]:
        return {
            "code_id": self.code_id,
            "worked": self.worked,
            "failure_reason": self.failure_reason,
        }


@dataclass(frozen=True)
class AdminCodeEntry:
    id: str
    code_text: str
    description: str
    service_id: str
    service_name: str
    status: str = STATUS_ACTIVE
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AdminCodeEntry":
        # The embedded relation comes back as an object, a list or null.
        joined = row.get("services")
        if isinstance(joined, list):
            joined = joined[0] if joined else None
        service_name = None
        if isinstance(joined, dict):
            service_name = _optional_text(joined.get("name"))
        return cls(
            id=_text(row.get("id")),
            code_text=_text(row.get("code_text")),
            description=_text(row.get("description")),
            service_id=_text(row.get("service_id")),
            service_name=service_name or UNKNOWN_SERVICE_NAME,
            status=_status(row.get("status")),
            created_at=_optional_text(row.get("created_at")),
        )

    @property
    def disabled(self) -> bool:
        return self.status != STATUS_ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code_text": self.code_text,
            "description": self.description,
            "service_id": self.service_id,
            "service_name": self.service_name,
            "status": self.status,
            "disabled": self.disabled,
            "created_at": self.created_at,
        }
