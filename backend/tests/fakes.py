from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Any, Dict, List

from refcodes.errors import ExternalStoreError, NotFoundError
from refcodes.services.models import AdminCodeEntry, Code, FeedbackEvent, Service


class FakeReferralStore:
    """In-memory stand-in for ReferralStore with call recording and failure switches."""

    def __init__(
        self,
        services: List[Service] | None = None,
        codes: List[Code] | None = None,
        fuzzy_results: Dict[str, List[Service]] | None = None,
    ) -> None:
        self.services = list(services or [])
        self.codes = list(codes or [])
        self.fuzzy_results = fuzzy_results or {}
        self.service_names: Dict[str, str] = {s.id: s.name for s in self.services}
        self.feedback: List[FeedbackEvent] = []
        self.copy_calls: List[Dict[str, Any]] = []
        self.fuzzy_calls: List[str] = []
        self.count_calls: List[str] = []
        self.fail_on: set[str] = set()
        self._ids = itertools.count(1)

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise ExternalStoreError(f"{name} failed")

    def list_services(self) -> List[Service]:
        self._maybe_fail("list_services")
        return list(self.services)

    def fuzzy_match(self, normalized_query: str) -> List[Service]:
        self._maybe_fail("fuzzy_match")
        self.fuzzy_calls.append(normalized_query)
        return list(self.fuzzy_results.get(normalized_query, []))

    def count_active_codes(self, service_id: str) -> int:
        self._maybe_fail("count_active_codes")
        self.count_calls.append(service_id)
        return sum(1 for c in self.codes if c.service_id == service_id and c.is_active)

    def fetch_active_codes(self, service_id: str) -> List[Code]:
        self._maybe_fail("fetch_active_codes")
        return [c for c in self.codes if c.service_id == service_id and c.is_active]

    def find_service_by_normalized_name(self, normalized_name: str) -> Service | None:
        self._maybe_fail("find_service_by_normalized_name")
        for service in self.services:
            if service.normalized_name == normalized_name:
                return service
        return None

    def insert_service(self, name: str, normalized_name: str, country: str | None = None) -> Service:
        self._maybe_fail("insert_service")
        service = Service(id=f"svc-{next(self._ids)}", name=name, normalized_name=normalized_name, country=country)
        self.services.append(service)
        self.service_names[service.id] = name
        return service

    def insert_code(self, values: Dict[str, Any]) -> Code:
        self._maybe_fail("insert_code")
        code = Code.from_row({**values, "id": f"code-{next(self._ids)}"})
        self.codes.append(code)
        return code

    def insert_feedback(self, event: FeedbackEvent) -> None:
        self._maybe_fail("insert_feedback")
        self.feedback.append(event)

    def increment_copy_count(self, code_id: str, delta: int, copied_at: str) -> int | None:
        self._maybe_fail("increment_copy_count")
        self.copy_calls.append({"code_id": code_id, "delta": delta, "copied_at": copied_at})
        for idx, code in enumerate(self.codes):
            if code.id == code_id:
                self.codes[idx] = replace(code, copy_count=code.copy_count + delta)
                return self.codes[idx].copy_count
        raise NotFoundError(f"Code {code_id} not found")

    def set_code_status(self, code_id: str, status: str) -> None:
        self._maybe_fail("set_code_status")
        for idx, code in enumerate(self.codes):
            if code.id == code_id:
                self.codes[idx] = replace(code, status=status)
                return
        raise NotFoundError(f"Code {code_id} not found")

    def delete_code(self, code_id: str) -> None:
        self._maybe_fail("delete_code")
        before = len(self.codes)
        self.codes = [c for c in self.codes if c.id != code_id]
        if len(self.codes) == before:
            raise NotFoundError(f"Code {code_id} not found")

    def list_codes_for_admin(self) -> List[AdminCodeEntry]:
        self._maybe_fail("list_codes_for_admin")
        return [
            AdminCodeEntry(
                id=c.id,
                code_text=c.code_text,
                description=c.description,
                service_id=c.service_id,
                service_name=self.service_names.get(c.service_id, "Unknown"),
                status=c.status,
                created_at=c.created_at,
            )
            for c in self.codes
        ]

    def code(self, code_id: str) -> Code:
        return next(c for c in self.codes if c.id == code_id)


def make_code(code_id: str, service_id: str = "svc-n26", status: str = "active", **extra: Any) -> Code:
    return Code.from_row({
        "id": code_id,
        "service_id": service_id,
        "code_text": f"TEXT-{code_id}",
        "description": f"Referral {code_id}",
        "status": status,
        **extra,
    })
