"""Moderation list for codes: delete and reactivate.

``authorize`` is a shared-password placeholder, not authentication. Anyone
who knows ADMIN_PASSWORD gets full moderation rights; there are no users,
sessions, rate limits or audit trail behind it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from refcodes.errors import AdminAccessDenied, NotFoundError
from refcodes.services.models import STATUS_ACTIVE, AdminCodeEntry
from refcodes.services.repository import ReferralStore

logger = logging.getLogger(__name__)


class AdminModerationView:
    def __init__(self, store: ReferralStore, admin_password: str | None) -> None:
        self.store = store
        self.admin_password = admin_password or ""
        self.entries: List[AdminCodeEntry] = []

    def authorize(self, secret: str | None) -> None:
        if not self.admin_password:
            raise AdminAccessDenied("Admin access is disabled: ADMIN_PASSWORD is not configured")
        if (secret or "") != self.admin_password:
            logger.warning("Admin access denied: incorrect password")
            raise AdminAccessDenied("Incorrect password")

    def load(self) -> List[AdminCodeEntry]:
        self.entries = self.store.list_codes_for_admin()
        return list(self.entries)

    def _index_of(self, code_id: str) -> int:
        for idx, entry in enumerate(self.entries):
            if entry.id == code_id:
                return idx
        raise NotFoundError(f"Code {code_id} not found")

    def delete(self, code_id: str) -> None:
        self.store.delete_code(code_id)
        self.entries = [entry for entry in self.entries if entry.id != code_id]
        logger.info("admin deleted code=%s", code_id)

    def reactivate(self, code_id: str) -> AdminCodeEntry:
        idx = self._index_of(code_id)
        self.store.set_code_status(code_id, STATUS_ACTIVE)
        entry = replace(self.entries[idx], status=STATUS_ACTIVE)
        self.entries[idx] = entry
        logger.info("admin reactivated code=%s", code_id)
        return entry
