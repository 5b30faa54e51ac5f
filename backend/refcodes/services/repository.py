from __future__ import annotations

import logging
from typing import Any, Dict, List

from refcodes.errors import NotFoundError
from refcodes.services.models import (
    STATUS_ACTIVE,
    AdminCodeEntry,
    Code,
    FeedbackEvent,
    Service,
)
from refcodes.supabase_rest import SupabaseRestClient, SupabaseRestError, eq, get_supabase_client

logger = logging.getLogger(__name__)

SERVICES_TABLE = "services"
SERVICES_WITH_COUNTS_VIEW = "services_with_code_counts"
CODES_TABLE = "codes"
FEEDBACK_TABLE = "feedback"

FUZZY_MATCH_RPC = "fuzzy_service_match"
INCREMENT_COPY_RPC = "increment_code_copy_count"

SERVICE_COLUMNS = "id,name,normalized_name,country"
CODE_COLUMNS = (
    "id,service_id,code_text,description,country,validity_date,status,"
    "created_at,copy_count,feedback_count_worked,feedback_count_failed"
)
ADMIN_CODE_COLUMNS = "id,code_text,description,service_id,status,created_at,services(name)"


class ReferralStore:
    """Gateway to the hosted tables, views and stored procedures."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self.client = client

    def list_services(self) -> List[Service]:
        rows = self.client.fetch_rows(
            SERVICES_WITH_COUNTS_VIEW,
            select=f"{SERVICE_COLUMNS},code_count",
        )
        return [Service.from_row(row) for row in rows]

    def fuzzy_match(self, normalized_query: str) -> List[Service]:
        result = self.client.rpc(FUZZY_MATCH_RPC, {"search_input": normalized_query})
        if result is None:
            return []
        if not isinstance(result, list):
            raise SupabaseRestError(f"Unexpected response from rpc {FUZZY_MATCH_RPC}")
        return [Service.from_row(row) for row in result if isinstance(row, dict)]

    def count_active_codes(self, service_id: str) -> int:
        return self.client.count_rows(
            CODES_TABLE,
            filters={"service_id": eq(service_id), "status": eq(STATUS_ACTIVE)},
        )

    def fetch_active_codes(self, service_id: str) -> List[Code]:
        rows = self.client.fetch_rows(
            CODES_TABLE,
            select=CODE_COLUMNS,
            filters={"service_id": eq(service_id), "status": eq(STATUS_ACTIVE)},
        )
        return [Code.from_row(row) for row in rows]

    def find_service_by_normalized_name(self, normalized_name: str) -> Service | None:
        rows = self.client.fetch_rows(
            SERVICES_TABLE,
            select=SERVICE_COLUMNS,
            filters={"normalized_name": eq(normalized_name)},
            page_size=1,
        )
        return Service.from_row(rows[0]) if rows else None

    def insert_service(self, name: str, normalized_name: str, country: str | None = None) -> Service:
        rows = self.client.insert_rows(
            SERVICES_TABLE,
            [{"name": name, "normalized_name": normalized_name, "country": country}],
            returning=True,
        )
        if not rows:
            raise SupabaseRestError("Service insert returned no row")
        return Service.from_row(rows[0])

    def insert_code(self, values: Dict[str, Any]) -> Code:
        rows = self.client.insert_rows(CODES_TABLE, [values], returning=True)
        if not rows:
            raise SupabaseRestError("Code insert returned no row")
        return Code.from_row(rows[0])

    def insert_feedback(self, event: FeedbackEvent) -> None:
        self.client.insert_rows(FEEDBACK_TABLE, [event.to_row()])

    def increment_copy_count(self, code_id: str, delta: int, copied_at: str) -> int | None:
        # Relative increment inside the database; the client never sends an absolute count.
        result = self.client.rpc(
            INCREMENT_COPY_RPC,
            {"target_code_id": code_id, "increment_by": delta, "copied_at": copied_at},
        )
        if isinstance(result, bool):
            return None
        if isinstance(result, int):
            return result
        return None

    def set_code_status(self, code_id: str, status: str) -> None:
        rows = self.client.update_rows(CODES_TABLE, {"status": status}, filters={"id": eq(code_id)})
        if not rows:
            logger.warning("Status update matched no code id=%s status=%s", code_id, status)
            raise NotFoundError(f"Code {code_id} not found")

    def delete_code(self, code_id: str) -> None:
        rows = self.client.delete_rows(CODES_TABLE, filters={"id": eq(code_id)})
        if not rows:
            logger.warning("Delete matched no code id=%s", code_id)
            raise NotFoundError(f"Code {code_id} not found")

    def list_codes_for_admin(self) -> List[AdminCodeEntry]:
        rows = self.client.fetch_rows(
            CODES_TABLE,
            select=ADMIN_CODE_COLUMNS,
            order="created_at.desc",
        )
        return [AdminCodeEntry.from_row(row) for row in rows]


def get_referral_store() -> ReferralStore:
    return ReferralStore(get_supabase_client())
