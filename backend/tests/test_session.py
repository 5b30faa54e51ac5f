from __future__ import annotations

import unittest
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

import random  # noqa: E402

from refcodes.errors import NotFoundError  # noqa: E402
from refcodes.services import session as flow  # noqa: E402
from refcodes.services.models import Service  # noqa: E402
from refcodes.services.rotation import start  # noqa: E402
from refcodes.services.store import SessionStore  # noqa: E402
from tests.fakes import make_code  # noqa: E402

N26 = Service(id="svc-n26", name="N26", normalized_name="n26", code_count=3)
WISE = Service(id="svc-wise", name="Wise", normalized_name="wise", code_count=1)


def _confirmed(codes=("A", "B", "C")) -> flow.SearchSession:
    session = flow.begin_search(flow.SearchSession(session_id="s1"), "n26")
    session = flow.finish_search(session, session.search_seq, N26)
    return flow.confirm(session, start([make_code(c) for c in codes], random.Random(5)))


class SearchSessionTests(unittest.TestCase):
    def test_begin_search_clears_previous_results(self) -> None:
        session = _confirmed()
        fresh = flow.begin_search(session, "wise")
        self.assertIsNone(fresh.suggestion)
        self.assertIsNone(fresh.rotation)
        self.assertFalse(fresh.confirmed)
        self.assertFalse(fresh.not_found)
        self.assertEqual(fresh.search_seq, session.search_seq + 1)

    def test_older_search_result_is_dropped(self) -> None:
        base = flow.SearchSession(session_id="s1")
        first = flow.begin_search(base, "n26")
        second = flow.begin_search(first, "wise")
        late = flow.finish_search(second, first.search_seq, N26)
        self.assertIsNone(late.suggestion)
        current = flow.finish_search(second, second.search_seq, WISE)
        self.assertEqual(current.suggestion, WISE)

    def test_finish_without_service_marks_not_found(self) -> None:
        session = flow.begin_search(flow.SearchSession(session_id="s1"), "zzz")
        done = flow.finish_search(session, session.search_seq, None)
        self.assertTrue(done.not_found)

    def test_retry_rotates_and_resets_flags(self) -> None:
        session = flow.mark_feedback_given(flow.mark_copied(_confirmed(), "A", 1))
        moved = flow.retry(session)
        self.assertNotEqual(moved.current_code.id, session.current_code.id)
        self.assertFalse(moved.copied)
        self.assertFalse(moved.feedback_given)
        self.assertTrue(moved.can_retry)

    def test_retry_with_one_code_is_noop(self) -> None:
        session = flow.mark_copied(_confirmed(codes=("A",)), "A", 1)
        self.assertFalse(session.can_retry)
        self.assertIs(flow.retry(session), session)

    def test_reconfirm_resets_rotation(self) -> None:
        session = flow.retry(_confirmed())
        self.assertEqual(session.rotation.cursor, 1)
        again = flow.confirm(session, start([make_code("Q"), make_code("R")], random.Random(1)))
        self.assertEqual(again.rotation.cursor, 0)
        self.assertEqual(sorted(c.id for c in again.rotation.codes), ["Q", "R"])

    def test_mark_copied_adds_delta_to_latest_mirror(self) -> None:
        session = _confirmed()
        code_id = session.current_code.id
        once = flow.mark_copied(session, code_id, 1)
        twice = flow.mark_copied(once, code_id, 1)
        self.assertTrue(twice.copied)
        self.assertEqual(twice.current_code.copy_count, 2)

    def test_reject_clears_suggestion(self) -> None:
        rejected = flow.reject_suggestion(_confirmed())
        self.assertIsNone(rejected.suggestion)
        self.assertIsNone(rejected.current_code)

    def test_session_view_shape(self) -> None:
        body = flow.session_view(_confirmed())
        self.assertEqual(body["suggestion"]["name"], "N26")
        self.assertEqual(body["total_codes"], 3)
        self.assertEqual(body["position"], 0)
        self.assertTrue(body["can_retry"])


class SessionStoreTests(unittest.TestCase):
    def test_get_or_create_reuses_known_session(self) -> None:
        sessions = SessionStore()
        created = sessions.get_or_create(None)
        self.assertIs(sessions.get_or_create(created.session_id), created)
        self.assertNotEqual(sessions.get_or_create("unknown").session_id, "unknown")

    def test_update_applies_transition_to_stored_session(self) -> None:
        sessions = SessionStore()
        created = sessions.create()
        updated = sessions.update(created.session_id, lambda s: flow.begin_search(s, "wise"))
        self.assertEqual(updated.query, "wise")
        self.assertIs(sessions.get(created.session_id), updated)
        with self.assertRaises(NotFoundError):
            sessions.update("ses_missing", flow.mark_feedback_given)


if __name__ == "__main__":
    unittest.main()
