"""Per-user search flow: search, confirm, rotate, copy, feedback.

Each transition takes a SearchSession and returns a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict

from refcodes.services.models import Code, Service
from refcodes.services.rotation import RotationState, add_copies, advance


@dataclass(frozen=True)
class SearchSession:
    session_id: str
    query: str = ""
    search_seq: int = 0
    suggestion: Service | None = None
    not_found: bool = False
    confirmed: bool = False
    rotation: RotationState | None = None
    copied: bool = False
    feedback_given: bool = False

    @property
    def current_code(self) -> Code | None:
        if not self.confirmed or self.rotation is None or not self.rotation.codes:
            return None
        return self.rotation.current

    @property
    def can_retry(self) -> bool:
        return self.rotation is not None and self.rotation.can_advance


def begin_search(session: SearchSession, query: str) -> SearchSession:
    # Prior suggestion and results are dropped before the new lookup runs.
    return SearchSession(
        session_id=session.session_id,
        query=query,
        search_seq=session.search_seq + 1,
    )


def finish_search(session: SearchSession, seq: int, suggestion: Service | None) -> SearchSession:
    if seq != session.search_seq:
        return session
    return replace(session, suggestion=suggestion, not_found=suggestion is None)


def reject_suggestion(session: SearchSession) -> SearchSession:
    return replace(session, suggestion=None, confirmed=False, rotation=None, copied=False, feedback_given=False)


def confirm(session: SearchSession, rotation: RotationState) -> SearchSession:
    return replace(
        session,
        confirmed=True,
        not_found=False,
        rotation=rotation,
        copied=False,
        feedback_given=False,
    )


def confirm_failed(session: SearchSession) -> SearchSession:
    return replace(session, confirmed=False, rotation=None, not_found=True)


def retry(session: SearchSession) -> SearchSession:
    if session.rotation is None or not session.rotation.can_advance:
        return session
    return replace(session, rotation=advance(session.rotation), copied=False, feedback_given=False)


def mark_copied(session: SearchSession, code_id: str, delta: int) -> SearchSession:
    if session.rotation is None:
        return replace(session, copied=True)
    return replace(session, rotation=add_copies(session.rotation, code_id, delta), copied=True)


def mark_feedback_given(session: SearchSession) -> SearchSession:
    return replace(session, feedback_given=True)


def session_view(session: SearchSession) -> Dict[str, Any]:
    code = session.current_code
    return {
        "session_id": session.session_id,
        "query": session.query,
        "suggestion": session.suggestion.to_dict() if session.suggestion else None,
        "not_found": session.not_found,
        "confirmed": session.confirmed,
        "code": code.to_dict() if code else None,
        "position": session.rotation.cursor if session.rotation and code else None,
        "total_codes": len(session.rotation.codes) if session.rotation else 0,
        "can_retry": session.can_retry,
        "copied": session.copied,
        "feedback_given": session.feedback_given,
    }
