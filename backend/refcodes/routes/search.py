from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from refcodes.errors import NotFoundError
from refcodes.services import session as flow
from refcodes.services.catalog import format_days_ago
from refcodes.services.engagement import COPY_DELTA, EngagementTracker
from refcodes.services.repository import ReferralStore, get_referral_store
from refcodes.services.resolver import resolve
from refcodes.services.rotation import start
from refcodes.services.store import SessionStore, store

router = APIRouter(prefix="/search", tags=["search"])
logger = logging.getLogger(__name__)


def get_session_store() -> SessionStore:
    return store


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=200)
    session_id: str | None = None


class FeedbackRequest(BaseModel):
    worked: bool
    reason: str | None = Field(default=None, max_length=200)


def _view(session: flow.SearchSession) -> dict:
    body = flow.session_view(session)
    if body["code"] is not None:
        body["code"]["added"] = format_days_ago(body["code"].get("created_at"))
    if session.not_found:
        body["message"] = "No codes found for that service."
    return body


@router.post("")
def search(
    payload: SearchRequest,
    sessions: SessionStore = Depends(get_session_store),
    referral_store: ReferralStore = Depends(get_referral_store),
):
    session = flow.begin_search(sessions.get_or_create(payload.session_id), payload.query)
    sessions.save(session)
    seq = session.search_seq

    try:
        suggestion = resolve(
            payload.query,
            referral_store.list_services(),
            referral_store.fuzzy_match,
            referral_store.count_active_codes,
        )
    except NotFoundError:
        suggestion = None

    # A newer search on the same session wins; this result is then dropped.
    latest = sessions.save(flow.finish_search(sessions.get(session.session_id), seq, suggestion))
    if latest.search_seq != seq:
        logger.info("search superseded session=%s seq=%d", latest.session_id, seq)
    return _view(latest)


@router.get("/{session_id}")
def get_search(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    return _view(sessions.get(session_id))


@router.post("/{session_id}/confirm")
def confirm_suggestion(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
    referral_store: ReferralStore = Depends(get_referral_store),
):
    session = sessions.get(session_id)
    if session.suggestion is None:
        raise HTTPException(status_code=409, detail="No suggested service to confirm")
    seq = session.search_seq

    try:
        rotation = start(referral_store.fetch_active_codes(session.suggestion.id))
    except NotFoundError:
        latest = sessions.get(session_id)
        if latest.search_seq == seq:
            sessions.save(flow.confirm_failed(latest))
        raise

    latest = sessions.get(session_id)
    if latest.search_seq != seq:
        raise HTTPException(status_code=409, detail="Search was replaced by a newer one")
    return _view(sessions.save(flow.confirm(latest, rotation)))


@router.post("/{session_id}/reject")
def reject(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    return _view(sessions.save(flow.reject_suggestion(sessions.get(session_id))))


@router.post("/{session_id}/retry")
def retry(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    session = sessions.get(session_id)
    if session.current_code is None:
        raise HTTPException(status_code=409, detail="No confirmed code to rotate")
    return _view(sessions.save(flow.retry(session)))


@router.post("/{session_id}/copy")
def copy_code(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
    referral_store: ReferralStore = Depends(get_referral_store),
):
    session = sessions.get(session_id)
    code = session.current_code
    if code is None:
        raise HTTPException(status_code=409, detail="No confirmed code to copy")
    seq = session.search_seq

    EngagementTracker(referral_store).record_copy(code)

    # The delta goes onto the latest mirror so overlapping copies all count.
    def apply_copy(current: flow.SearchSession) -> flow.SearchSession:
        if current.search_seq != seq:
            return current
        return flow.mark_copied(current, code.id, COPY_DELTA)

    latest = sessions.update(session_id, apply_copy)
    if latest.search_seq != seq:
        logger.info("copy not applied, search replaced session=%s seq=%d", session_id, seq)
    body = _view(latest)
    body["copy_count"] = _mirrored_copy_count(latest, code.id, code.copy_count + COPY_DELTA)
    return body


@router.post("/{session_id}/feedback")
def give_feedback(
    session_id: str,
    payload: FeedbackRequest,
    sessions: SessionStore = Depends(get_session_store),
    referral_store: ReferralStore = Depends(get_referral_store),
):
    session = sessions.get(session_id)
    code = session.current_code
    if code is None:
        raise HTTPException(status_code=409, detail="No confirmed code to rate")
    seq = session.search_seq

    event = EngagementTracker(referral_store).record_feedback(code.id, payload.worked, payload.reason)

    def apply_feedback(current: flow.SearchSession) -> flow.SearchSession:
        if current.search_seq != seq:
            return current
        return flow.mark_feedback_given(current)

    latest = sessions.update(session_id, apply_feedback)
    if latest.search_seq != seq:
        logger.info("feedback not applied, search replaced session=%s seq=%d", session_id, seq)
    body = _view(latest)
    body["feedback"] = event.to_row()
    return body


def _mirrored_copy_count(session: flow.SearchSession, code_id: str, fallback: int) -> int:
    if session.rotation is not None:
        for item in session.rotation.codes:
            if item.id == code_id:
                return item.copy_count
    return fallback
