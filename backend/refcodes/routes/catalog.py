from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from refcodes import config
from refcodes.services.catalog import top_services
from refcodes.services.repository import ReferralStore, get_referral_store
from refcodes.services.submission import suggest_service

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/top")
def list_top_services(
    limit: int | None = Query(default=None, ge=1, le=100),
    referral_store: ReferralStore = Depends(get_referral_store),
):
    services = top_services(referral_store.list_services(), limit or config.TOP_SERVICES_LIMIT)
    return {"items": [service.to_dict() for service in services]}


@router.get("/suggest")
def suggest(name: str = "", referral_store: ReferralStore = Depends(get_referral_store)):
    if len(name.strip()) < config.SUGGEST_MIN_CHARS:
        return {"suggestion": None}
    guess = suggest_service(name, referral_store.list_services(), min_chars=config.SUGGEST_MIN_CHARS)
    return {"suggestion": guess.to_dict() if guess else None}
