from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from refcodes import config
from refcodes.services.admin import AdminModerationView
from refcodes.services.repository import ReferralStore, get_referral_store

router = APIRouter(prefix="/admin", tags=["admin"])


def admin_view(
    x_admin_password: str | None = Header(None),
    referral_store: ReferralStore = Depends(get_referral_store),
) -> AdminModerationView:
    view = AdminModerationView(referral_store, config.ADMIN_PASSWORD)
    view.authorize(x_admin_password)
    return view


@router.get("/codes")
def list_codes(view: AdminModerationView = Depends(admin_view)):
    return {"items": [entry.to_dict() for entry in view.load()]}


@router.delete("/codes/{code_id}")
def delete_code(code_id: str, view: AdminModerationView = Depends(admin_view)):
    view.delete(code_id)
    return {"status": "ok", "deleted": code_id}


@router.post("/codes/{code_id}/reactivate")
def reactivate_code(code_id: str, view: AdminModerationView = Depends(admin_view)):
    view.load()
    entry = view.reactivate(code_id)
    return {"status": "ok", "code": entry.to_dict()}
