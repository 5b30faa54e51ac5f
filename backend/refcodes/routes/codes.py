from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from refcodes.services.repository import ReferralStore, get_referral_store
from refcodes.services.submission import CodeSubmission, submit_code

router = APIRouter(prefix="/codes", tags=["codes"])


class CodeSubmissionPayload(BaseModel):
    service_name: str = Field(max_length=200)
    code_text: str = Field(max_length=500)
    description: str = Field(default="", max_length=1000)
    country: str | None = Field(default=None, max_length=100)
    validity_date: str | None = None


@router.post("", status_code=201)
def create_code(payload: CodeSubmissionPayload, referral_store: ReferralStore = Depends(get_referral_store)):
    code = submit_code(referral_store, CodeSubmission(**payload.model_dump()))
    return {"status": "ok", "code": code.to_dict()}
