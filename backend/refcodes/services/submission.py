from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from refcodes.errors import ValidationError
from refcodes.services.models import STATUS_ACTIVE, Code, Service
from refcodes.services.normalize import normalize
from refcodes.services.repository import ReferralStore

logger = logging.getLogger(__name__)

SUGGEST_PREFIX_CHARS = 4


@dataclass(frozen=True)
class CodeSubmission:
    service_name: str
    code_text: str
    description: str = ""
    country: str | None = None
    validity_date: str | None = None


def _blank_to_none(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def suggest_service(name: str, services: Iterable[Service], min_chars: int = 3) -> Service | None:
    """Likely existing service for a half-typed name on the submission form.

    Nothing is suggested for short input or when the name already matches a
    service exactly.
    """
    if len((name or "").strip()) < min_chars:
        return None
    normalized = normalize(name)
    if not normalized:
        return None
    services = list(services)
    if any(service.normalized_name == normalized for service in services):
        return None
    for service in services:
        prefix = service.normalized_name[:SUGGEST_PREFIX_CHARS]
        if prefix and prefix in normalized:
            return service
    return None


def submit_code(store: ReferralStore, submission: CodeSubmission) -> Code:
    service_name = (submission.service_name or "").strip()
    code_text = (submission.code_text or "").strip()
    if not service_name:
        raise ValidationError("Service name is required")
    if not code_text:
        raise ValidationError("Code is required")
    normalized = normalize(service_name)
    if not normalized:
        raise ValidationError("Service name must contain letters or digits")

    country = _blank_to_none(submission.country)
    service = store.find_service_by_normalized_name(normalized)
    if service is None:
        service = store.insert_service(service_name, normalized, country)
        logger.info("created service id=%s normalized=%s", service.id, normalized)

    code = store.insert_code({
        "service_id": service.id,
        "code_text": code_text,
        "description": (submission.description or "").strip(),
        "country": country,
        "validity_date": _blank_to_none(submission.validity_date),
        "status": STATUS_ACTIVE,
    })
    logger.info("submitted code id=%s service=%s", code.id, service.id)
    return code
