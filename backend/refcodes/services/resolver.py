"""Turn a free-text query into a service that has at least one usable code."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from refcodes.errors import NotFoundError
from refcodes.services.models import Service
from refcodes.services.normalize import normalize

logger = logging.getLogger(__name__)

FuzzyLookup = Callable[[str], Sequence[Service]]
CodeCounter = Callable[[str], int]


def find_exact_match(normalized_query: str, known_services: Iterable[Service]) -> Service | None:
    for service in known_services:
        if service.normalized_name == normalized_query and service.code_count > 0:
            return service
    return None


def resolve(
    query: str,
    known_services: Sequence[Service],
    fuzzy_lookup: FuzzyLookup,
    count_codes: CodeCounter,
) -> Service:
    """Exact match with codes first, then the first fuzzy candidate that has codes.

    Candidate order is whatever ``fuzzy_lookup`` returns; nothing is re-ranked.
    Raises NotFoundError when no service qualifies.
    """
    normalized = normalize(query)
    if not normalized:
        raise NotFoundError("No codes found for that service.")

    exact = find_exact_match(normalized, known_services)
    if exact is not None:
        logger.debug("resolve exact query=%s service=%s", normalized, exact.id)
        return exact

    candidates = fuzzy_lookup(normalized)
    for candidate in candidates:
        count = count_codes(candidate.id)
        if count > 0:
            logger.debug("resolve fuzzy query=%s service=%s codes=%d", normalized, candidate.id, count)
            return candidate.with_code_count(count)

    logger.info("resolve miss query=%s candidates=%d", normalized, len(candidates))
    raise NotFoundError("No codes found for that service.")
