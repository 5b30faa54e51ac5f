from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(text: str | None) -> str:
    """Canonical matching key for a service name: lowercase ASCII letters and digits only."""
    if not text:
        return ""
    return _NON_ALNUM.sub("", str(text).lower())
