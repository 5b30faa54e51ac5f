"""Shuffled, no-repeat-until-exhausted presentation order for a service's codes."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple, TypeVar

from refcodes.errors import NotFoundError
from refcodes.services.models import Code

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> List[T]:
    """Fisher-Yates on a copy; the input is left untouched."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass(frozen=True)
class RotationState:
    codes: Tuple[Code, ...]
    cursor: int = 0

    @property
    def current(self) -> Code:
        return self.codes[self.cursor]

    @property
    def can_advance(self) -> bool:
        return len(self.codes) > 1


def start(codes: Sequence[Code], rng: random.Random | None = None) -> RotationState:
    active = [code for code in codes if code.is_active]
    if not active:
        raise NotFoundError("No codes found for that service.")
    return RotationState(codes=tuple(shuffle(active, rng)), cursor=0)


def advance(state: RotationState) -> RotationState:
    # A single code has nothing to rotate to; callers show the retry action as disabled.
    if not state.can_advance:
        return state
    return replace(state, cursor=(state.cursor + 1) % len(state.codes))


def add_copies(state: RotationState, code_id: str, delta: int) -> RotationState:
    """Raise one code's copy_count by ``delta`` on the current mirror, matched by id."""
    codes = tuple(
        replace(item, copy_count=item.copy_count + delta) if item.id == code_id else item
        for item in state.codes
    )
    return replace(state, codes=codes)
