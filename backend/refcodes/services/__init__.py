from refcodes.services.normalize import normalize
from refcodes.services.resolver import resolve
from refcodes.services.rotation import RotationState, advance, start

__all__ = [
    "RotationState",
    "advance",
    "normalize",
    "resolve",
    "start",
]
