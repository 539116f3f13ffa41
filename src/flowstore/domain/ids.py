"""App identifier generation and validation.

App IDs are random version-4 UUID strings (``8-4-4-4-12`` lowercase hex).
Randomness comes from :mod:`random`, not :mod:`secrets`: IDs only need to
be unique across a single user's records, not unguessable.

INVARIANT: IDs are permanent. Once assigned, an app's ID never changes.
"""

from __future__ import annotations

import random
import re

APP_ID_PATTERN: re.Pattern[str] = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)

_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"
_default_rng = random.Random()


def new_id(rng: random.Random | None = None) -> str:
    """Generate a fresh app identifier.

    Every ``x`` in the template is a random hex digit; ``y`` is restricted
    to ``8``, ``9``, ``a`` or ``b`` (the RFC 4122 variant bits).
    Pass a seeded *rng* for reproducible output.
    """
    source = rng if rng is not None else _default_rng
    chars: list[str] = []
    for c in _TEMPLATE:
        if c == "x":
            chars.append(format(source.getrandbits(4), "x"))
        elif c == "y":
            chars.append(format(source.getrandbits(2) | 0x8, "x"))
        else:
            chars.append(c)
    return "".join(chars)


def is_app_id(value: str) -> bool:
    """Check whether *value* has the shape produced by :func:`new_id`."""
    return APP_ID_PATTERN.match(value) is not None
