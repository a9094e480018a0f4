"""Natural ("human") ordering of strings.

Digit runs compare by numeric value so `track9` sorts before `track10`.
"""

from __future__ import annotations

import re
from typing import Optional, Union

_DIGITS = re.compile(r"(\d+)")

NaturalKey = tuple[list[Union[str, int]], str]


def natural_key(value: str) -> NaturalKey:
    """Sort key splitting `value` into alternating text and number runs.

    Text runs compare case-insensitively; the raw string breaks ties so the
    order stays total.
    """
    parts = _DIGITS.split(value)
    # re.split with a capture group puts the digit runs at odd indexes
    chunks = [int(part) if i % 2 else part.casefold() for i, part in enumerate(parts)]
    return chunks, value


def optional_natural_key(value: Optional[str]) -> tuple:
    """Like `natural_key`, with None sorting after every string."""
    if value is None:
        return (1,)
    return (0, natural_key(value))


def natural_sorted(values, key=None) -> list:
    """Return `values` sorted naturally, optionally through `key`."""
    if key is None:
        return sorted(values, key=natural_key)
    return sorted(values, key=lambda v: natural_key(key(v)))
