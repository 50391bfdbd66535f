from __future__ import annotations

import math
from typing import Any


def parse_number(raw: Any) -> float | None:
    """Parse a provider number such as ``"1,234.56"`` or ``"2.3%"``.

    Returns ``None`` for absent, unparseable or non-finite input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = raw.replace(",", "").replace("%", "").strip()
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None
