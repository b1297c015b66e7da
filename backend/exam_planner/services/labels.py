"""Labels for sessions that merge several modules or groups into one sitting."""
from __future__ import annotations

import re
from collections.abc import Iterable

LABEL_SEPARATOR = " + "
_QUALIFIER_SUFFIX = re.compile(r"\s*\(.*\)\s*$")


def merge_label(values: Iterable[str | None]) -> str:
    parts: list[str] = []
    for value in values:
        cleaned = (value or "").strip()
        if cleaned and cleaned not in parts:
            parts.append(cleaned)
    return LABEL_SEPARATOR.join(parts)


def split_label(label: str | None) -> list[str]:
    """Inverse of merge_label; drops display qualifiers such as "G1 (A-K)"."""
    parts: list[str] = []
    for raw in (label or "").split("+"):
        cleaned = _QUALIFIER_SUFFIX.sub("", raw).strip()
        if cleaned and cleaned not in parts:
            parts.append(cleaned)
    return parts
