from __future__ import annotations

import re
import unicodedata
from typing import Optional


_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
# Letters NFKD cannot decompose into an ASCII base.
_FOLD = str.maketrans({"ß": "ss", "ł": "l", "ø": "o", "æ": "ae", "œ": "oe", "đ": "d", "ð": "d", "þ": "th", "ı": "i"})


def normalize_import_line(line: str) -> str:
    return _WHITESPACE.sub(" ", str(line or "")).strip()


def normalize_place_name(value: Optional[str]) -> str:
    text = str(value or "").strip()
    if not text:
        return ""

    lowered = text.lower().translate(_FOLD)
    # Fold accents to their base letters; anything that is still non-ASCII is dropped.
    decomposed = unicodedata.normalize("NFKD", lowered)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    folded = folded.encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub(" ", folded).strip()


def normalize_street_name(value: Optional[str]) -> str:
    return normalize_place_name(value)
