from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from packages.address_pipeline.normalize import normalize_import_line
from packages.address_pipeline.types import AddressCandidate


_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_DIGIT = re.compile(r"\d")
_CIVIC_AND_STREET = re.compile(r"^(\d[\dA-Za-z\-]*)\s+(.+)$")


@dataclass(frozen=True)
class ImportDefaults:
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


def split_lines(text: str) -> List[str]:
    return _LINE_BREAK.split(str(text or ""))


def looks_like_address_line(line: str) -> bool:
    return len(line) >= 4 and _DIGIT.search(line) is not None


def parse_import_line(line: str) -> Dict[str, Optional[str]]:
    match = _CIVIC_AND_STREET.match(line)
    if match:
        return {"civic_number": match.group(1), "street": match.group(2), "label": None}
    return {"civic_number": None, "street": None, "label": line}


def parse_scan_text(text: str, defaults: Optional[ImportDefaults] = None) -> List[AddressCandidate]:
    """Turn a free-text block (typically OCR output) into address candidates.

    Lines are whitespace-normalized and deduplicated by exact string before
    classification, so a repeated non-address line is only inspected once.
    Lines without a digit or shorter than four characters are dropped.
    """
    defaults = defaults or ImportDefaults()
    seen: Set[str] = set()
    candidates: List[AddressCandidate] = []

    for raw_line in split_lines(text):
        line = normalize_import_line(raw_line)
        if not line or line in seen:
            continue
        seen.add(line)

        if not looks_like_address_line(line):
            continue

        parsed = parse_import_line(line)
        candidates.append(
            AddressCandidate(
                civic_number=parsed["civic_number"],
                street=parsed["street"],
                label=parsed["label"],
                city=defaults.city,
                region=defaults.region,
                postal_code=defaults.postal_code,
                country=defaults.country,
            )
        )
    return candidates
