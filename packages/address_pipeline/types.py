from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class AddressCandidate:
    civic_number: Optional[str] = None
    street: Optional[str] = None
    label: Optional[str] = None
    unit: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    def is_retainable(self) -> bool:
        return bool(self.street) or bool(self.label)

    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


def _decimal(value: float) -> str:
    # Overpass QL has no exponent notation; 7 places matches stored precision.
    text = f"{float(value):.7f}".rstrip("0")
    return text + "0" if text.endswith(".") else text


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    @classmethod
    def from_corners(cls, a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> "BoundingBox":
        # Corners may arrive in any order; each axis is sorted independently.
        return cls(
            min_lat=min(a_lat, b_lat),
            min_lng=min(a_lng, b_lng),
            max_lat=max(a_lat, b_lat),
            max_lng=max(a_lng, b_lng),
        )

    def as_overpass(self) -> str:
        return ",".join(_decimal(v) for v in (self.min_lat, self.min_lng, self.max_lat, self.max_lng))


@dataclass(frozen=True)
class PlaceHints:
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
