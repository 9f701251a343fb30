"""
Nearest-Facility Ranking.

Computes great-circle distances (spherical law of cosines) from a query
point to every facility in a catalog snapshot and returns the K nearest,
nearest first. Everything here is pure; no module state is touched.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from chatbot.errors import InvalidInput


# Statute miles per degree of arc (60 nautical miles × 1.1515).
MILES_PER_DEGREE = 60 * 1.1515
KILOMETERS_PER_MILE = 1.609344
NAUTICAL_MILES_PER_MILE = 0.8684


class DistanceUnit(Enum):
    """Units a distance can be reported in."""

    MILES = "miles"
    KILOMETERS = "kilometers"
    NAUTICAL_MILES = "nautical_miles"

    @property
    def abbreviation(self) -> str:
        return UNIT_ABBREVIATIONS[self]


UNIT_ABBREVIATIONS: dict[DistanceUnit, str] = {
    DistanceUnit.MILES: "mi",
    DistanceUnit.KILOMETERS: "km",
    DistanceUnit.NAUTICAL_MILES: "nmi",
}

UNIT_FACTORS: dict[DistanceUnit, float] = {
    DistanceUnit.MILES: 1.0,
    DistanceUnit.KILOMETERS: KILOMETERS_PER_MILE,
    DistanceUnit.NAUTICAL_MILES: NAUTICAL_MILES_PER_MILE,
}


@dataclass(frozen=True)
class Facility:
    """A clinic or provider location from the catalog."""

    name: str
    source: str
    specialty: str
    street: str
    city: str
    county: str
    region: str
    postal_code: str
    phone: str
    longitude: float
    latitude: float

    @property
    def address(self) -> str:
        return f"{self.street}, {self.city}, {self.region} {self.postal_code}"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "source": self.source,
            "specialty": self.specialty,
            "street": self.street,
            "city": self.city,
            "county": self.county,
            "region": self.region,
            "postal_code": self.postal_code,
            "phone": self.phone,
            "longitude": self.longitude,
            "latitude": self.latitude,
        }


@dataclass(frozen=True)
class QueryPoint:
    longitude: float
    latitude: float


@dataclass(frozen=True)
class RankedResult:
    """A facility together with its distance from the query point."""

    facility: Facility
    distance: float
    unit: DistanceUnit

    def to_dict(self) -> dict:
        return {
            "facility": self.facility.to_dict(),
            "distance": self.distance,
            "unit": self.unit.value,
        }


def coerce_unit(unit: "DistanceUnit | str") -> DistanceUnit:
    """Accept a DistanceUnit or its string value."""
    if isinstance(unit, DistanceUnit):
        return unit
    try:
        return DistanceUnit(str(unit).strip().lower())
    except ValueError:
        valid = ", ".join(u.value for u in DistanceUnit)
        raise InvalidInput(f"Unknown distance unit {unit!r} (expected one of: {valid})") from None


def distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    unit: "DistanceUnit | str" = DistanceUnit.MILES,
) -> float:
    """
    Great-circle distance between two points, in the requested unit.

    Uses the spherical law of cosines. The cosine argument is clamped to
    [-1, 1] so floating-point drift near identical or antipodal points can
    never push acos out of its domain.
    """
    unit = coerce_unit(unit)
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    rlat1 = math.pi * lat1 / 180
    rlat2 = math.pi * lat2 / 180
    theta = lon1 - lon2
    rtheta = math.pi * theta / 180

    cos_arg = (
        math.sin(rlat1) * math.sin(rlat2)
        + math.cos(rlat1) * math.cos(rlat2) * math.cos(rtheta)
    )
    cos_arg = max(-1.0, min(1.0, cos_arg))

    dist_degrees = math.acos(cos_arg) * 180 / math.pi
    miles = dist_degrees * MILES_PER_DEGREE
    return miles * UNIT_FACTORS[unit]


def parse_query_point(text: str) -> QueryPoint:
    """Parse the "<lon>|<lat>" location format into a QueryPoint."""
    if text is None:
        raise InvalidInput("No location given")

    parts = str(text).strip().split("|")
    if len(parts) != 2:
        raise InvalidInput(
            f"Location must look like '<longitude>|<latitude>', got {text!r}"
        )

    try:
        longitude = float(parts[0].strip())
        latitude = float(parts[1].strip())
    except ValueError:
        raise InvalidInput(f"Location coordinates must be numbers, got {text!r}") from None

    point = QueryPoint(longitude=longitude, latitude=latitude)
    _check_finite(point)
    return point


def _check_finite(point: QueryPoint) -> None:
    if not (math.isfinite(point.longitude) and math.isfinite(point.latitude)):
        raise InvalidInput(
            f"Query coordinates must be finite, got "
            f"({point.longitude}, {point.latitude})"
        )


def rank(
    catalog: Sequence[Facility],
    query_point: QueryPoint,
    unit: "DistanceUnit | str" = DistanceUnit.MILES,
    k: int = 3,
) -> list[RankedResult]:
    """
    Return the k facilities nearest to query_point, nearest first.

    Ties keep their catalog order. If k exceeds the catalog size the whole
    catalog is returned, fully ordered.
    """
    if not catalog:
        raise InvalidInput("Cannot rank an empty catalog")
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise InvalidInput(f"k must be a positive integer, got {k!r}")
    _check_finite(query_point)
    unit = coerce_unit(unit)

    scored = [
        RankedResult(
            facility=facility,
            distance=distance(
                facility.latitude,
                facility.longitude,
                query_point.latitude,
                query_point.longitude,
                unit,
            ),
            unit=unit,
        )
        for facility in catalog
    ]
    # sorted() is stable, so equal distances keep catalog order
    scored = sorted(scored, key=lambda result: result.distance)
    return scored[:k]
