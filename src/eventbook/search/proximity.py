"""
Geofenced proximity search.

Two decoupled steps:
1. Coarse filter: keep candidates inside an axis-aligned box of +/- `radius`
   degrees around the center. `radius` is compared against raw degree deltas,
   so the window is not a circle and covers less ground east-west as latitude
   grows.
2. Distance annotation: attach the haversine distance (km) from the center to
   every survivor. Order is preserved; callers sort or threshold by distance.

Candidates are opaque; callers pass `get_point` to read their coordinates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from eventbook.core.errors import NotFoundError
from eventbook.core.geo import GeoPoint, haversine_km

T = TypeVar("T")


@dataclass(frozen=True)
class GeoQuery:
    center: GeoPoint
    radius: float


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive latitude/longitude window in decimal degrees."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @classmethod
    def around(cls, center: GeoPoint, radius: float) -> "BoundingBox":
        r = float(radius)
        return cls(
            min_lat=center.lat - r,
            max_lat=center.lat + r,
            min_lon=center.lon - r,
            max_lon=center.lon + r,
        )

    def contains(self, point: GeoPoint) -> bool:
        return self.min_lat <= point.lat <= self.max_lat and self.min_lon <= point.lon <= self.max_lon


@dataclass(frozen=True)
class RankedCandidate(Generic[T]):
    item: T
    distance_km: float


def filter_bounding_box(
    query: GeoQuery,
    candidates: Iterable[T],
    *,
    get_point: Callable[[T], GeoPoint],
) -> list[T]:
    box = BoundingBox.around(query.center, query.radius)
    return [c for c in candidates if box.contains(get_point(c))]


def rank_by_distance(
    center: GeoPoint,
    candidates: Iterable[T],
    *,
    get_point: Callable[[T], GeoPoint],
) -> list[RankedCandidate[T]]:
    return [RankedCandidate(item=c, distance_km=haversine_km(center, get_point(c))) for c in candidates]


def search(
    query: GeoQuery,
    candidates: Iterable[T],
    *,
    get_point: Callable[[T], GeoPoint],
) -> list[RankedCandidate[T]]:
    """Filter `candidates` to the query box and annotate each with its distance.

    Raises:
        NotFoundError: If no candidate falls inside the box (an empty candidate
            set included).
    """
    nearby = filter_bounding_box(query, candidates, get_point=get_point)
    if not nearby:
        raise NotFoundError("Events not found")
    return rank_by_distance(query.center, nearby, get_point=get_point)
