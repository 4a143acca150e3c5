"""
geo.py — Point / Polygon value types for PostGIS columns
EcoSphere Seeder

All geometry text sent to the store is produced here. Coordinates are
(longitude, latitude) on WGS 84.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
from geoalchemy2.elements import WKTElement

SRID = 4326


def _fmt(v: float) -> str:
    return f"{v:.6f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class Point:
    lon: float
    lat: float

    def __post_init__(self):
        if not (-180 <= self.lon <= 180):
            raise ValueError("longitude must be between -180 and 180")
        if not (-90 <= self.lat <= 90):
            raise ValueError("latitude must be between -90 and 90")

    @classmethod
    def from_pair(cls, pair: Sequence[float]) -> "Point":
        if len(pair) != 2:
            raise ValueError(f"expected [lon, lat], got {list(pair)}")
        return cls(float(pair[0]), float(pair[1]))

    def to_wkt(self) -> str:
        return f"POINT({_fmt(self.lon)} {_fmt(self.lat)})"

    def to_element(self) -> WKTElement:
        return WKTElement(self.to_wkt(), srid=SRID)


@dataclass(frozen=True)
class Polygon:
    """Single closed exterior ring; no holes."""
    ring: Tuple[Point, ...]

    def __post_init__(self):
        if len(self.ring) < 2 or self.ring[0] != self.ring[-1]:
            raise ValueError("polygon ring must be closed (first point == last point)")
        distinct = set(self.ring[:-1])
        if len(distinct) < 4:
            raise ValueError(f"polygon ring needs at least 4 distinct vertices, got {len(distinct)}")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[float]]) -> "Polygon":
        return cls(tuple(Point.from_pair(p) for p in pairs))

    def bounds(self) -> Tuple[float, float, float, float]:
        lons = [p.lon for p in self.ring]
        lats = [p.lat for p in self.ring]
        return min(lons), min(lats), max(lons), max(lats)

    def bbox_contains(self, point: Point) -> bool:
        min_lon, min_lat, max_lon, max_lat = self.bounds()
        return min_lon <= point.lon <= max_lon and min_lat <= point.lat <= max_lat

    def to_wkt(self) -> str:
        coords = ", ".join(f"{_fmt(p.lon)} {_fmt(p.lat)}" for p in self.ring)
        return f"POLYGON(({coords}))"

    def to_element(self) -> WKTElement:
        return WKTElement(self.to_wkt(), srid=SRID)
