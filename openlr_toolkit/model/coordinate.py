"""Coordinate - The geometry atom of every location reference.

A Coordinate is a WGS84 longitude/latitude pair in decimal degrees.
It is used for LRP positions, area corners, graph vertices and points
along edges.
"""

from dataclasses import dataclass

from openlr_toolkit.core.geo_calculator import GeoCalculator
from openlr_toolkit.errors import OutOfRangeError


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 position.

    Attributes:
        lon: Longitude in decimal degrees [-180, 180]
        lat: Latitude in decimal degrees [-90, 90]

    Example:
        point = Coordinate(lon=13.46112, lat=52.51711)
    """

    lon: float
    lat: float

    def __post_init__(self) -> None:
        """Validate the coordinate range."""
        if not -180.0 <= self.lon <= 180.0:
            raise OutOfRangeError(f"Longitude must be in [-180, 180], got {self.lon}")
        if not -90.0 <= self.lat <= 90.0:
            raise OutOfRangeError(f"Latitude must be in [-90, 90], got {self.lat}")

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) tuple - GeoJSON order."""
        return (self.lon, self.lat)

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle distance to another coordinate in meters."""
        return GeoCalculator.distance_m(self.lon, self.lat, other.lon, other.lat)

    def bearing_to(self, other: "Coordinate") -> float:
        """Initial bearing towards another coordinate in degrees [0, 360)."""
        return GeoCalculator.bearing_deg(self.lon, self.lat, other.lon, other.lat)

    def __repr__(self) -> str:
        return f"Coordinate(lon={self.lon:.7f}, lat={self.lat:.7f})"
