"""Spherical geodesy for LRP distances and bearings.

OpenLR measures distances between LRPs and the bearing of a line leaving an
LRP on a sphere of radius 6,371 km. Arguments are always given longitude
first, matching the order of coordinates on the wire.
"""

from math import asin, atan2, cos, degrees, radians, sin, sqrt

EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static geodesic helpers. Degrees in, meters and degrees out."""

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def distance_m(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        """Great-circle (haversine) distance between two WGS84 positions in meters."""
        phi1, phi2 = radians(lat1), radians(lat2)
        half_chord = sin((phi2 - phi1) / 2) ** 2 + cos(phi1) * cos(phi2) * sin(radians(lon2 - lon1) / 2) ** 2
        return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(half_chord)))

    @staticmethod
    def bearing_deg(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        """Initial bearing from the first position towards the second.

        This is the bearing an LRP carries: the direction of the line leaving
        the LRP, clockwise from true North, in [0, 360).
        """
        phi1, phi2 = radians(lat1), radians(lat2)
        delta_lambda = radians(lon2 - lon1)
        east = sin(delta_lambda) * cos(phi2)
        north = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(delta_lambda)
        return degrees(atan2(east, north)) % 360.0

    @staticmethod
    def destination(lon: float, lat: float, bearing_deg: float, distance_m: float) -> tuple[float, float]:
        """Position reached after `distance_m` meters along `bearing_deg`.

        Returns:
            (lon, lat) in degrees.
        """
        theta = radians(bearing_deg)
        phi1 = radians(lat)
        angular = distance_m / EARTH_RADIUS_M

        phi2 = asin(sin(phi1) * cos(angular) + cos(phi1) * sin(angular) * cos(theta))
        delta_lambda = atan2(sin(theta) * sin(angular) * cos(phi1), cos(angular) - sin(phi1) * sin(phi2))
        return lon + degrees(delta_lambda), degrees(phi2)

    @staticmethod
    def bearing_difference(bearing_a: float, bearing_b: float) -> float:
        """Smallest angle in [0, 180] between two bearings, across the 0°/360° seam."""
        difference = abs(bearing_a - bearing_b) % 360.0
        return min(difference, 360.0 - difference)
