"""Quantization of coordinates, bearings, distances and offsets.

The OpenLR v3 wire format stores every physical value in a fixed bit width:
- Absolute coordinates: 24-bit signed integer per axis
- Relative coordinates: 16-bit signed delta in deca-micro degrees
- Bearings: 5-bit sector index (32 sectors of 11.25°)
- Distance to next point: 8-bit interval index (58.6 m per interval)
- Offsets: 8-bit bucket of the LRP length (256 buckets)

Quantization is lossy by nature of the format. Decoding returns the
midpoint of the interval, so a round trip is off by at most half an
interval. All rounding is half away from zero.
"""

import math

from openlr_toolkit.constants import QuantizationConfig
from openlr_toolkit.errors import OutOfRangeError

_COORDINATE_SCALE = float(1 << QuantizationConfig.COORDINATE_RESOLUTION_BITS)
_ABSOLUTE_MAX = (1 << (QuantizationConfig.COORDINATE_RESOLUTION_BITS - 1)) - 1
_HALF_SECTOR = QuantizationConfig.BEARING_SECTOR_DEG / 2


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _signum(value: float) -> float:
    if value == 0:
        return 0.0
    return math.copysign(1.0, value)


class Quantizer:
    """Static conversions between physical values and their wire integers."""

    # =========================================================================
    # Coordinates
    # =========================================================================

    @staticmethod
    def degrees_to_absolute(degrees: float) -> int:
        """Convert degrees to the signed 24-bit absolute representation.

        +180° lies one step beyond the 24-bit range and is clamped to the
        largest value, which decodes to just below 180°.
        """
        value = _signum(degrees) * 0.5 + degrees * _COORDINATE_SCALE / 360.0
        return max(-_ABSOLUTE_MAX - 1, min(_ABSOLUTE_MAX, round_half_away(value)))

    @staticmethod
    def absolute_to_degrees(value: int) -> float:
        """Convert a signed 24-bit absolute value back to degrees."""
        return ((value - _signum(value) * 0.5) * 360.0) / _COORDINATE_SCALE

    @staticmethod
    def degrees_to_relative(degrees: float, previous_degrees: float) -> int:
        """Convert degrees to a signed 16-bit delta from the previous coordinate.

        Raises:
            OutOfRangeError: If the delta does not fit into 16 bits.
        """
        delta = round_half_away(QuantizationConfig.RELATIVE_COORDINATE_FACTOR * (degrees - previous_degrees))
        if not QuantizationConfig.RELATIVE_COORDINATE_MIN <= delta <= QuantizationConfig.RELATIVE_COORDINATE_MAX:
            raise OutOfRangeError(
                f"Relative coordinate delta {degrees - previous_degrees:.6f}° exceeds the 16-bit range "
                f"(±{QuantizationConfig.RELATIVE_COORDINATE_MAX / QuantizationConfig.RELATIVE_COORDINATE_FACTOR}°)"
            )
        return delta

    @staticmethod
    def relative_to_degrees(value: int, previous_degrees: float) -> float:
        """Convert a signed 16-bit delta back to degrees."""
        return previous_degrees + value / QuantizationConfig.RELATIVE_COORDINATE_FACTOR

    @staticmethod
    def relative_fits(degrees: float, previous_degrees: float) -> bool:
        """True if the delta between two values is representable as a relative coordinate."""
        delta = round_half_away(QuantizationConfig.RELATIVE_COORDINATE_FACTOR * (degrees - previous_degrees))
        return QuantizationConfig.RELATIVE_COORDINATE_MIN <= delta <= QuantizationConfig.RELATIVE_COORDINATE_MAX

    # =========================================================================
    # Bearing
    # =========================================================================

    @staticmethod
    def bearing_to_sector(bearing_deg: int) -> int:
        """Convert an integer bearing in [0, 360) to its sector index 0..31.

        Raises:
            OutOfRangeError: If the bearing is outside [0, 360).
        """
        if not 0 <= bearing_deg < 360:
            raise OutOfRangeError(f"Bearing must be in [0, 360), got {bearing_deg}")
        sector = round_half_away((bearing_deg - _HALF_SECTOR) / QuantizationConfig.BEARING_SECTOR_DEG)
        return max(0, min(QuantizationConfig.BEARING_SECTORS - 1, sector))

    @staticmethod
    def sector_to_bearing(sector: int) -> int:
        """Convert a sector index to the integer bearing at the sector midpoint."""
        return round_half_away(sector * QuantizationConfig.BEARING_SECTOR_DEG + _HALF_SECTOR)

    # =========================================================================
    # Distance to next point
    # =========================================================================

    @staticmethod
    def distance_to_byte(distance_m: int) -> int:
        """Convert a distance to next point (meters) to its interval index.

        Raises:
            OutOfRangeError: If the distance is negative or above 15000 m.
        """
        if not 0 <= distance_m <= QuantizationConfig.MAX_LRP_DISTANCE_M:
            raise OutOfRangeError(
                f"Distance to next point must be in [0, {QuantizationConfig.MAX_LRP_DISTANCE_M}] m, got {distance_m}"
            )
        interval = round_half_away(distance_m / QuantizationConfig.DISTANCE_PER_INTERVAL_M - 0.5)
        return max(0, interval)

    @staticmethod
    def byte_to_distance(value: int) -> int:
        """Convert an interval index back to meters (interval midpoint)."""
        return round_half_away((value + 0.5) * QuantizationConfig.DISTANCE_PER_INTERVAL_M)

    # =========================================================================
    # Offsets
    # =========================================================================

    @staticmethod
    def offset_to_bucket(offset_range: float) -> int:
        """Convert a relative offset in [0, 1) to its bucket index.

        Raises:
            OutOfRangeError: If the range is outside [0, 1).
        """
        if not 0.0 <= offset_range < 1.0:
            raise OutOfRangeError(f"Relative offset must be in [0, 1), got {offset_range}")
        if offset_range == 0.0:
            return 0
        bucket = round_half_away(offset_range * QuantizationConfig.OFFSET_BUCKETS - 0.5)
        return max(0, min(QuantizationConfig.OFFSET_BUCKETS - 1, bucket))

    @staticmethod
    def bucket_to_offset(bucket: int) -> float:
        """Convert a bucket index back to a relative offset (bucket midpoint)."""
        return (bucket + 0.5) / QuantizationConfig.OFFSET_BUCKETS
