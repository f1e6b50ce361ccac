"""Serialization of location references to OpenLR v3 binary and Base64.

Coordinates after the first are written relative to the previous one as the
reader will reconstruct it, so quantization errors do not accumulate along
a line. Rectangle and grid corners are always written absolute.
"""

import base64
import logging
import struct

from openlr_toolkit.binary.attributes import pack_attributes
from openlr_toolkit.constants import FormatConfig
from openlr_toolkit.core.quantization import Quantizer
from openlr_toolkit.errors import UnrepresentableError
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.location_reference import (
    Circle,
    ClosedLine,
    GeoCoordinate,
    Grid,
    Line,
    LocationReference,
    Poi,
    PointAlongLine,
    Polygon,
    Rectangle,
)
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


class BinaryWriter:
    """Big-endian buffer builder that tracks the decoded previous coordinate."""

    def __init__(self, location_type: int) -> None:
        self.buffer = bytearray()
        self.previous: Coordinate | None = None
        self.buffer.append(FormatConfig.VERSION + (location_type << FormatConfig.TYPE_SHIFT))

    def write_u8(self, value: int) -> None:
        self.buffer.append(value)

    def write_u16(self, value: int) -> None:
        self.buffer += struct.pack(">H", value)

    def write_absolute_coordinate(self, coordinate: Coordinate) -> None:
        lon = Quantizer.degrees_to_absolute(coordinate.lon)
        lat = Quantizer.degrees_to_absolute(coordinate.lat)
        self.buffer += lon.to_bytes(3, "big", signed=True)
        self.buffer += lat.to_bytes(3, "big", signed=True)
        self.previous = Coordinate(
            lon=Quantizer.absolute_to_degrees(lon),
            lat=Quantizer.absolute_to_degrees(lat),
        )

    def write_relative_coordinate(self, coordinate: Coordinate, previous: Coordinate | None = None) -> None:
        """Write a coordinate relative to `previous` (default: the last written one).

        Raises:
            OutOfRangeError: If a delta does not fit into 16 bits.
        """
        base = previous if previous is not None else self.previous
        lon = Quantizer.degrees_to_relative(coordinate.lon, base.lon)
        lat = Quantizer.degrees_to_relative(coordinate.lat, base.lat)
        self.buffer += struct.pack(">hh", lon, lat)
        self.previous = Coordinate(
            lon=Quantizer.relative_to_degrees(lon, base.lon),
            lat=Quantizer.relative_to_degrees(lat, base.lat),
        )

    def write_lrp(self, lrp: LocationReferencePoint, first_extra: int = 0, second_extra: int | None = None) -> None:
        """Write attributes and, for a non-last LRP, the distance to next point.

        The coordinate is written separately. `second_extra` defaults to the
        lfrcnp, or to 0 for a last LRP.
        """
        if lrp.path is None:
            self.buffer += pack_attributes(lrp.line, first_extra, second_extra or 0)
            return
        if second_extra is None:
            second_extra = int(lrp.path.lfrcnp)
        self.buffer += pack_attributes(lrp.line, first_extra, second_extra)
        self.write_u8(Quantizer.distance_to_byte(lrp.path.dnp))

    def to_bytes(self) -> bytes:
        return bytes(self.buffer)


# =============================================================================
# Variant bodies
# =============================================================================


def _offset_flags(pos: float, neg: float) -> int:
    flags = 0
    if pos > 0:
        flags |= FormatConfig.POS_OFFSET_FLAG
    if neg > 0:
        flags |= FormatConfig.NEG_OFFSET_FLAG
    return flags


def _write_line(reference: Line) -> bytes:
    writer = BinaryWriter(FormatConfig.TYPE_LINE)
    first, *middle, last = reference.points
    writer.write_absolute_coordinate(first.coordinate)
    writer.write_lrp(first)
    for lrp in middle:
        writer.write_relative_coordinate(lrp.coordinate)
        writer.write_lrp(lrp)

    offsets = reference.offsets
    writer.write_relative_coordinate(last.coordinate)
    writer.write_lrp(last, second_extra=_offset_flags(offsets.pos, offsets.neg))
    if offsets.pos > 0:
        writer.write_u8(Quantizer.offset_to_bucket(offsets.pos))
    if offsets.neg > 0:
        writer.write_u8(Quantizer.offset_to_bucket(offsets.neg))
    return writer.to_bytes()


def _write_point_along_line(writer: BinaryWriter, reference: PointAlongLine) -> None:
    first, last = reference.points
    writer.write_absolute_coordinate(first.coordinate)
    writer.write_lrp(first, first_extra=int(reference.orientation))
    writer.write_relative_coordinate(last.coordinate)
    writer.write_lrp(last, first_extra=int(reference.side), second_extra=_offset_flags(reference.offset, 0.0))
    if reference.offset > 0:
        writer.write_u8(Quantizer.offset_to_bucket(reference.offset))


def _write_polygon(reference: Polygon) -> bytes:
    writer = BinaryWriter(FormatConfig.TYPE_POLYGON)
    first, *rest = reference.corners
    writer.write_absolute_coordinate(first)
    for corner in rest:
        writer.write_relative_coordinate(corner)
    return writer.to_bytes()


def _write_closed_line(reference: ClosedLine) -> bytes:
    writer = BinaryWriter(FormatConfig.TYPE_CLOSED_LINE)
    first, *rest = reference.points
    writer.write_absolute_coordinate(first.coordinate)
    writer.write_lrp(first)
    for lrp in rest:
        writer.write_relative_coordinate(lrp.coordinate)
        writer.write_lrp(lrp)
    writer.buffer += pack_attributes(reference.last_line)
    return writer.to_bytes()


def _write_corners(writer: BinaryWriter, rect: Rectangle) -> None:
    writer.write_absolute_coordinate(rect.lower_left)
    writer.write_absolute_coordinate(rect.upper_right)


def _write_body(reference: LocationReference) -> bytes:
    if isinstance(reference, Line):
        return _write_line(reference)
    if isinstance(reference, GeoCoordinate):
        writer = BinaryWriter(FormatConfig.TYPE_GEO_COORDINATE)
        writer.write_absolute_coordinate(reference.coordinate)
        return writer.to_bytes()
    if isinstance(reference, PointAlongLine):
        writer = BinaryWriter(FormatConfig.TYPE_POINT)
        _write_point_along_line(writer, reference)
        return writer.to_bytes()
    if isinstance(reference, Poi):
        writer = BinaryWriter(FormatConfig.TYPE_POINT)
        _write_point_along_line(writer, reference.point)
        first = reference.point.points[0].coordinate
        anchor = Coordinate(
            lon=Quantizer.absolute_to_degrees(Quantizer.degrees_to_absolute(first.lon)),
            lat=Quantizer.absolute_to_degrees(Quantizer.degrees_to_absolute(first.lat)),
        )
        writer.write_relative_coordinate(reference.coordinate, previous=anchor)
        return writer.to_bytes()
    if isinstance(reference, Circle):
        writer = BinaryWriter(FormatConfig.TYPE_CIRCLE)
        writer.write_absolute_coordinate(reference.center)
        size = max(1, (reference.radius.bit_length() + 7) // 8)
        writer.buffer += reference.radius.to_bytes(size, "big")
        return writer.to_bytes()
    if isinstance(reference, Rectangle):
        writer = BinaryWriter(FormatConfig.TYPE_RECTANGLE)
        _write_corners(writer, reference)
        return writer.to_bytes()
    if isinstance(reference, Grid):
        writer = BinaryWriter(FormatConfig.TYPE_RECTANGLE)
        _write_corners(writer, reference.rect)
        writer.write_u16(reference.size.columns)
        writer.write_u16(reference.size.rows)
        return writer.to_bytes()
    if isinstance(reference, Polygon):
        return _write_polygon(reference)
    if isinstance(reference, ClosedLine):
        return _write_closed_line(reference)
    raise UnrepresentableError(f"Cannot serialize {type(reference).__name__}")


# =============================================================================
# Public API
# =============================================================================


def serialize(reference: LocationReference) -> bytes:
    """Write a location reference in the OpenLR v3 binary format.

    Raises:
        OutOfRangeError: If a value does not fit its field, e.g. a coordinate
            delta beyond the 16-bit relative range.
        UnrepresentableError: If the object is not a location reference.
    """
    data = _write_body(reference)
    logger.debug(f"Serialized {reference.location_type.value} into {len(data)} bytes")
    return data


def serialize_base64(reference: LocationReference) -> str:
    """Write a location reference as standard padded Base64 text."""
    return base64.b64encode(serialize(reference)).decode("ascii")


