"""Deserialization of OpenLR v3 binary and Base64 location references.

The message has no length prefix: the variant is chosen by the type
nibble of the header and, where two variants share a nibble, by the total
length. Every byte must be consumed; leftovers are malformed input.
"""

import base64
import binascii
import logging
import struct

from openlr_toolkit.binary.attributes import unpack_attributes
from openlr_toolkit.constants import FormatConfig
from openlr_toolkit.core.quantization import Quantizer
from openlr_toolkit.errors import EncodingError, MalformedInputError, OutOfRangeError, UnrepresentableError
from openlr_toolkit.model.attributes import Frc, Orientation, PathAttributes, SideOfRoad
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.location_reference import (
    Circle,
    ClosedLine,
    GeoCoordinate,
    Grid,
    GridSize,
    Line,
    LocationReference,
    Offsets,
    Poi,
    PointAlongLine,
    Polygon,
    Rectangle,
)
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


class BinaryReader:
    """Big-endian cursor over a location reference buffer.

    Every read raises MalformedInputError when the buffer is exhausted.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def _take(self, size: int) -> bytes:
        if self.remaining < size:
            raise MalformedInputError(
                f"Truncated input: needed {size} bytes at offset {self.position}, {self.remaining} left"
            )
        chunk = self.data[self.position : self.position + size]
        self.position += size
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u16(self) -> int:
        return struct.unpack(">H", self._take(2))[0]

    def read_i16(self) -> int:
        return struct.unpack(">h", self._take(2))[0]

    def read_i24(self) -> int:
        return int.from_bytes(self._take(3), "big", signed=True)

    def read_uint(self, size: int) -> int:
        return int.from_bytes(self._take(size), "big", signed=False)

    def read_absolute_coordinate(self) -> Coordinate:
        lon = Quantizer.absolute_to_degrees(self.read_i24())
        lat = Quantizer.absolute_to_degrees(self.read_i24())
        return Coordinate(lon=lon, lat=lat)

    def read_relative_coordinate(self, previous: Coordinate) -> Coordinate:
        lon = Quantizer.relative_to_degrees(self.read_i16(), previous.lon)
        lat = Quantizer.relative_to_degrees(self.read_i16(), previous.lat)
        return Coordinate(lon=lon, lat=lat)

    def read_attributes(self):
        return unpack_attributes(self.read_u8(), self.read_u8())

    def read_path(self, lfrcnp: int) -> PathAttributes:
        return PathAttributes(lfrcnp=Frc(lfrcnp), dnp=Quantizer.byte_to_distance(self.read_u8()))

    def expect_end(self) -> None:
        if self.remaining:
            raise MalformedInputError(f"{self.remaining} trailing bytes after the location reference")


# =============================================================================
# Variant bodies
# =============================================================================


def _read_line(reader: BinaryReader, size: int) -> Line:
    relative_count = (size - FormatConfig.LINE_FIXED_SIZE) // FormatConfig.LINE_RELATIVE_LRP_SIZE
    if relative_count < 1:
        raise MalformedInputError(f"Line reference of {size} bytes holds less than 2 LRPs")

    coordinate = reader.read_absolute_coordinate()
    line, _, lfrcnp = reader.read_attributes()
    points = [LocationReferencePoint(coordinate, line, reader.read_path(lfrcnp))]

    for _ in range(relative_count - 1):
        coordinate = reader.read_relative_coordinate(coordinate)
        line, _, lfrcnp = reader.read_attributes()
        points.append(LocationReferencePoint(coordinate, line, reader.read_path(lfrcnp)))

    coordinate = reader.read_relative_coordinate(coordinate)
    line, _, flags = reader.read_attributes()
    points.append(LocationReferencePoint(coordinate, line))

    pos = Quantizer.bucket_to_offset(reader.read_u8()) if flags & FormatConfig.POS_OFFSET_FLAG else 0.0
    neg = Quantizer.bucket_to_offset(reader.read_u8()) if flags & FormatConfig.NEG_OFFSET_FLAG else 0.0
    return Line(points=tuple(points), offsets=Offsets(pos=pos, neg=neg))


def _read_point_along_line(reader: BinaryReader) -> PointAlongLine:
    first_coordinate = reader.read_absolute_coordinate()
    line, orientation, lfrcnp = reader.read_attributes()
    first = LocationReferencePoint(first_coordinate, line, reader.read_path(lfrcnp))

    coordinate = reader.read_relative_coordinate(first_coordinate)
    line, side, flags = reader.read_attributes()
    last = LocationReferencePoint(coordinate, line)

    offset = Quantizer.bucket_to_offset(reader.read_u8()) if flags & FormatConfig.POS_OFFSET_FLAG else 0.0
    return PointAlongLine(
        points=(first, last),
        offset=offset,
        orientation=Orientation(orientation),
        side=SideOfRoad(side),
    )


def _read_poi(reader: BinaryReader) -> Poi:
    point = _read_point_along_line(reader)
    coordinate = reader.read_relative_coordinate(point.points[0].coordinate)
    return Poi(point=point, coordinate=coordinate)


def _read_circle(reader: BinaryReader) -> Circle:
    center = reader.read_absolute_coordinate()
    size = reader.remaining
    if not 1 <= size <= FormatConfig.RADIUS_MAX_SIZE:
        raise MalformedInputError(f"Circle radius must take 1 to 4 bytes, got {size}")
    return Circle(center=center, radius=reader.read_uint(size))


def _read_corners(reader: BinaryReader, absolute: bool) -> Rectangle:
    lower_left = reader.read_absolute_coordinate()
    if absolute:
        upper_right = reader.read_absolute_coordinate()
    else:
        upper_right = reader.read_relative_coordinate(lower_left)
    return Rectangle(lower_left=lower_left, upper_right=upper_right)


def _read_grid(reader: BinaryReader, size: int) -> Grid:
    rect = _read_corners(reader, absolute=size > FormatConfig.GRID_ABSOLUTE_MIN_EXCLUSIVE)
    columns = reader.read_u16()
    rows = reader.read_u16()
    return Grid(rect=rect, size=GridSize(columns=columns, rows=rows))


def _read_polygon(reader: BinaryReader, size: int) -> Polygon:
    relative_count = (size - FormatConfig.POLYGON_FIXED_SIZE) // FormatConfig.RELATIVE_COORDINATE_SIZE
    corners = [reader.read_absolute_coordinate()]
    for _ in range(relative_count):
        corners.append(reader.read_relative_coordinate(corners[-1]))
    return Polygon(corners=tuple(corners))


def _read_closed_line(reader: BinaryReader, size: int) -> ClosedLine:
    relative_count = (size - FormatConfig.CLOSED_LINE_FIXED_SIZE) // FormatConfig.LINE_RELATIVE_LRP_SIZE

    coordinate = reader.read_absolute_coordinate()
    line, _, lfrcnp = reader.read_attributes()
    points = [LocationReferencePoint(coordinate, line, reader.read_path(lfrcnp))]

    for _ in range(relative_count):
        coordinate = reader.read_relative_coordinate(coordinate)
        line, _, lfrcnp = reader.read_attributes()
        points.append(LocationReferencePoint(coordinate, line, reader.read_path(lfrcnp)))

    last_line, _, _ = reader.read_attributes()
    return ClosedLine(points=tuple(points), last_line=last_line)


def _read_body(reader: BinaryReader, location_type: int, size: int) -> LocationReference:
    if location_type == FormatConfig.TYPE_LINE:
        return _read_line(reader, size)
    if location_type == FormatConfig.TYPE_GEO_COORDINATE:
        return GeoCoordinate(coordinate=reader.read_absolute_coordinate())
    if location_type == FormatConfig.TYPE_POINT:
        if size > FormatConfig.POI_MIN_EXCLUSIVE:
            return _read_poi(reader)
        return _read_point_along_line(reader)
    if location_type == FormatConfig.TYPE_CIRCLE:
        return _read_circle(reader)
    if location_type == FormatConfig.TYPE_RECTANGLE:
        if size > FormatConfig.GRID_MIN_EXCLUSIVE:
            return _read_grid(reader, size)
        return _read_corners(reader, absolute=size > FormatConfig.RECTANGLE_ABSOLUTE_MIN_EXCLUSIVE)
    if location_type == FormatConfig.TYPE_POLYGON:
        return _read_polygon(reader, size)
    if location_type == FormatConfig.TYPE_CLOSED_LINE:
        return _read_closed_line(reader, size)
    raise MalformedInputError(f"Unknown location type {location_type}")


# =============================================================================
# Public API
# =============================================================================


def deserialize(data: bytes) -> LocationReference:
    """Parse a binary OpenLR v3 location reference.

    Args:
        data: The raw message, without any length prefix

    Returns:
        The location reference variant named by the header.

    Raises:
        MalformedInputError: On truncation, unknown version or type, trailing
            bytes, or a field that decodes to an invalid value.
    """
    reader = BinaryReader(data)
    header = reader.read_u8()
    version = header & FormatConfig.VERSION_MASK
    if version != FormatConfig.VERSION:
        raise MalformedInputError(f"Unsupported OpenLR version {version}, only {FormatConfig.VERSION} is supported")
    location_type = (header >> FormatConfig.TYPE_SHIFT) & FormatConfig.TYPE_MASK

    try:
        reference = _read_body(reader, location_type, len(reader.data))
    except (OutOfRangeError, UnrepresentableError) as e:
        raise MalformedInputError(f"Invalid location reference: {e}") from e
    reader.expect_end()

    logger.debug(f"Deserialized {reference.location_type.value} from {len(reader.data)} bytes")
    return reference


def deserialize_base64(text: str) -> LocationReference:
    """Parse a Base64 (standard alphabet, padded) location reference.

    Raises:
        EncodingError: If the text is not valid Base64.
        MalformedInputError: If the decoded bytes are not a valid reference.
    """
    try:
        data = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Invalid Base64 location reference {text!r}: {e}") from e
    return deserialize(data)
