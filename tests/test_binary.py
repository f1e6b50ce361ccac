"""Unit tests for the OpenLR v3 binary and Base64 codec.

Tests: deserialize / deserialize_base64 against known references of every
variant, serialize round trips, and rejection of malformed input.
"""

import base64

import pytest
from hypothesis import given, settings, strategies as st

from openlr_toolkit.binary import BinaryWriter, deserialize, deserialize_base64, serialize, serialize_base64
from openlr_toolkit.binary.attributes import pack_attributes, unpack_attributes
from openlr_toolkit.constants import FormatConfig
from openlr_toolkit.errors import EncodingError, MalformedInputError, OutOfRangeError
from openlr_toolkit.model.attributes import Fow, Frc, LineAttributes, Orientation, PathAttributes, SideOfRoad
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.location_reference import (
    Circle,
    ClosedLine,
    GeoCoordinate,
    Grid,
    GridSize,
    Line,
    LocationType,
    Offsets,
    Poi,
    PointAlongLine,
    Polygon,
    Rectangle,
)
from openlr_toolkit.model.lrp import LocationReferencePoint

EPS = 1e-5
COORDINATE_STEP = 360 / 2**24


def assert_coordinate(actual: Coordinate, lon: float, lat: float) -> None:
    assert actual.lon == pytest.approx(lon, abs=EPS)
    assert actual.lat == pytest.approx(lat, abs=EPS)


def assert_lrp(
    lrp: LocationReferencePoint,
    lon: float,
    lat: float,
    frc: Frc,
    fow: Fow,
    bearing: int,
    lfrcnp: Frc | None = None,
    dnp: int | None = None,
) -> None:
    assert_coordinate(lrp.coordinate, lon, lat)
    assert lrp.line == LineAttributes(frc=frc, fow=fow, bearing=bearing)
    if lfrcnp is None:
        assert lrp.path is None
    else:
        assert lrp.path == PathAttributes(lfrcnp=lfrcnp, dnp=dnp)


# =============================================================================
# ATTRIBUTE BYTES
# =============================================================================


class TestAttributeBytes:
    """Tests for the two attribute bytes after every LRP coordinate."""

    def test_pack_layout(self) -> None:
        """FOW, FRC and extra bits land in their documented bit positions."""
        line = LineAttributes(frc=Frc.FRC3, fow=Fow.MULTIPLE_CARRIAGEWAY, bearing=141)
        assert pack_attributes(line, first_extra=0, second_extra=3) == bytes((0x1A, 0x6C))

    def test_unpack_extra_bits(self) -> None:
        """Orientation bits and lfrcnp bits are returned alongside the line."""
        line, first_extra, second_extra = unpack_attributes(0b1001_0010, 0b0100_0110)
        assert line.frc == Frc.FRC2
        assert line.fow == Fow.MULTIPLE_CARRIAGEWAY
        assert line.bearing == 73
        assert first_extra == 2
        assert second_extra == 2

    def test_write_lrp_defaults(self) -> None:
        """Without explicit extra bits a first LRP carries its lfrcnp and a last LRP zero."""
        line = LineAttributes(frc=Frc.FRC3, fow=Fow.MULTIPLE_CARRIAGEWAY, bearing=141)
        coordinate = Coordinate(lon=13.4, lat=52.5)
        writer = BinaryWriter(FormatConfig.TYPE_LINE)

        writer.write_lrp(LocationReferencePoint(coordinate, line, PathAttributes(lfrcnp=Frc.FRC5, dnp=100)))
        writer.write_lrp(LocationReferencePoint(coordinate, line))

        data = writer.to_bytes()
        assert len(data) == 1 + 3 + 2
        assert data[1:3] == pack_attributes(line, first_extra=0, second_extra=5)
        assert data[4:6] == pack_attributes(line, first_extra=0, second_extra=0)


# =============================================================================
# LINE
# =============================================================================


class TestDeserializeLine:
    """Tests for line references."""

    def test_three_lrps_with_positive_offset(self) -> None:
        """Three LRPs, two relative, with a positive offset."""
        reference = deserialize_base64("CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1lE")

        assert isinstance(reference, Line)
        assert reference.location_type == LocationType.LINE
        first, second, last = reference.points
        assert_lrp(first, 6.1268198, 49.6085179, Frc.FRC3, Fow.MULTIPLE_CARRIAGEWAY, 141, Frc.FRC3, 557)
        assert_lrp(second, 6.1283698, 49.6039879, Frc.FRC3, Fow.SINGLE_CARRIAGEWAY, 231, Frc.FRC5, 264)
        assert_lrp(last, 6.1281598, 49.6030579, Frc.FRC5, Fow.SINGLE_CARRIAGEWAY, 287)
        assert reference.offsets.pos == pytest.approx(68.5 / 256)
        assert reference.offsets.neg == 0.0

    def test_roundabout_with_negative_offset(self) -> None:
        """Two LRPs, roundabout FOW, negative offset only."""
        reference = deserialize_base64("CwB67CGukRxiCACyAbwaMXU=")

        first, last = reference.points
        assert_lrp(first, 0.6752193, 47.3651612, Frc.FRC3, Fow.ROUNDABOUT, 28, Frc.FRC3, 498)
        assert_lrp(last, 0.6769993, 47.3696012, Frc.FRC3, Fow.MULTIPLE_CARRIAGEWAY, 197)
        assert reference.offsets.pos == 0.0
        assert reference.offsets.neg == pytest.approx(117.5 / 256)

    def test_identical_coordinates(self) -> None:
        """A zero relative delta puts the last LRP on the first one."""
        reference = deserialize_base64("CwcX6CItqAs6AQAAAAALGg==")

        first, last = reference.points
        assert_lrp(first, 9.9750602, 48.0632865, Frc.FRC1, Fow.SINGLE_CARRIAGEWAY, 298, Frc.FRC1, 88)
        assert_lrp(last, 9.9750602, 48.0632865, Frc.FRC1, Fow.SINGLE_CARRIAGEWAY, 298)
        assert reference.offsets == Offsets()

    def test_berlin_line(self) -> None:
        """Two LRPs on an FRC6 street without offsets."""
        reference = deserialize_base64("CwmShiVYczPJBgCs/y0zAQ==")

        first, last = reference.points
        assert_lrp(first, 13.4611166, 52.5171053, Frc.FRC6, Fow.SINGLE_CARRIAGEWAY, 107, Frc.FRC6, 381)
        assert_lrp(last, 13.4628366, 52.5149953, Frc.FRC6, Fow.SINGLE_CARRIAGEWAY, 17)


# =============================================================================
# POINT LOCATIONS
# =============================================================================


class TestDeserializePoints:
    """Tests for point along line and POI references."""

    def test_point_along_line(self) -> None:
        """17 bytes with type 5 is a point along line."""
        reference = deserialize_base64("K/6P+SKSuBJGGAUn/1gSUyM=")

        assert isinstance(reference, PointAlongLine)
        first, last = reference.points
        assert_lrp(first, -2.0216238, 48.6184394, Frc.FRC2, Fow.MULTIPLE_CARRIAGEWAY, 73, Frc.FRC2, 1436)
        assert_lrp(last, -2.0084338, 48.6167594, Frc.FRC2, Fow.MULTIPLE_CARRIAGEWAY, 219)
        assert reference.offset == pytest.approx(35.5 / 256)
        assert reference.orientation == Orientation.UNKNOWN
        assert reference.side == SideOfRoad.ON_ROAD_OR_UNKNOWN

    def test_point_along_line_near_end(self) -> None:
        """The largest offset bucket stays below a full LRP distance."""
        reference = deserialize_base64("KwBVwSCh+RRXAf/i/9AUXP8=")

        first, last = reference.points
        assert_lrp(first, 0.4710495, 45.8897316, Frc.FRC2, Fow.ROUNDABOUT, 264, Frc.FRC2, 88)
        assert_lrp(last, 0.4707495, 45.8892516, Frc.FRC2, Fow.ROUNDABOUT, 321)
        assert reference.offset == pytest.approx(255.5 / 256)

    def test_poi_with_access_point(self) -> None:
        """More than 17 bytes with type 5 carries a POI coordinate."""
        reference = deserialize_base64("KwOg5iUNnCOTAv+D/5QjQ1j/gP/r")

        assert isinstance(reference, Poi)
        assert reference.location_type == LocationType.POI_WITH_ACCESS_POINT
        first, last = reference.point.points
        assert_lrp(first, 5.1025808, 52.1059978, Frc.FRC4, Fow.SINGLE_CARRIAGEWAY, 219, Frc.FRC4, 147)
        assert_lrp(last, 5.1013308, 52.1049178, Frc.FRC4, Fow.SINGLE_CARRIAGEWAY, 39)
        assert reference.point.offset == pytest.approx(88.5 / 256)
        assert_coordinate(reference.coordinate, 5.1013008, 52.1057878)

    def test_geo_coordinate(self) -> None:
        """A geo coordinate is a header and one absolute coordinate."""
        reference = deserialize_base64("IyVUdwmSoA==")

        assert isinstance(reference, GeoCoordinate)
        assert_coordinate(reference.coordinate, 52.4952185, 13.4616745)

    def test_geo_coordinate_negative(self) -> None:
        """Negative 24-bit values decode to western and southern coordinates."""
        reference = deserialize_base64("I+djotZ9eA==")

        assert_coordinate(reference.coordinate, -34.6089399, -58.3732688)


# =============================================================================
# AREAS
# =============================================================================


class TestDeserializeAreas:
    """Tests for circle, rectangle, grid, polygon and closed line references."""

    def test_circle(self) -> None:
        """The radius takes the bytes left after the center."""
        reference = deserialize_base64("AwOgxCUNmwEs")

        assert isinstance(reference, Circle)
        assert_coordinate(reference.center, 5.1018512, 52.1059763)
        assert reference.radius == 300

    def test_circle_negative_center(self) -> None:
        reference = deserialize_base64("A/2lJCfIiAfQ")

        assert_coordinate(reference.center, -3.3115947, 55.9452903)
        assert reference.radius == 2000

    def test_rectangle_absolute(self) -> None:
        """13 bytes: both corners absolute."""
        reference = deserialize_base64("Qxl5HRKFDR33oB/agA==")

        assert isinstance(reference, Rectangle)
        assert_coordinate(reference.lower_left, 35.8215344, 26.0433590)
        assert_coordinate(reference.upper_right, 42.1414840, 44.7939956)

    def test_rectangle_relative(self) -> None:
        """11 bytes: upper right is relative to lower left."""
        reference = deserialize_base64("QwOgcSUNGgGIAX8=")

        assert_coordinate(reference.lower_left, 5.1000702, 52.1032083)
        assert_coordinate(reference.upper_right, 5.1039902, 52.1070383)

    def test_grid_absolute(self) -> None:
        """17 bytes: absolute corners plus columns and rows."""
        reference = deserialize_base64("Q/xfwiMc5QsGuyx13wILASg=")

        assert isinstance(reference, Grid)
        assert reference.location_type == LocationType.GRID
        assert_coordinate(reference.rect.lower_left, -5.0989759, 49.3774617)
        assert_coordinate(reference.rect.upper_right, 15.5057108, 62.5224745)
        assert reference.size == GridSize(columns=523, rows=296)

    def test_grid_relative(self) -> None:
        """15 bytes: relative upper right plus columns and rows."""
        reference = deserialize_base64("QwOgNiUM5wFVANsAAwAC")

        assert_coordinate(reference.rect.lower_left, 5.0988042, 52.1021140)
        assert_coordinate(reference.rect.upper_right, 5.1022142, 52.1043040)
        assert reference.size == GridSize(columns=3, rows=2)

    def test_polygon(self) -> None:
        """Every corner after the first is relative to the previous corner."""
        reference = deserialize_base64("EwOgUCUNEwJFAH//yAEv/vIAxw==")

        assert isinstance(reference, Polygon)
        assert len(reference.corners) == 4
        assert_coordinate(reference.corners[0], 5.0993621, 52.1030581)
        assert_coordinate(reference.corners[1], 5.1051721, 52.1043281)
        assert_coordinate(reference.corners[2], 5.1046121, 52.1073581)
        assert_coordinate(reference.corners[3], 5.1019121, 52.1093481)

    def test_closed_line(self) -> None:
        """The closing LRP is implied; only its line attributes are stored."""
        reference = deserialize_base64("WwRboCNGfhJrBAAJ/zkb9AgTFQ==")

        assert isinstance(reference, ClosedLine)
        first, second = reference.points
        assert_lrp(first, 6.1283004, 49.6059644, Frc.FRC2, Fow.MULTIPLE_CARRIAGEWAY, 129, Frc.FRC3, 264)
        assert_lrp(second, 6.1283904, 49.6039744, Frc.FRC3, Fow.SINGLE_CARRIAGEWAY, 231, Frc.FRC7, 498)
        assert reference.last_line == LineAttributes(frc=Frc.FRC2, fow=Fow.SINGLE_CARRIAGEWAY, bearing=242)


# =============================================================================
# ROUND TRIPS
# =============================================================================


class TestRoundTrip:
    """Tests that serialize(deserialize(x)) reproduces known references."""

    @pytest.mark.parametrize(
        "text",
        [
            "CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1lE",
            "CwB67CGukRxiCACyAbwaMXU=",
            "CwcX6CItqAs6AQAAAAALGg==",
            "CwmShiVYczPJBgCs/y0zAQ==",
            "K/6P+SKSuBJGGAUn/1gSUyM=",
            "KwBVwSCh+RRXAf/i/9AUXP8=",
            "KwOg5iUNnCOTAv+D/5QjQ1j/gP/r",
            "AwOgxCUNmwEs",
            "A/2lJCfIiAfQ",
            "Qxl5HRKFDR33oB/agA==",
            "Q/xfwiMc5QsGuyx13wILASg=",
            "EwOgUCUNEwJFAH//yAEv/vIAxw==",
            "WwRboCNGfhJrBAAJ/zkb9AgTFQ==",
            "I+djotZ9eA==",
            "IyVUdwmSoA==",
        ],
    )
    def test_byte_identical(self, text: str) -> None:
        """Re-serializing a decoded reference gives the same text."""
        assert serialize_base64(deserialize_base64(text)) == text

    @pytest.mark.parametrize("text", ["QwOgcSUNGgGIAX8=", "QwOgNiUM5wFVANsAAwAC"])
    def test_relative_corners_written_absolute(self, text: str) -> None:
        """Relative corners rewritten as absolute move by at most half a 24-bit step."""
        reference = deserialize_base64(text)
        rewritten = deserialize_base64(serialize_base64(reference))

        rect = reference if isinstance(reference, Rectangle) else reference.rect
        rewritten_rect = rewritten if isinstance(rewritten, Rectangle) else rewritten.rect
        assert rewritten.location_type == reference.location_type
        step = 360 / 2**24
        for actual, expected in ((rewritten_rect.lower_left, rect.lower_left), (rewritten_rect.upper_right, rect.upper_right)):
            assert actual.lon == pytest.approx(expected.lon, abs=step)
            assert actual.lat == pytest.approx(expected.lat, abs=step)

    def test_geo_coordinate_from_degrees(self) -> None:
        """Arbitrary degrees encode to the nearest 24-bit step."""
        reference = GeoCoordinate(coordinate=Coordinate(lon=13.090918, lat=52.466884))

        text = serialize_base64(reference)
        decoded = deserialize_base64(text)

        assert text == "IwlPISVPTw=="
        step = 360 / 2**24
        assert decoded.coordinate.lon == pytest.approx(13.090918, abs=step)
        assert decoded.coordinate.lat == pytest.approx(52.466884, abs=step)

    def test_point_along_line_keeps_orientation_and_side(self) -> None:
        """Orientation and side survive the two spare bit pairs."""
        reference = deserialize_base64("K/6P+SKSuBJGGAUn/1gSUyM=")
        modified = PointAlongLine(
            points=reference.points,
            offset=reference.offset,
            orientation=Orientation.BOTH,
            side=SideOfRoad.LEFT,
        )

        decoded = deserialize(serialize(modified))

        assert decoded.orientation == Orientation.BOTH
        assert decoded.side == SideOfRoad.LEFT
        assert decoded.points == reference.points

    def test_circle_radius_width(self) -> None:
        """The radius uses as few bytes as it needs."""
        center = Coordinate(lon=5.1013007, lat=52.1059923)
        assert len(serialize(Circle(center=center, radius=0))) == 8
        assert len(serialize(Circle(center=center, radius=255))) == 8
        assert len(serialize(Circle(center=center, radius=70_000))) == 10
        assert deserialize(serialize(Circle(center=center, radius=2**32 - 1))).radius == 2**32 - 1

    def test_relative_errors_do_not_accumulate(self) -> None:
        """Each delta is taken from the decoded previous point, not the original."""
        lrp_line = LineAttributes(frc=Frc.FRC3, fow=Fow.SINGLE_CARRIAGEWAY, bearing=90)
        path = PathAttributes(lfrcnp=Frc.FRC3, dnp=100)
        points = [
            LocationReferencePoint(Coordinate(lon=13.4 + i * 0.0012345678, lat=52.5 + i * 0.0008765432), lrp_line, path)
            for i in range(6)
        ]
        points.append(LocationReferencePoint(Coordinate(lon=13.4075, lat=52.5054), lrp_line))

        decoded = deserialize(serialize(Line(points=tuple(points))))

        # Relative points are within half a deca-micro degree of their originals
        for original, restored in zip(points[1:], decoded.points[1:]):
            assert restored.coordinate.lon == pytest.approx(original.coordinate.lon, abs=5.1e-6)
            assert restored.coordinate.lat == pytest.approx(original.coordinate.lat, abs=5.1e-6)


@st.composite
def line_references(draw) -> Line:
    """Lines of 2 to 6 LRPs whose deltas fit relative coordinates."""
    count = draw(st.integers(min_value=2, max_value=6))
    lon = draw(st.floats(min_value=-175.0, max_value=175.0))
    lat = draw(st.floats(min_value=-85.0, max_value=85.0))
    points = []
    for index in range(count):
        if index:
            lon += draw(st.floats(min_value=-0.3, max_value=0.3))
            lat += draw(st.floats(min_value=-0.3, max_value=0.3))
        line = LineAttributes(
            frc=draw(st.sampled_from(Frc)),
            fow=draw(st.sampled_from(Fow)),
            bearing=draw(st.integers(min_value=0, max_value=359)),
        )
        path = None
        if index < count - 1:
            path = PathAttributes(lfrcnp=draw(st.sampled_from(Frc)), dnp=draw(st.integers(min_value=1, max_value=15000)))
        points.append(LocationReferencePoint(Coordinate(lon=lon, lat=lat), line, path))
    offsets = Offsets(
        pos=draw(st.floats(min_value=0.0, max_value=0.999)),
        neg=draw(st.floats(min_value=0.0, max_value=0.999)),
    )
    return Line(points=tuple(points), offsets=offsets)


class TestLineRoundTrip:
    """deserialize(serialize(line)) for arbitrary lines."""

    @given(reference=line_references())
    @settings(max_examples=200)
    def test_values_within_quantization(self, reference: Line) -> None:
        decoded = deserialize(serialize(reference))

        assert decoded.location_type == LocationType.LINE
        assert len(decoded.points) == len(reference.points)

        first, restored_first = reference.points[0], decoded.points[0]
        assert abs(restored_first.coordinate.lon - first.coordinate.lon) <= COORDINATE_STEP / 2 + 1e-9
        assert abs(restored_first.coordinate.lat - first.coordinate.lat) <= COORDINATE_STEP / 2 + 1e-9
        for original, restored in zip(reference.points[1:], decoded.points[1:]):
            assert restored.coordinate.lon == pytest.approx(original.coordinate.lon, abs=5.1e-6)
            assert restored.coordinate.lat == pytest.approx(original.coordinate.lat, abs=5.1e-6)

        for original, restored in zip(reference.points, decoded.points):
            assert restored.line.frc == original.line.frc
            assert restored.line.fow == original.line.fow
            # Sector midpoints, clamped at sectors 0 and 31
            assert abs(restored.line.bearing - original.line.bearing) <= 6
            if original.is_last:
                assert restored.is_last
            else:
                assert restored.path.lfrcnp == original.path.lfrcnp
                # 58.6 m intervals
                assert abs(restored.dnp - original.dnp) <= 30

        assert decoded.offsets.pos == pytest.approx(reference.offsets.pos, abs=1 / 256)
        assert decoded.offsets.neg == pytest.approx(reference.offsets.neg, abs=1 / 256)

    @given(reference=line_references())
    @settings(max_examples=100)
    def test_serialization_is_stable(self, reference: Line) -> None:
        """A decoded line serializes back to exactly the bytes it came from."""
        data = serialize(reference)
        assert serialize(deserialize(data)) == data


# =============================================================================
# MALFORMED INPUT
# =============================================================================


class TestRejection:
    """Tests that invalid input raises the documented errors."""

    @pytest.mark.parametrize("text", ["CQcm6yX4vTPGFwM7AskzCw==", "CgRbWyNG9BpsCQCb/jsbtAT/6/+jK1kC"])
    def test_unsupported_version(self, text: str) -> None:
        """Versions 1 and 2 are rejected."""
        with pytest.raises(MalformedInputError, match="version"):
            deserialize_base64(text)

    def test_unknown_type(self) -> None:
        with pytest.raises(MalformedInputError, match="Unknown location type"):
            deserialize_base64("ewGkNSK5Wg==")

    def test_empty_input(self) -> None:
        with pytest.raises(MalformedInputError):
            deserialize(b"")

    def test_truncated(self) -> None:
        """A missing offset byte is truncation."""
        data = base64.b64decode("CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1lE")
        with pytest.raises(MalformedInputError, match="Truncated"):
            deserialize(data[:-1])

    def test_trailing_bytes(self) -> None:
        data = base64.b64decode("CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1lE")
        with pytest.raises(MalformedInputError, match="trailing"):
            deserialize(data + b"\x00")

    def test_line_too_short(self) -> None:
        """A line needs room for at least two LRPs."""
        data = base64.b64decode("CwmShiVYczPJBgCs/y0zAQ==")
        with pytest.raises(MalformedInputError):
            deserialize(data[:12])

    def test_circle_radius_too_wide(self) -> None:
        data = base64.b64decode("AwOgxCUNmwEs")
        with pytest.raises(MalformedInputError, match="radius"):
            deserialize(data + b"\x00\x00\x00")

    def test_grid_side_too_small(self) -> None:
        """A grid with one column decodes to an invalid value."""
        data = bytearray(base64.b64decode("QwOgNiUM5wFVANsAAwAC"))
        data[-3] = 1  # columns = 1
        with pytest.raises(MalformedInputError):
            deserialize(bytes(data))

    @pytest.mark.parametrize("text", ["not base64!", "CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1l", "Cw=R"])
    def test_invalid_base64(self, text: str) -> None:
        with pytest.raises(EncodingError):
            deserialize_base64(text)

    def test_relative_delta_overflow(self) -> None:
        """LRPs more than 0.32767° apart cannot be written."""
        line = LineAttributes(frc=Frc.FRC3, fow=Fow.SINGLE_CARRIAGEWAY, bearing=90)
        reference = Line(
            points=(
                LocationReferencePoint(Coordinate(lon=13.0, lat=52.5), line, PathAttributes(Frc.FRC3, 15000)),
                LocationReferencePoint(Coordinate(lon=14.0, lat=52.5), line),
            )
        )
        with pytest.raises(OutOfRangeError):
            serialize(reference)
