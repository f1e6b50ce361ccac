"""Location references - the map-independent side of OpenLR.

Each supported shape is its own frozen dataclass; LocationReference is the
union of all of them:
- GeoCoordinate: a single position
- Line: two or more LRPs with relative offsets
- PointAlongLine / Poi: a point on (or next to) the line between two LRPs
- Circle, Rectangle, Grid, Polygon: geometric areas
- ClosedLine: an area bounded by a closed line of LRPs

Constructors enforce the structural invariants of every shape, so an
instance can always be written to the wire unless one of its values does
not fit a quantized field.
"""

from dataclasses import dataclass
from enum import Enum

from openlr_toolkit.constants import FormatConfig, QuantizationConfig
from openlr_toolkit.errors import OutOfRangeError, UnrepresentableError
from openlr_toolkit.model.attributes import LineAttributes, Orientation, SideOfRoad
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.lrp import LocationReferencePoint


class LocationType(Enum):
    """Kind of location a reference describes."""

    GEO_COORDINATE = "GeoCoordinate"
    LINE = "Line"
    POINT_ALONG_LINE = "PointAlongLine"
    POI_WITH_ACCESS_POINT = "PoiWithAccessPoint"
    CIRCLE = "Circle"
    RECTANGLE = "Rectangle"
    GRID = "Grid"
    POLYGON = "Polygon"
    CLOSED_LINE = "ClosedLine"


def _check_range(value: float, name: str) -> None:
    if not 0.0 <= value < 1.0:
        raise OutOfRangeError(f"{name} offset must be a fraction in [0, 1), got {value}")


@dataclass(frozen=True)
class Offsets:
    """Relative offsets of a line reference.

    Attributes:
        pos: Positive offset as a fraction of the distance between the first two LRPs
        neg: Negative offset as a fraction of the distance between the last two LRPs
    """

    pos: float = 0.0
    neg: float = 0.0

    def __post_init__(self) -> None:
        _check_range(self.pos, "Positive")
        _check_range(self.neg, "Negative")

    def distance_from_start(self, lrp_length_m: float) -> float:
        """Positive offset in meters for the given first LRP length."""
        return self.pos * lrp_length_m

    def distance_to_end(self, lrp_length_m: float) -> float:
        """Negative offset in meters for the given last LRP length."""
        return self.neg * lrp_length_m


@dataclass(frozen=True)
class GeoCoordinate:
    """A single point location, no road network involved."""

    coordinate: Coordinate

    @property
    def location_type(self) -> LocationType:
        return LocationType.GEO_COORDINATE


@dataclass(frozen=True)
class Line:
    """A line location reference.

    Attributes:
        points: Ordered LRPs; every LRP but the last carries path attributes
        offsets: Relative positive/negative offsets
    """

    points: tuple[LocationReferencePoint, ...]
    offsets: Offsets = Offsets()

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) < FormatConfig.MIN_LINE_POINTS:
            raise UnrepresentableError(f"Line needs at least 2 LRPs, got {len(self.points)}")
        if any(point.is_last for point in self.points[:-1]):
            raise UnrepresentableError("Only the last LRP of a line may lack path attributes")
        if not self.points[-1].is_last:
            raise UnrepresentableError("The last LRP of a line cannot carry path attributes")
        for index, point in enumerate(self.points[1:-1], start=1):
            if point.dnp == 0:
                raise UnrepresentableError(f"Intermediate LRP {index} has a zero distance to next point")

    @property
    def location_type(self) -> LocationType:
        return LocationType.LINE


@dataclass(frozen=True)
class PointAlongLine:
    """A point on the line between two LRPs.

    Attributes:
        points: First LRP (with path attributes) and last LRP
        offset: Position of the point as a fraction of the LRP distance
        orientation: Direction of the point relative to the line
        side: Side of the road
    """

    points: tuple[LocationReferencePoint, LocationReferencePoint]
    offset: float = 0.0
    orientation: Orientation = Orientation.UNKNOWN
    side: SideOfRoad = SideOfRoad.ON_ROAD_OR_UNKNOWN

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) != 2:
            raise UnrepresentableError(f"PointAlongLine needs exactly 2 LRPs, got {len(self.points)}")
        if self.points[0].is_last or not self.points[1].is_last:
            raise UnrepresentableError("PointAlongLine needs path attributes on the first LRP only")
        _check_range(self.offset, "Point")

    @property
    def location_type(self) -> LocationType:
        return LocationType.POINT_ALONG_LINE


@dataclass(frozen=True)
class Poi:
    """A point of interest reached through an access point along a line."""

    point: PointAlongLine
    coordinate: Coordinate

    @property
    def location_type(self) -> LocationType:
        return LocationType.POI_WITH_ACCESS_POINT


@dataclass(frozen=True)
class Circle:
    """A circle area. The radius is in integer meters."""

    center: Coordinate
    radius: int

    def __post_init__(self) -> None:
        if not 0 <= self.radius <= QuantizationConfig.MAX_RADIUS_M:
            raise OutOfRangeError(f"Circle radius must fit into 32 bits, got {self.radius}")

    @property
    def location_type(self) -> LocationType:
        return LocationType.CIRCLE


@dataclass(frozen=True)
class Rectangle:
    """A rectangle area given by two opposite corners."""

    lower_left: Coordinate
    upper_right: Coordinate

    def __post_init__(self) -> None:
        if self.lower_left == self.upper_right:
            raise UnrepresentableError("Rectangle corners must differ")

    @property
    def location_type(self) -> LocationType:
        return LocationType.RECTANGLE


@dataclass(frozen=True)
class GridSize:
    """Number of columns and rows of a grid, each in [2, 65535]."""

    columns: int
    rows: int

    def __post_init__(self) -> None:
        for name, value in (("columns", self.columns), ("rows", self.rows)):
            if not FormatConfig.MIN_GRID_SIDE <= value <= QuantizationConfig.MAX_GRID_SIDE:
                raise OutOfRangeError(f"Grid {name} must be in [2, 65535], got {value}")


@dataclass(frozen=True)
class Grid:
    """A grid of equal rectangles; rect is the lower left cell."""

    rect: Rectangle
    size: GridSize

    @property
    def location_type(self) -> LocationType:
        return LocationType.GRID


@dataclass(frozen=True)
class Polygon:
    """A polygon area given by its corners (at least 3)."""

    corners: tuple[Coordinate, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "corners", tuple(self.corners))
        if len(self.corners) < FormatConfig.MIN_POLYGON_CORNERS:
            raise UnrepresentableError(f"Polygon needs at least 3 corners, got {len(self.corners)}")

    @property
    def location_type(self) -> LocationType:
        return LocationType.POLYGON


@dataclass(frozen=True)
class ClosedLine:
    """An area enclosed by a line that returns to its first LRP.

    Attributes:
        points: LRPs, all with path attributes; the closing LRP is implicit
        last_line: Attributes of the line entering the first LRP again
    """

    points: tuple[LocationReferencePoint, ...]
    last_line: LineAttributes

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        if len(self.points) < FormatConfig.MIN_CLOSED_LINE_POINTS:
            raise UnrepresentableError("ClosedLine needs at least 1 LRP")
        if any(point.is_last for point in self.points):
            raise UnrepresentableError("Every LRP of a closed line needs path attributes")

    @property
    def location_type(self) -> LocationType:
        return LocationType.CLOSED_LINE


LocationReference = GeoCoordinate | Line | PointAlongLine | Poi | Circle | Rectangle | Grid | Polygon | ClosedLine
