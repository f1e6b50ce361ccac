"""Locations on a concrete road network.

These are what the decoder returns and the encoder consumes. Paths are
tuples of host-graph edge ids; offsets are in meters.
"""

from collections.abc import Hashable
from dataclasses import dataclass

from openlr_toolkit.model.attributes import Orientation, SideOfRoad
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.location_reference import GeoCoordinate


@dataclass(frozen=True)
class LineLocation:
    """A path through the graph, trimmed by offsets.

    Attributes:
        path: Consecutive edge ids
        pos_offset: Meters cut from the start of the first edge
        neg_offset: Meters cut from the end of the last edge
    """

    path: tuple[Hashable, ...]
    pos_offset: float = 0.0
    neg_offset: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))

    def __repr__(self) -> str:
        return f"LineLocation({len(self.path)} edges, +{self.pos_offset:.1f}m, -{self.neg_offset:.1f}m)"


@dataclass(frozen=True)
class PointAlongLineLocation:
    """A point on a path, `offset` meters from the start of its first edge."""

    path: tuple[Hashable, ...]
    offset: float = 0.0
    orientation: Orientation = Orientation.UNKNOWN
    side: SideOfRoad = SideOfRoad.ON_ROAD_OR_UNKNOWN

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


@dataclass(frozen=True)
class PoiLocation:
    """A point of interest and its access point on the road network."""

    point: PointAlongLineLocation
    coordinate: Coordinate


@dataclass(frozen=True)
class ClosedLineLocation:
    """A path whose last edge ends where the first edge starts."""

    path: tuple[Hashable, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


Location = LineLocation | PointAlongLineLocation | PoiLocation | ClosedLineLocation | GeoCoordinate
