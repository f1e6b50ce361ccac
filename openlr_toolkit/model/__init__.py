"""Data model of location references and graph locations.

Separates the map-independent reference from the map-bound location:
- Coordinate: Geometry atom (lon, lat)
- Frc, Fow, Orientation, SideOfRoad: Road attribute enums
- LineAttributes, PathAttributes: Attribute groups of an LRP
- LocationReferencePoint: One waypoint of a reference
- GeoCoordinate, Line, PointAlongLine, Poi, Circle, Rectangle, Grid,
  Polygon, ClosedLine: Location reference variants
- LineLocation, PointAlongLineLocation, PoiLocation, ClosedLineLocation:
  Locations on a concrete road network
- DecoderConfig, EncoderConfig: Per-call parameters
"""

from openlr_toolkit.model.attributes import (
    Fow,
    Frc,
    LineAttributes,
    Orientation,
    PathAttributes,
    SideOfRoad,
)
from openlr_toolkit.model.config import DecoderConfig, EncoderConfig
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.location import (
    ClosedLineLocation,
    LineLocation,
    Location,
    PoiLocation,
    PointAlongLineLocation,
)
from openlr_toolkit.model.location_reference import (
    Circle,
    ClosedLine,
    GeoCoordinate,
    Grid,
    GridSize,
    Line,
    LocationReference,
    LocationType,
    Offsets,
    Poi,
    PointAlongLine,
    Polygon,
    Rectangle,
)
from openlr_toolkit.model.lrp import LocationReferencePoint

__all__ = [
    "Coordinate",
    "Frc",
    "Fow",
    "Orientation",
    "SideOfRoad",
    "LineAttributes",
    "PathAttributes",
    "LocationReferencePoint",
    "LocationType",
    "Offsets",
    "GeoCoordinate",
    "Line",
    "PointAlongLine",
    "Poi",
    "Circle",
    "Rectangle",
    "GridSize",
    "Grid",
    "Polygon",
    "ClosedLine",
    "LocationReference",
    "LineLocation",
    "PointAlongLineLocation",
    "PoiLocation",
    "ClosedLineLocation",
    "Location",
    "DecoderConfig",
    "EncoderConfig",
]
