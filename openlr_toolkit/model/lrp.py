"""LocationReferencePoint - One waypoint of a line-shaped reference."""

from dataclasses import dataclass

from openlr_toolkit.model.attributes import LineAttributes, PathAttributes
from openlr_toolkit.model.coordinate import Coordinate


@dataclass(frozen=True)
class LocationReferencePoint:
    """A location reference point (LRP).

    Attributes:
        coordinate: Position of the point
        line: FRC, FOW and bearing of the line at the point
        path: Lowest FRC and distance to the next point; None for the last LRP

    Example:
        lrp = LocationReferencePoint(
            coordinate=Coordinate(lon=13.46112, lat=52.51711),
            line=LineAttributes(frc=Frc.FRC6, fow=Fow.SINGLE_CARRIAGEWAY, bearing=107),
            path=PathAttributes(lfrcnp=Frc.FRC6, dnp=381),
        )
    """

    coordinate: Coordinate
    line: LineAttributes
    path: PathAttributes | None = None

    @property
    def is_last(self) -> bool:
        """The last LRP of a line has no path to a next point."""
        return self.path is None

    @property
    def dnp(self) -> int:
        """Distance to next point in meters, 0 for the last LRP."""
        return self.path.dnp if self.path is not None else 0

    def __repr__(self) -> str:
        path = f", lfrcnp={self.path.lfrcnp.name}, dnp={self.path.dnp}m" if self.path else ""
        return (
            f"LRP({self.coordinate.lon:.5f}, {self.coordinate.lat:.5f}, {self.line.frc.name}, "
            f"{self.line.fow.name}, {self.line.bearing}°{path})"
        )
