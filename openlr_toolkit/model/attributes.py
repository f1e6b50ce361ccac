"""Road attributes carried by location reference points.

- Frc: Functional road class, 0 (most important) to 7
- Fow: Form of way, the physical kind of road
- Orientation / SideOfRoad: where a point location sits relative to the line
- LineAttributes: FRC, FOW and bearing of the line at an LRP
- PathAttributes: lowest FRC and distance to the next LRP
"""

from dataclasses import dataclass
from enum import IntEnum

from openlr_toolkit.constants import QuantizationConfig
from openlr_toolkit.errors import OutOfRangeError


class Frc(IntEnum):
    """Functional road class. Lower values are more important roads."""

    FRC0 = 0
    FRC1 = 1
    FRC2 = 2
    FRC3 = 3
    FRC4 = 4
    FRC5 = 5
    FRC6 = 6
    FRC7 = 7


class Fow(IntEnum):
    """Form of way."""

    UNDEFINED = 0
    MOTORWAY = 1
    MULTIPLE_CARRIAGEWAY = 2
    SINGLE_CARRIAGEWAY = 3
    ROUNDABOUT = 4
    TRAFFIC_SQUARE = 5
    SLIP_ROAD = 6
    OTHER = 7


class Orientation(IntEnum):
    """Direction of a point location relative to the referenced line."""

    UNKNOWN = 0
    FORWARD = 1
    BACKWARD = 2
    BOTH = 3


class SideOfRoad(IntEnum):
    """Side of the road a point location lies on."""

    ON_ROAD_OR_UNKNOWN = 0
    RIGHT = 1
    LEFT = 2
    BOTH = 3


@dataclass(frozen=True)
class LineAttributes:
    """Attributes of the line leaving an LRP (entering it for the last LRP).

    Attributes:
        frc: Functional road class of the line
        fow: Form of way of the line
        bearing: Bearing in integer degrees [0, 360)
    """

    frc: Frc
    fow: Fow
    bearing: int

    def __post_init__(self) -> None:
        if not 0 <= self.bearing < 360:
            raise OutOfRangeError(f"Bearing must be in [0, 360), got {self.bearing}")


@dataclass(frozen=True)
class PathAttributes:
    """Attributes of the path from an LRP to the next one.

    Attributes:
        lfrcnp: Lowest (least important) FRC along the path to the next LRP
        dnp: Distance to the next LRP in integer meters [0, 15000]
    """

    lfrcnp: Frc
    dnp: int

    def __post_init__(self) -> None:
        if not 0 <= self.dnp <= QuantizationConfig.MAX_LRP_DISTANCE_M:
            raise OutOfRangeError(
                f"Distance to next point must be in [0, {QuantizationConfig.MAX_LRP_DISTANCE_M}] m, got {self.dnp}"
            )
