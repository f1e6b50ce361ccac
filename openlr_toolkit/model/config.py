"""Per-call configuration of the decoder and the encoder.

Defaults come from constants.DecoderDefaults / constants.EncoderDefaults.
Both configs are frozen and validate themselves, so a config that exists
is always usable.
"""

from dataclasses import dataclass

from openlr_toolkit.constants import DecoderDefaults, EncoderDefaults, QuantizationConfig
from openlr_toolkit.model.attributes import Fow, Frc


@dataclass(frozen=True)
class DecoderConfig:
    """Map matching parameters.

    Attributes:
        search_radius: Radius (m) around an LRP searched for nodes and lines
        bearing_distance: Distance (m) along a line used to measure its bearing
        bearing_tolerance: Max bearing difference (degrees) of a candidate line
        frc_variance: Classes a candidate FRC may exceed the LRP's lfrcnp by
        node_factor: Weight of the distance score
        line_factor: Weight of the bearing, FRC and FOW scores
        projected_line_factor: Rating multiplier for lines found by projection
        min_line_rating: Candidates rated below this are dropped
        max_candidates_per_lrp: Number of best candidates kept per LRP
        next_point_variance: Absolute route length tolerance (m)
        distance_tolerance_ratio: Route length tolerance relative to dnp
        distance_deviation_factor: Rating lost per meter of route length deviation
    """

    search_radius: float = DecoderDefaults.SEARCH_RADIUS_M
    bearing_distance: float = DecoderDefaults.BEARING_DISTANCE_M
    bearing_tolerance: float = DecoderDefaults.BEARING_TOLERANCE_DEG
    frc_variance: int = DecoderDefaults.FRC_VARIANCE
    node_factor: float = DecoderDefaults.NODE_FACTOR
    line_factor: float = DecoderDefaults.LINE_FACTOR
    projected_line_factor: float = DecoderDefaults.PROJECTED_LINE_FACTOR
    min_line_rating: float = DecoderDefaults.MIN_LINE_RATING
    max_candidates_per_lrp: int = DecoderDefaults.MAX_CANDIDATES_PER_LRP
    next_point_variance: float = DecoderDefaults.NEXT_POINT_VARIANCE_M
    distance_tolerance_ratio: float = DecoderDefaults.DISTANCE_TOLERANCE_RATIO
    distance_deviation_factor: float = DecoderDefaults.DISTANCE_DEVIATION_FACTOR

    def __post_init__(self) -> None:
        if self.search_radius <= 0:
            raise ValueError(f"search_radius must be positive, got {self.search_radius}")
        if self.bearing_distance <= 0:
            raise ValueError(f"bearing_distance must be positive, got {self.bearing_distance}")
        if not 0 <= self.bearing_tolerance <= 180:
            raise ValueError(f"bearing_tolerance must be in [0, 180], got {self.bearing_tolerance}")
        if not 0 <= self.frc_variance <= 7:
            raise ValueError(f"frc_variance must be in [0, 7], got {self.frc_variance}")
        if self.node_factor < 0 or self.line_factor < 0:
            raise ValueError("node_factor and line_factor must not be negative")
        if not 0 < self.projected_line_factor <= 1:
            raise ValueError(f"projected_line_factor must be in (0, 1], got {self.projected_line_factor}")
        if self.max_candidates_per_lrp < 1:
            raise ValueError(f"max_candidates_per_lrp must be at least 1, got {self.max_candidates_per_lrp}")
        if self.next_point_variance < 0 or self.distance_tolerance_ratio < 0:
            raise ValueError("next_point_variance and distance_tolerance_ratio must not be negative")
        if self.distance_deviation_factor < 0:
            raise ValueError(f"distance_deviation_factor must not be negative, got {self.distance_deviation_factor}")

    def route_tolerance(self, dnp: float) -> float:
        """Allowed deviation (m) between a route length and the encoded distance."""
        return max(self.next_point_variance, self.distance_tolerance_ratio * dnp)


@dataclass(frozen=True)
class EncoderConfig:
    """Path reduction parameters.

    Attributes:
        max_lrp_distance: Max span length (m) between two consecutive LRPs
        bearing_distance: Distance (m) along a line used to measure its bearing
        fallback_frc: FRC written when the graph has none for an edge
        fallback_fow: FOW written when the graph has none for an edge
        lrp_at_every_vertex: Place an LRP at every path vertex instead of minimizing
    """

    max_lrp_distance: float = EncoderDefaults.MAX_LRP_DISTANCE_M
    bearing_distance: float = EncoderDefaults.BEARING_DISTANCE_M
    fallback_frc: Frc = Frc.FRC7
    fallback_fow: Fow = Fow.UNDEFINED
    lrp_at_every_vertex: bool = False

    def __post_init__(self) -> None:
        if not 0 < self.max_lrp_distance <= QuantizationConfig.MAX_LRP_DISTANCE_M:
            raise ValueError(
                f"max_lrp_distance must be in (0, {QuantizationConfig.MAX_LRP_DISTANCE_M}], "
                f"got {self.max_lrp_distance}"
            )
        if self.bearing_distance <= 0:
            raise ValueError(f"bearing_distance must be positive, got {self.bearing_distance}")
