"""Configuration constants for OpenLR Toolkit.

All tunable parameters are centralized here. Wire-format numbers are fixed by
the OpenLR v3 data format and must not be changed.

Classes:
    FormatConfig: Header layout and variant size thresholds
    QuantizationConfig: Coordinate, bearing, distance and offset resolution
    RatingConfig: Candidate line rating scores used by the decoder
    DecoderDefaults: Default values of DecoderConfig
    EncoderDefaults: Default values of EncoderConfig
"""


class FormatConfig:
    """Binary header layout and size thresholds."""

    VERSION = 3  # Only OpenLR v3 is supported
    VERSION_MASK = 0b111
    TYPE_SHIFT = 3
    TYPE_MASK = 0b1111

    # Location type discriminants (header bits 3..6)
    TYPE_CIRCLE = 0
    TYPE_LINE = 1
    TYPE_POLYGON = 2
    TYPE_GEO_COORDINATE = 4
    TYPE_POINT = 5  # PointAlongLine or Poi, told apart by length
    TYPE_RECTANGLE = 8  # Rectangle or Grid, told apart by length
    TYPE_CLOSED_LINE = 11

    # Byte sizes of the building blocks
    ABSOLUTE_COORDINATE_SIZE = 6
    RELATIVE_COORDINATE_SIZE = 4
    ATTRIBUTES_SIZE = 2
    RADIUS_MAX_SIZE = 4

    # Total message length above which the larger variant is meant
    POI_MIN_EXCLUSIVE = 17  # > 17 bytes: PoiWithAccessPoint
    GRID_MIN_EXCLUSIVE = 13  # > 13 bytes: Grid
    RECTANGLE_ABSOLUTE_MIN_EXCLUSIVE = 11  # > 11 bytes: absolute upper right
    GRID_ABSOLUTE_MIN_EXCLUSIVE = 15  # > 15 bytes: absolute upper right

    # Fixed overheads used to count relative points
    LINE_FIXED_SIZE = 9  # header + absolute LRP (6 + 2 + 1)
    LINE_RELATIVE_LRP_SIZE = 7  # relative coordinate + attributes + dnp
    CLOSED_LINE_FIXED_SIZE = 12
    POLYGON_FIXED_SIZE = 7

    MIN_LINE_POINTS = 2
    MIN_CLOSED_LINE_POINTS = 1  # the closing LRP is implied by last_line
    MIN_POLYGON_CORNERS = 3
    MIN_GRID_SIDE = 2

    # Offset flags in the second attribute byte of the last LRP
    POS_OFFSET_FLAG = 0b10
    NEG_OFFSET_FLAG = 0b01


class QuantizationConfig:
    """Resolution of the quantized wire fields."""

    COORDINATE_RESOLUTION_BITS = 24
    RELATIVE_COORDINATE_FACTOR = 100_000.0  # deca-micro degrees
    RELATIVE_COORDINATE_MIN = -(2**15)
    RELATIVE_COORDINATE_MAX = 2**15 - 1

    BEARING_SECTOR_DEG = 11.25  # 32 sectors cover the full circle
    BEARING_SECTORS = 32

    DISTANCE_PER_INTERVAL_M = 58.6  # 256 intervals for distance to next point
    MAX_LRP_DISTANCE_M = 15_000  # Ceiling of the distance to next point field

    OFFSET_BUCKETS = 256

    MAX_RADIUS_M = 2**32 - 1
    MAX_GRID_SIDE = 2**16 - 1

    assert BEARING_SECTOR_DEG * BEARING_SECTORS == 360


class RatingConfig:
    """Scores used to rate candidate lines against an LRP.

    Each attribute scores up to MAX_SCORE; the distance score is scaled to the
    same range so node_factor and line_factor weigh comparable numbers.
    """

    MAX_SCORE = 100.0

    # Bearing difference (degrees) -> score
    BEARING_SCORES = (
        (6, 100.0),  # within about half a sector
        (12, 50.0),
        (18, 25.0),
    )
    BEARING_POOR_SCORE = 0.0

    # FRC difference (classes) -> score
    FRC_SCORES = {0: 100.0, 1: 75.0, 2: 50.0}
    FRC_POOR_SCORE = 0.0

    FOW_EXACT_SCORE = 100.0
    FOW_UNDEFINED_SCORE = 50.0  # one side does not know the form of way
    FOW_POOR_SCORE = 25.0


class DecoderDefaults:
    """Default map matching parameters (see DecoderConfig)."""

    SEARCH_RADIUS_M = 100.0  # Candidate node/edge lookup radius around an LRP
    BEARING_DISTANCE_M = 20.0  # Segment length used to measure a line bearing
    BEARING_TOLERANCE_DEG = 90  # Max bearing difference for a candidate line
    FRC_VARIANCE = 2  # Candidate FRC may exceed lfrcnp by this many classes

    NODE_FACTOR = 3.0  # Weight of the positional score
    LINE_FACTOR = 3.0  # Weight of bearing + FRC + FOW scores
    PROJECTED_LINE_FACTOR = 0.95  # Penalty for lines found by projection only
    MIN_LINE_RATING = 700.0

    MAX_CANDIDATES_PER_LRP = 5
    NEXT_POINT_VARIANCE_M = 150.0  # Absolute window around distance to next point
    DISTANCE_TOLERANCE_RATIO = 0.1  # Relative window around distance to next point
    DISTANCE_DEVIATION_FACTOR = 1.0  # Score lost per meter of route length deviation

    assert 0 < PROJECTED_LINE_FACTOR <= 1


class EncoderDefaults:
    """Default path reduction parameters (see EncoderConfig)."""

    MAX_LRP_DISTANCE_M = 4_000.0  # Smaller spans give more precise offsets
    BEARING_DISTANCE_M = 20.0
    LENGTH_SIMILARITY_M = 1.0  # Opposite edges this close in length are one road

    assert MAX_LRP_DISTANCE_M <= QuantizationConfig.MAX_LRP_DISTANCE_M
