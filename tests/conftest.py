"""Shared pytest fixtures for openlr_toolkit tests.

Provides synthetic road networks and default configs for all tests.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    Networks sit in Berlin (lon ~13.4, lat ~52.5, UTM zone 33N). Vertices are
    spaced 0.003° in longitude (~203 m) and 0.002° in latitude (~222 m), far
    more than the 100 m candidate search radius, so every LRP has exactly one
    candidate node. Lengths differ slightly per edge because they are measured
    in UTM; tests compare lengths with tolerances, never exactly.
"""

import pytest

from openlr_toolkit.graph.road_network import RoadNetwork
from openlr_toolkit.model.attributes import Fow, Frc
from openlr_toolkit.model.config import DecoderConfig, EncoderConfig
from openlr_toolkit.model.coordinate import Coordinate

BASE_LON = 13.400
BASE_LAT = 52.500
LON_STEP = 0.003  # ~203 m at 52.5°N
LAT_STEP = 0.002  # ~222 m


def grid_vertex(row: int, col: int) -> int:
    """Vertex id of a grid node: row * 10 + col. Row 0 is the northmost."""
    return row * 10 + col


def east_edge(row: int, col: int) -> int:
    """Edge id from (row, col) east to (row, col + 1); its negation runs west."""
    return 100 + row * 10 + col


def south_edge(row: int, col: int) -> int:
    """Edge id from (row, col) south to (row + 1, col); its negation runs north."""
    return 200 + row * 10 + col


# =============================================================================
# ROAD NETWORKS
# =============================================================================


def build_grid_network(size: int = 4) -> RoadNetwork:
    """Square grid of two-way FRC3 single carriageway streets.

    Layout for size=4 (vertex ids, north up):

        00 - 01 - 02 - 03
        |    |    |    |
        10 - 11 - 12 - 13
        |    |    |    |
        20 - 21 - 22 - 23
        |    |    |    |
        30 - 31 - 32 - 33

    Interior nodes have degree 8, border nodes degree 6 and corners degree 4.
    Corners join two roads only, so they are invalid nodes (pairwise opposite).
    """
    network = RoadNetwork()
    for row in range(size):
        for col in range(size):
            network.add_vertex(
                grid_vertex(row, col),
                Coordinate(lon=BASE_LON + col * LON_STEP, lat=BASE_LAT - row * LAT_STEP),
            )
    for row in range(size):
        for col in range(size):
            if col + 1 < size:
                network.add_road(
                    east_edge(row, col),
                    grid_vertex(row, col),
                    grid_vertex(row, col + 1),
                    frc=Frc.FRC3,
                    fow=Fow.SINGLE_CARRIAGEWAY,
                )
            if row + 1 < size:
                network.add_road(
                    south_edge(row, col),
                    grid_vertex(row, col),
                    grid_vertex(row + 1, col),
                    frc=Frc.FRC3,
                    fow=Fow.SINGLE_CARRIAGEWAY,
                )
    return network


def build_linear_network() -> RoadNetwork:
    """A straight two-way road without side streets.

        1 ==== 2 ==== 3 ==== 4 ==== 5
          e=1    e=2    e=3    e=4          (backward edges are negative)

    Vertices 1 and 5 are dead ends (valid). Vertices 2, 3, 4 only join two
    neighbours along one road (invalid), so a location starting or ending there
    must be expanded to the dead ends.
    """
    network = RoadNetwork()
    for index in range(5):
        network.add_vertex(index + 1, Coordinate(lon=BASE_LON + index * LON_STEP, lat=BASE_LAT))
    for index in range(1, 5):
        network.add_road(index, index, index + 1, frc=Frc.FRC2, fow=Fow.MULTIPLE_CARRIAGEWAY)
    return network


@pytest.fixture
def grid_network() -> RoadNetwork:
    """4x4 grid of two-way streets."""
    return build_grid_network()


@pytest.fixture
def linear_network() -> RoadNetwork:
    """Straight road with three pass-through nodes."""
    return build_linear_network()


@pytest.fixture
def bare_network() -> RoadNetwork:
    """Two-way road of two edges without FRC or FOW, as in maps lacking attributes.

        1 ==== 2 ==== 3      with a side street 2 ==== 4 to keep vertex 2 valid
    """
    network = RoadNetwork()
    network.add_vertex(1, Coordinate(lon=BASE_LON, lat=BASE_LAT))
    network.add_vertex(2, Coordinate(lon=BASE_LON + LON_STEP, lat=BASE_LAT))
    network.add_vertex(3, Coordinate(lon=BASE_LON + 2 * LON_STEP, lat=BASE_LAT))
    network.add_vertex(4, Coordinate(lon=BASE_LON + LON_STEP, lat=BASE_LAT - LAT_STEP))
    network.add_road(1, 1, 2)
    network.add_road(2, 2, 3)
    network.add_road(3, 2, 4)
    return network


# =============================================================================
# CONFIGS
# =============================================================================


@pytest.fixture
def encoder_config() -> EncoderConfig:
    return EncoderConfig()


@pytest.fixture
def decoder_config() -> DecoderConfig:
    return DecoderConfig()


# =============================================================================
# FAILING GRAPH
# =============================================================================


class FailingGraph:
    """Graph whose every query raises, like a map service that is down.

    Used to check that host failures surface as GraphError with the original
    exception chained, and never as a raw KeyError/ConnectionError.
    """

    def __init__(self, error: Exception) -> None:
        self.error = error

    def __getattr__(self, name: str):
        def fail(*args, **kwargs):
            raise self.error

        return fail


@pytest.fixture
def failing_graph() -> FailingGraph:
    return FailingGraph(ConnectionError("map service unavailable"))
