"""RoadNetwork - In-memory DirectedGraph for tests, tools and small maps.

Edges carry a WGS84 polyline. All metric work happens in the UTM zone of
the first vertex added:
- Edge length, projection and interpolation use shapely LineStrings in UTM
- Nearest vertex lookups use a scipy KD-tree over UTM vertex positions
- Nearest edge lookups use a shapely STRtree over UTM edge geometries

The spatial indexes are rebuilt lazily after the network changes.
"""

import logging
from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass
from math import floor
from typing import Any

import numpy as np
import pyproj
from scipy.spatial import cKDTree
from shapely.geometry import LineString, Point
from shapely.ops import transform as shapely_transform
from shapely.strtree import STRtree

from openlr_toolkit.model.attributes import Fow, Frc
from openlr_toolkit.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


def _get_utm_zone(lon: float, lat: float) -> str:
    """Get UTM zone EPSG code for given coordinates."""
    zone_number = floor((lon + 180) / 6) + 1
    if lat >= 0:
        return f"EPSG:326{zone_number:02d}"
    return f"EPSG:327{zone_number:02d}"


@dataclass(frozen=True)
class RoadEdge:
    """A directed road edge.

    Attributes:
        edge_id: Host id of the edge
        start: Start vertex id
        end: End vertex id
        frc: Functional road class, None if unknown
        fow: Form of way, None if unknown
        geometry: Polyline in UTM meters, from start to end vertex
    """

    edge_id: Hashable
    start: Hashable
    end: Hashable
    frc: Frc | None
    fow: Fow | None
    geometry: LineString

    @property
    def length(self) -> float:
        return float(self.geometry.length)


class RoadNetwork:
    """Directed road graph held in memory.

    Example:
        network = RoadNetwork()
        network.add_vertex(1, Coordinate(lon=13.40, lat=52.50))
        network.add_vertex(2, Coordinate(lon=13.41, lat=52.50))
        network.add_edge("a", 1, 2, frc=Frc.FRC3, fow=Fow.SINGLE_CARRIAGEWAY)
    """

    def __init__(self) -> None:
        self.vertices: dict[Hashable, Coordinate] = {}
        self.edges: dict[Hashable, RoadEdge] = {}
        self.turn_restrictions: set[tuple[Hashable, Hashable]] = set()
        self._exiting: dict[Hashable, list[Hashable]] = {}
        self._entering: dict[Hashable, list[Hashable]] = {}
        self._to_utm = None
        self._to_wgs84 = None
        self._vertex_ids: list[Hashable] = []
        self._vertex_tree: cKDTree | None = None
        self._edge_ids: list[Hashable] = []
        self._edge_tree: STRtree | None = None

    # =========================================================================
    # Building
    # =========================================================================

    def _ensure_projection(self, coordinate: Coordinate) -> None:
        if self._to_utm is not None:
            return
        utm_crs = _get_utm_zone(lon=coordinate.lon, lat=coordinate.lat)
        wgs84 = pyproj.CRS("EPSG:4326")
        utm = pyproj.CRS(utm_crs)
        self._to_utm = pyproj.Transformer.from_crs(wgs84, utm, always_xy=True).transform
        self._to_wgs84 = pyproj.Transformer.from_crs(utm, wgs84, always_xy=True).transform
        logger.debug(f"Road network projected to {utm_crs}")

    def _invalidate_index(self) -> None:
        self._vertex_tree = None
        self._edge_tree = None

    def add_vertex(self, vertex_id: Hashable, coordinate: Coordinate) -> None:
        """Add a junction or dead end."""
        if vertex_id in self.vertices:
            raise ValueError(f"Vertex {vertex_id!r} already exists")
        self._ensure_projection(coordinate)
        self.vertices[vertex_id] = coordinate
        self._exiting[vertex_id] = []
        self._entering[vertex_id] = []
        self._invalidate_index()

    def add_edge(
        self,
        edge_id: Hashable,
        start: Hashable,
        end: Hashable,
        frc: Frc | None = None,
        fow: Fow | None = None,
        shape: Sequence[Coordinate] = (),
    ) -> RoadEdge:
        """Add a directed edge between two existing vertices.

        Args:
            edge_id: Unique id of the edge
            start: Start vertex id
            end: End vertex id
            frc: Functional road class, None if the map has none
            fow: Form of way, None if the map has none
            shape: Intermediate shape points between start and end

        Returns:
            The created edge.
        """
        if edge_id in self.edges:
            raise ValueError(f"Edge {edge_id!r} already exists")
        if start not in self.vertices or end not in self.vertices:
            raise ValueError(f"Edge {edge_id!r} connects unknown vertices {start!r} -> {end!r}")

        points = [self.vertices[start], *shape, self.vertices[end]]
        line_wgs84 = LineString([point.lon_lat for point in points])
        edge = RoadEdge(
            edge_id=edge_id,
            start=start,
            end=end,
            frc=frc,
            fow=fow,
            geometry=shapely_transform(self._to_utm, line_wgs84),
        )
        self.edges[edge_id] = edge
        self._exiting[start].append(edge_id)
        self._entering[end].append(edge_id)
        self._invalidate_index()
        return edge

    def add_road(
        self,
        edge_id: Hashable,
        start: Hashable,
        end: Hashable,
        frc: Frc | None = None,
        fow: Fow | None = None,
        shape: Sequence[Coordinate] = (),
    ) -> tuple[RoadEdge, RoadEdge]:
        """Add a two-way road as a pair of opposite edges.

        The forward edge gets `edge_id`, the backward edge `-edge_id` for
        numeric ids and `edge_id + "'"` otherwise.

        Raises:
            ValueError: For the numeric id 0, whose negation is itself.
        """
        if isinstance(edge_id, int) and edge_id == 0:
            raise ValueError("Road id 0 has no distinct backward id, numeric road ids must be non-zero")
        backward_id = -edge_id if isinstance(edge_id, int) else f"{edge_id}'"
        forward = self.add_edge(edge_id, start, end, frc=frc, fow=fow, shape=shape)
        backward = self.add_edge(backward_id, end, start, frc=frc, fow=fow, shape=tuple(reversed(shape)))
        return forward, backward

    def add_turn_restriction(self, from_edge: Hashable, to_edge: Hashable) -> None:
        """Forbid driving from one edge directly into another."""
        self.turn_restrictions.add((from_edge, to_edge))

    @classmethod
    def from_geojson(cls, data: dict[str, Any]) -> "RoadNetwork":
        """Build a network from a GeoJSON FeatureCollection.

        Point features are vertices (property "id"). LineString features are
        edges with properties "id", "start", "end" and optionally "frc" and
        "fow" as integers; their coordinates become the edge shape.
        """
        network = cls()
        features = data.get("features", [])
        for feature in features:
            geometry = feature["geometry"]
            if geometry["type"] == "Point":
                lon, lat = geometry["coordinates"][:2]
                network.add_vertex(feature["properties"]["id"], Coordinate(lon=lon, lat=lat))

        for feature in features:
            geometry = feature["geometry"]
            if geometry["type"] != "LineString":
                continue
            properties = feature["properties"]
            frc = properties.get("frc")
            fow = properties.get("fow")
            inner = geometry["coordinates"][1:-1]
            network.add_edge(
                properties["id"],
                properties["start"],
                properties["end"],
                frc=Frc(frc) if frc is not None else None,
                fow=Fow(fow) if fow is not None else None,
                shape=[Coordinate(lon=point[0], lat=point[1]) for point in inner],
            )

        logger.info(f"Loaded road network with {len(network.vertices)} vertices and {len(network.edges)} edges")
        return network

    # =========================================================================
    # Spatial index
    # =========================================================================

    def _project(self, coordinate: Coordinate) -> Point:
        x, y = self._to_utm(coordinate.lon, coordinate.lat)
        return Point(x, y)

    def _build_index(self) -> None:
        self._vertex_ids = list(self.vertices)
        positions = np.array([self._to_utm(*self.vertices[v].lon_lat) for v in self._vertex_ids], dtype=float)
        self._vertex_tree = cKDTree(positions.reshape(-1, 2))
        self._edge_ids = list(self.edges)
        self._edge_tree = STRtree([self.edges[e].geometry for e in self._edge_ids])
        logger.debug(f"Indexed {len(self._vertex_ids)} vertices and {len(self._edge_ids)} edges")

    # =========================================================================
    # DirectedGraph capability
    # =========================================================================

    def get_vertex_coordinate(self, vertex: Hashable) -> Coordinate:
        return self.vertices[vertex]

    def get_edge_start_vertex(self, edge: Hashable) -> Hashable:
        return self.edges[edge].start

    def get_edge_end_vertex(self, edge: Hashable) -> Hashable:
        return self.edges[edge].end

    def get_edge_length(self, edge: Hashable) -> float:
        return self.edges[edge].length

    def get_edge_frc(self, edge: Hashable) -> Frc | None:
        return self.edges[edge].frc

    def get_edge_fow(self, edge: Hashable) -> Fow | None:
        return self.edges[edge].fow

    def vertex_exiting_edges(self, vertex: Hashable) -> Iterator[tuple[Hashable, Hashable]]:
        for edge_id in self._exiting.get(vertex, []):
            yield edge_id, self.edges[edge_id].end

    def vertex_entering_edges(self, vertex: Hashable) -> Iterator[tuple[Hashable, Hashable]]:
        for edge_id in self._entering.get(vertex, []):
            yield edge_id, self.edges[edge_id].start

    def nearest_vertices_within_distance(
        self, coordinate: Coordinate, max_distance: float
    ) -> list[tuple[Hashable, float]]:
        if not self.vertices:
            return []
        if self._vertex_tree is None:
            self._build_index()
        point = self._project(coordinate)
        indices = self._vertex_tree.query_ball_point([point.x, point.y], r=max_distance)
        found = []
        for index in indices:
            x, y = self._vertex_tree.data[index]
            found.append((self._vertex_ids[index], float(np.hypot(x - point.x, y - point.y))))
        return sorted(found, key=lambda item: item[1])

    def nearest_edges_within_distance(self, coordinate: Coordinate, max_distance: float) -> list[tuple[Hashable, float]]:
        if not self.edges:
            return []
        if self._edge_tree is None:
            self._build_index()
        point = self._project(coordinate)
        indices = self._edge_tree.query(point, predicate="dwithin", distance=max_distance)
        found = [
            (self._edge_ids[index], float(self.edges[self._edge_ids[index]].geometry.distance(point)))
            for index in indices
        ]
        return sorted(found, key=lambda item: item[1])

    def get_distance_along_edge(self, edge: Hashable, coordinate: Coordinate) -> float:
        return float(self.edges[edge].geometry.project(self._project(coordinate)))

    def get_coordinate_along_edge(self, edge: Hashable, distance: float) -> Coordinate:
        geometry = self.edges[edge].geometry
        point = geometry.interpolate(min(max(distance, 0.0), geometry.length))
        lon, lat = self._to_wgs84(point.x, point.y)
        return Coordinate(lon=float(lon), lat=float(lat))

    def is_turn_restricted(self, from_edge: Hashable, to_edge: Hashable) -> bool:
        return (from_edge, to_edge) in self.turn_restrictions
