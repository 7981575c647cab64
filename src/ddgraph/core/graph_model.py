"""
Graph model over a transformed DDG.

Collapses PathElems onto vertices according to a density policy, connects
each non-focal element to its focal-side neighbor, and answers visibility
queries against a visibility encoding.

All derived maps are built in one pass over the elements in visibility
index order and are read-only afterwards. A different density or
operation setting means a different GraphModel (see `make_graph`).
"""

import functools
import logging
from dataclasses import dataclass
from itertools import takewhile
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple, Union

from ..config import DEFAULT_VISIBLE_HOPS, GRAPH_CACHE_SIZE, VISIBLE_CACHE_SIZE
from .errors import DisconnectedPathElem, UnknownVertexKey
from .hashers import get_path_elem_hasher
from .path_elem import PathElem
from .transform import DdgModel
from .types import CheckedStatus, Density, Direction, Edge, Vertex, get_edge_id
from .visibility_codec import decode, encode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisibleGraph:
    """Vertices and edges visible under one encoding, in visibility order."""
    edges: Tuple[Edge, ...]
    vertices: Tuple[Vertex, ...]


@dataclass(frozen=True)
class GenerationUpdate:
    """Result of toggling a generation: the new encoding and what it became."""
    vis_encoding: str
    update: CheckedStatus


class GraphModel:
    """
    Deduplicated vertices and edges for one (model, density, show_operations).

    Attributes:
        vertices: Vertex key -> Vertex.
        vertex_to_path_elems: Vertex -> its PathElems in visibility order.
        path_elem_to_vertex: PathElem -> Vertex.
        path_elem_to_edge: Non-focal PathElem -> Edge to its focal-side neighbor.
    """

    def __init__(
        self,
        ddg_model: DdgModel,
        density: Union[Density, str],
        show_operations: bool = False,
        visible_hops: int = DEFAULT_VISIBLE_HOPS,
    ):
        self.density = Density(density)
        self.show_operations = show_operations
        self.visible_hops = visible_hops
        self.distance_to_path_elems = ddg_model.distance_to_path_elems
        self.vis_idx_to_path_elem: Tuple[PathElem, ...] = tuple(ddg_model.vis_idx_to_path_elem)

        hasher = get_path_elem_hasher(self.density, show_operations)
        vertices: Dict[str, Vertex] = {}
        vertex_to_path_elems: Dict[Vertex, List[PathElem]] = {}
        path_elem_to_vertex: Dict[PathElem, Vertex] = {}
        path_elem_to_edge: Dict[PathElem, Edge] = {}
        edges_by_id: Dict[str, Edge] = {}

        for path_elem in self.vis_idx_to_path_elem:
            key = hasher(path_elem)
            vertex = vertices.get(key)
            if vertex is None:
                is_focal_node = path_elem.distance == 0
                vertex = Vertex(
                    key=key,
                    is_focal_node=is_focal_node,
                    service=path_elem.operation.service.name,
                    operation=path_elem.operation.name if show_operations or is_focal_node else None,
                )
                vertices[key] = vertex
                vertex_to_path_elems[vertex] = []
            vertex_to_path_elems[vertex].append(path_elem)
            path_elem_to_vertex[path_elem] = vertex

            connected_elem = path_elem.focal_side_neighbor
            if connected_elem is None:
                continue

            connected_vertex = path_elem_to_vertex.get(connected_elem)
            if connected_vertex is None:
                raise DisconnectedPathElem(str(path_elem))

            if path_elem.distance > 0:
                from_key, to_key = connected_vertex.key, vertex.key
            else:
                from_key, to_key = vertex.key, connected_vertex.key
            edge_id = get_edge_id(from_key, to_key)
            edge = edges_by_id.get(edge_id)
            if edge is None:
                edge = Edge(from_key=from_key, to_key=to_key)
                edges_by_id[edge_id] = edge
            path_elem_to_edge[path_elem] = edge

        self.vertices: Mapping[str, Vertex] = MappingProxyType(vertices)
        self.vertex_to_path_elems: Mapping[Vertex, Tuple[PathElem, ...]] = MappingProxyType(
            {vertex: tuple(elems) for vertex, elems in vertex_to_path_elems.items()}
        )
        self.path_elem_to_vertex: Mapping[PathElem, Vertex] = MappingProxyType(path_elem_to_vertex)
        self.path_elem_to_edge: Mapping[PathElem, Edge] = MappingProxyType(path_elem_to_edge)
        self.edges: Tuple[Edge, ...] = tuple(edges_by_id.values())

        # Bounded per-instance caches, keyed by the exact arguments
        self.get_visible = functools.lru_cache(maxsize=VISIBLE_CACHE_SIZE)(self._get_visible)
        self.get_visible_ui_find_matches = functools.lru_cache(maxsize=VISIBLE_CACHE_SIZE)(
            self._get_visible_ui_find_matches
        )
        self.get_hidden_ui_find_matches = functools.lru_cache(maxsize=VISIBLE_CACHE_SIZE)(
            self._get_hidden_ui_find_matches
        )

        logger.debug(
            "Built graph (density=%s, show_operations=%s): %d elems, %d vertices, %d edges",
            self.density.value, show_operations, len(self.vis_idx_to_path_elem),
            len(self.vertices), len(self.edges),
        )

    # --- Visible set ---

    def _get_default_visible_path_elems(self) -> List[PathElem]:
        # Indices grow with absolute distance, so the default view is a prefix
        return list(takewhile(
            lambda elem: abs(elem.distance) <= self.visible_hops,
            self.vis_idx_to_path_elem,
        ))

    def get_visible_indices(self, vis_encoding: Optional[str] = None) -> Set[int]:
        """
        Visibility indices for `vis_encoding`, or the default view when None.

        Indices past the end of the model are dropped.
        """
        if vis_encoding is None:
            return {elem.visibility_idx for elem in self._get_default_visible_path_elems()}
        return decode(vis_encoding, limit=len(self.vis_idx_to_path_elem))

    def get_visible_path_elems(self, vis_encoding: Optional[str] = None) -> List[PathElem]:
        """Visible PathElems in visibility order; unknown indices are dropped."""
        if vis_encoding is None:
            return self._get_default_visible_path_elems()
        return [self.vis_idx_to_path_elem[idx] for idx in sorted(self.get_visible_indices(vis_encoding))]

    def _get_visible(self, vis_encoding: Optional[str] = None) -> VisibleGraph:
        edges: Dict[Edge, None] = {}
        vertices: Dict[Vertex, None] = {}
        for path_elem in self.get_visible_path_elems(vis_encoding):
            edge = self.path_elem_to_edge.get(path_elem)
            if edge is not None:
                edges[edge] = None
            vertices[self.path_elem_to_vertex[path_elem]] = None
        return VisibleGraph(edges=tuple(edges), vertices=tuple(vertices))

    # --- Search ---

    @staticmethod
    def _tokenize_query(ui_find: Optional[str]) -> List[str]:
        if not ui_find:
            return []
        return ui_find.strip().lower().split()

    @staticmethod
    def _vertex_matches(vertex: Vertex, tokens: Iterable[str]) -> bool:
        service = vertex.service.lower()
        operation = vertex.operation.lower() if vertex.operation else None
        return any(token in service or (operation is not None and token in operation) for token in tokens)

    def _get_visible_ui_find_matches(
        self,
        ui_find: Optional[str] = None,
        vis_encoding: Optional[str] = None,
    ) -> FrozenSet[Vertex]:
        tokens = self._tokenize_query(ui_find)
        if not tokens:
            return frozenset()
        return frozenset(
            vertex for vertex in self.get_visible(vis_encoding).vertices
            if self._vertex_matches(vertex, tokens)
        )

    def _get_hidden_ui_find_matches(
        self,
        ui_find: Optional[str] = None,
        vis_encoding: Optional[str] = None,
    ) -> FrozenSet[Vertex]:
        tokens = self._tokenize_query(ui_find)
        if not tokens:
            return frozenset()
        visible = set(self.get_visible(vis_encoding).vertices)
        return frozenset(
            vertex for vertex in self.vertices.values()
            if vertex not in visible and self._vertex_matches(vertex, tokens)
        )

    # --- Vertex and generation queries ---

    def get_vertex_visible_path_elems(
        self,
        vertex_key: str,
        vis_encoding: Optional[str] = None,
    ) -> Optional[List[PathElem]]:
        """
        PathElems of a vertex that are visible under `vis_encoding`.

        Returns None when the vertex is unknown or tracks no elements.
        """
        vertex = self.vertices.get(vertex_key)
        if vertex is None:
            return None
        path_elems = self.vertex_to_path_elems.get(vertex)
        if not path_elems:
            return None
        if vis_encoding is None:
            return [elem for elem in path_elems if abs(elem.distance) <= self.visible_hops]
        visible = self.get_visible_indices(vis_encoding)
        return [elem for elem in path_elems if elem.visibility_idx in visible]

    def get_generation(
        self,
        vertex_key: str,
        direction: Union[Direction, int],
        vis_encoding: Optional[str] = None,
    ) -> List[PathElem]:
        """
        PathElems one hop beyond the vertex's visible elements in `direction`.

        Neighbors on the focal side of an element are never part of its
        generation. Empty when the vertex is unknown, hidden, or a leaf/root
        in that direction.
        """
        step = int(Direction(direction))
        generation: List[PathElem] = []
        for elem in self.get_vertex_visible_path_elems(vertex_key, vis_encoding) or ():
            members = elem.member_of.members
            idx = elem.member_idx + step
            if idx < 0 or idx >= len(members):
                continue
            neighbor = members[idx]
            if neighbor is not elem.focal_side_neighbor:
                generation.append(neighbor)
        return generation

    def get_generation_visibility(
        self,
        vertex_key: str,
        direction: Union[Direction, int],
        vis_encoding: Optional[str] = None,
    ) -> Optional[CheckedStatus]:
        """Whether none, some or all of a generation is visible; None if there is no generation."""
        generation = self.get_generation(vertex_key, direction, vis_encoding)
        if not generation:
            return None
        visible = self.get_visible_indices(vis_encoding)
        visible_count = sum(1 for elem in generation if elem.visibility_idx in visible)
        if visible_count == len(generation):
            return CheckedStatus.FULL
        if visible_count:
            return CheckedStatus.PARTIAL
        return CheckedStatus.EMPTY

    # --- Mutators (return new encodings) ---

    def get_vis_with_updated_generation(
        self,
        vertex_key: str,
        direction: Union[Direction, int],
        vis_encoding: Optional[str] = None,
    ) -> Optional[GenerationUpdate]:
        """
        Hide a fully visible generation, otherwise show all of it.

        Returns None when there is no generation to toggle.
        """
        generation = self.get_generation(vertex_key, direction, vis_encoding)
        if not generation:
            return None

        status = self.get_generation_visibility(vertex_key, direction, vis_encoding)
        visible = self.get_visible_indices(vis_encoding)
        indices = {elem.visibility_idx for elem in generation}

        if status is CheckedStatus.FULL:
            return GenerationUpdate(vis_encoding=encode(visible - indices), update=CheckedStatus.EMPTY)
        return GenerationUpdate(vis_encoding=encode(visible | indices), update=CheckedStatus.FULL)

    def get_vis_without_vertex(self, vertex_key: str, vis_encoding: Optional[str] = None) -> Optional[str]:
        """
        Hide a vertex along with everything beyond it on the same paths.

        Returns None when the vertex is unknown or already hidden.
        """
        path_elems = self.get_vertex_visible_path_elems(vertex_key, vis_encoding)
        if not path_elems:
            return None
        visible = self.get_visible_indices(vis_encoding)
        for path_elem in path_elems:
            for member in path_elem.external_path:
                visible.discard(member.visibility_idx)
        return encode(visible)

    def get_vis_with_vertices(
        self,
        vertices: Iterable[Union[Vertex, str]],
        vis_encoding: Optional[str] = None,
    ) -> str:
        """
        Show every element of the given vertices and their paths to the focal node.

        Raises:
            UnknownVertexKey: If a vertex is not part of this model.
        """
        visible = self.get_visible_indices(vis_encoding)
        for item in vertices:
            key = item if isinstance(item, str) else item.key
            vertex = self.vertices.get(key)
            if vertex is None:
                raise UnknownVertexKey(key)
            for path_elem in self.vertex_to_path_elems[vertex]:
                visible.update(member.visibility_idx for member in path_elem.focal_path)
        return encode(visible)


@functools.lru_cache(maxsize=GRAPH_CACHE_SIZE)
def make_graph(
    ddg_model: DdgModel,
    show_operations: bool,
    density: Union[Density, str],
    visible_hops: int = DEFAULT_VISIBLE_HOPS,
) -> GraphModel:
    """Memoized GraphModel construction keyed by model identity and configuration."""
    return GraphModel(ddg_model, density=density, show_operations=show_operations, visible_hops=visible_hops)
