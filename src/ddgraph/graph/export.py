"""
Visible subgraph export.

Materializes what a GraphModel shows under an encoding as a rustworkx
digraph, DOT text or a plain dict. No layout is computed here; DOT output
is left to Graphviz or the caller's renderer.
"""

from typing import Any, Dict, Optional

import rustworkx as rx

from ..core.graph_model import GraphModel
from ..core.types import Vertex


def to_digraph(model: GraphModel, vis_encoding: Optional[str] = None) -> rx.PyDiGraph:
    """
    Build a digraph of the visible vertices.

    Node payloads are Vertex records; edge payloads are Edge records. Edges
    touching a hidden vertex are left out.
    """
    visible = model.get_visible(vis_encoding)
    graph = rx.PyDiGraph(multigraph=False)
    key_to_idx: Dict[str, int] = {}

    for vertex in visible.vertices:
        key_to_idx[vertex.key] = graph.add_node(vertex)

    for edge in visible.edges:
        u_idx = key_to_idx.get(edge.from_key)
        v_idx = key_to_idx.get(edge.to_key)
        if u_idx is None or v_idx is None:
            continue
        graph.add_edge(u_idx, v_idx, edge)

    return graph


def _dot_escape(value: str) -> str:
    # Backslashes first, so the ones added for quotes survive
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _vertex_label(vertex: Vertex) -> str:
    """DOT-escaped label; service and operation on separate lines."""
    service = _dot_escape(vertex.service)
    if vertex.operation:
        return f"{service}\\n{_dot_escape(vertex.operation)}"
    return service


def to_dot(model: GraphModel, vis_encoding: Optional[str] = None) -> str:
    """Render the visible subgraph as DOT text."""
    graph = to_digraph(model, vis_encoding)

    def node_attr(vertex: Vertex) -> Dict[str, str]:
        attrs = {"label": f'"{_vertex_label(vertex)}"', "shape": "box"}
        if vertex.is_focal_node:
            attrs["style"] = "bold"
        return attrs

    return graph.to_dot(node_attr=node_attr, graph_attr={"rankdir": "LR"})


def get_stats(model: GraphModel, vis_encoding: Optional[str] = None) -> Dict[str, Any]:
    """Counts for the visible subgraph and the full model."""
    graph = to_digraph(model, vis_encoding)
    return {
        "visible_vertices": graph.num_nodes(),
        "visible_edges": graph.num_edges(),
        "total_vertices": len(model.vertices),
        "total_edges": len(model.edges),
        "total_path_elems": len(model.vis_idx_to_path_elem),
        "roots": sum(1 for idx in graph.node_indices() if graph.in_degree(idx) == 0),
        "leaves": sum(1 for idx in graph.node_indices() if graph.out_degree(idx) == 0),
    }


def to_dict(model: GraphModel, vis_encoding: Optional[str] = None) -> Dict[str, Any]:
    """JSON-ready view of the visible subgraph."""
    visible = model.get_visible(vis_encoding)
    return {
        "density": model.density.value,
        "showOperations": model.show_operations,
        "visEncoding": vis_encoding,
        "vertices": [vertex.model_dump(by_alias=True) for vertex in visible.vertices],
        "edges": [edge.model_dump(by_alias=True) for edge in visible.edges],
        "stats": get_stats(model, vis_encoding),
    }
