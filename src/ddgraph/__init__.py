"""
ddgraph - Deep Dependency Graph model.

Turns observed call paths around a focal service/operation into a merged
dependency graph with a deterministic visibility ordering.
"""

from .core.errors import (
    DdgError,
    DisconnectedPathElem,
    MalformedVisibilityToken,
    MissingFocalNode,
    UnknownVertexKey,
    VisibilityIndexAlreadySet,
    VisibilityIndexUnset,
)
from .core.graph_model import GraphModel, make_graph
from .core.transform import DdgModel, transform_ddg_data
from .core.types import CheckedStatus, Density, Direction, Edge, Vertex
from .core.visibility_codec import decode, decode_runs, encode

__version__ = "0.1.0"

__all__ = [
    "CheckedStatus",
    "DdgError",
    "DdgModel",
    "Density",
    "Direction",
    "DisconnectedPathElem",
    "Edge",
    "GraphModel",
    "MalformedVisibilityToken",
    "MissingFocalNode",
    "UnknownVertexKey",
    "Vertex",
    "VisibilityIndexAlreadySet",
    "VisibilityIndexUnset",
    "decode",
    "decode_runs",
    "encode",
    "make_graph",
    "transform_ddg_data",
]
