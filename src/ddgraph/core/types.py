"""
Core type definitions for ddgraph.

Payload entries and the focal selector are validated pydantic models;
vertices and edges are frozen so they can be shared, hashed and cached.
"""

from enum import IntEnum, StrEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Density(StrEnum):
    """Merge policies deciding which PathElems collapse onto one vertex."""
    MOST_CONCISE = "mc"
    UPSTREAM_VS_DOWNSTREAM = "uvd"
    PREVENT_PATH_ENTANGLEMENT = "ppe"
    EXTERNAL_VS_INTERNAL = "evi"
    ONE_PER_LEVEL = "opl"


class Direction(IntEnum):
    """Direction along a path, expressed as a member offset."""
    UPSTREAM = -1
    DOWNSTREAM = 1


class CheckedStatus(StrEnum):
    """Tri-state visibility of a generation."""
    EMPTY = "empty"
    PARTIAL = "partial"
    FULL = "full"


class PayloadEntry(BaseModel):
    """
    One hop of an observed call path.
    """
    service: str
    operation: str

    model_config = ConfigDict(frozen=True, extra="ignore")

    def sort_key(self) -> str:
        # Vertical tab cannot appear in service or operation names.
        return f"{self.service}\v{self.operation}"


class PayloadPath(BaseModel):
    """
    A path in the wrapped payload shape. Exemplar attributes are not kept.
    """
    path: List[PayloadEntry]


class FocalSelector(BaseModel):
    """
    Service (and optionally operation) the graph is centered on.

    When `operation` is omitted any operation of the service matches.
    """
    service: str
    operation: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def matches(self, service: str, operation: str) -> bool:
        return service == self.service and (self.operation is None or operation == self.operation)


class Vertex(BaseModel):
    """
    A rendered node; one or more PathElems collapse onto it.
    """
    key: str
    is_focal_node: bool
    service: str
    operation: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Edge(BaseModel):
    """
    Directed connection between two vertex keys.

    Serialized with the `from` / `to` field names.
    """
    from_key: str = Field(alias="from")
    to_key: str = Field(alias="to")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def get_edge_id(from_key: str, to_key: str) -> str:
    """Identity of an edge, used to deduplicate by (from, to)."""
    return f"{from_key}\v{to_key}"
