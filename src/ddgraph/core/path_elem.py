"""
Path elements and the service/operation registry.

A PathElem is one occurrence of an operation at one offset of one observed
path. Paths, operations and services refer back to each other; those
references are plain (non-owning) attributes excluded from repr and
equality so the object graph never needs to be walked recursively.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import VisibilityIndexAlreadySet, VisibilityIndexUnset


@dataclass(eq=False)
class Service:
    name: str
    operations: Dict[str, "Operation"] = field(default_factory=dict, repr=False)

    def get_or_add_operation(self, name: str) -> "Operation":
        operation = self.operations.get(name)
        if operation is None:
            operation = Operation(name=name, service=self)
            self.operations[name] = operation
        return operation


@dataclass(eq=False)
class Operation:
    name: str
    service: Service = field(repr=False)
    path_elems: List["PathElem"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Path:
    """
    One observed call chain containing the focal node.

    `focal_idx` is -1 only while the path is being built.
    """
    focal_idx: int = -1
    members: List["PathElem"] = field(default_factory=list, repr=False)


class PathElem:
    """
    An operation at a specific offset within a specific path.

    The visibility index is write-once: assigning it twice or reading it
    before assignment raises.
    """

    __slots__ = ("member_idx", "member_of", "operation", "_visibility_idx")

    def __init__(self, path: Path, operation: Operation, member_idx: int):
        self.member_idx = member_idx
        self.member_of = path
        self.operation = operation
        self._visibility_idx: Optional[int] = None

    @property
    def distance(self) -> int:
        """Signed hops from the focal occurrence; negative is upstream."""
        return self.member_idx - self.member_of.focal_idx

    @property
    def visibility_idx(self) -> int:
        if self._visibility_idx is None:
            raise VisibilityIndexUnset(self._describe())
        return self._visibility_idx

    @visibility_idx.setter
    def visibility_idx(self, value: int) -> None:
        if self._visibility_idx is not None:
            raise VisibilityIndexAlreadySet(self._visibility_idx, value)
        self._visibility_idx = value

    @property
    def has_visibility_idx(self) -> bool:
        return self._visibility_idx is not None

    @property
    def focal_side_neighbor(self) -> Optional["PathElem"]:
        distance = self.distance
        if not distance:
            return None
        step = 1 if distance > 0 else -1
        return self.member_of.members[self.member_idx - step]

    @property
    def external_side_neighbor(self) -> Optional["PathElem"]:
        distance = self.distance
        if not distance:
            return None
        idx = self.member_idx + (1 if distance > 0 else -1)
        if idx < 0 or idx >= len(self.member_of.members):
            return None
        return self.member_of.members[idx]

    @property
    def is_external(self) -> bool:
        """True for a non-focal root or leaf of its path."""
        if not self.distance:
            return False
        return self.member_idx == 0 or self.member_idx == len(self.member_of.members) - 1

    @property
    def focal_path(self) -> List["PathElem"]:
        """Members from the focal occurrence to this element, in path order."""
        focal_idx = self.member_of.focal_idx
        lo, hi = min(focal_idx, self.member_idx), max(focal_idx, self.member_idx)
        return self.member_of.members[lo:hi + 1]

    @property
    def external_path(self) -> List["PathElem"]:
        """This element and every member farther from the focal occurrence, in path order."""
        members = self.member_of.members
        distance = self.distance
        if distance > 0:
            return members[self.member_idx:]
        if distance < 0:
            return members[:self.member_idx + 1]
        return [self]

    def _summary(self) -> Dict[str, Any]:
        return {
            "memberIdx": self.member_idx,
            "operation": self.operation.name,
            "service": self.operation.service.name,
            "visibilityIdx": self._visibility_idx,
        }

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; sibling members are summarized to avoid the path cycle."""
        return {
            **self._summary(),
            "memberOf": {
                "focalIdx": self.member_of.focal_idx,
                "members": [member._summary() for member in self.member_of.members],
            },
        }

    def _describe(self) -> str:
        return json.dumps(self._summary())

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __repr__(self) -> str:
        return f"<PathElem {self.operation.service.name}::{self.operation.name} vis={self._visibility_idx}>"
