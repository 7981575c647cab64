"""
Vertex key derivation per density policy.

Each policy maps a PathElem to a string; PathElems sharing a key collapse
onto one vertex. The operation is part of an element's key only when
operations are shown or the element is the focal occurrence.
"""

from typing import Callable, Dict

from .path_elem import PathElem
from .types import Density

PathElemHasher = Callable[[PathElem], str]

OPERATION_DELIMITER = "::"
PATH_DELIMITER = "|"
LEVEL_DELIMITER = "="
EXTERNAL_SUFFIX = "|external"


def _elem_to_str_factory(show_operations: bool) -> PathElemHasher:
    def elem_to_str(path_elem: PathElem) -> str:
        service = path_elem.operation.service.name
        if show_operations or path_elem.distance == 0:
            return f"{service}{OPERATION_DELIMITER}{path_elem.operation.name}"
        return service
    return elem_to_str


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def most_concise(show_operations: bool) -> PathElemHasher:
    return _elem_to_str_factory(show_operations)


def upstream_vs_downstream(show_operations: bool) -> PathElemHasher:
    elem_to_str = _elem_to_str_factory(show_operations)

    def hasher(path_elem: PathElem) -> str:
        return f"{elem_to_str(path_elem)}{LEVEL_DELIMITER}{_sign(path_elem.distance)}"
    return hasher


def prevent_path_entanglement(show_operations: bool) -> PathElemHasher:
    elem_to_str = _elem_to_str_factory(show_operations)

    def hasher(path_elem: PathElem) -> str:
        return PATH_DELIMITER.join(elem_to_str(member) for member in path_elem.focal_path)
    return hasher


def external_vs_internal(show_operations: bool) -> PathElemHasher:
    ppe = prevent_path_entanglement(show_operations)

    def hasher(path_elem: PathElem) -> str:
        key = ppe(path_elem)
        return f"{key}{EXTERNAL_SUFFIX}" if path_elem.is_external else key
    return hasher


def one_per_level(show_operations: bool) -> PathElemHasher:
    elem_to_str = _elem_to_str_factory(show_operations)

    def hasher(path_elem: PathElem) -> str:
        return f"{elem_to_str(path_elem)}{LEVEL_DELIMITER}{path_elem.distance}"
    return hasher


HASHER_FACTORIES: Dict[Density, Callable[[bool], PathElemHasher]] = {
    Density.MOST_CONCISE: most_concise,
    Density.UPSTREAM_VS_DOWNSTREAM: upstream_vs_downstream,
    Density.PREVENT_PATH_ENTANGLEMENT: prevent_path_entanglement,
    Density.EXTERNAL_VS_INTERNAL: external_vs_internal,
    Density.ONE_PER_LEVEL: one_per_level,
}


def get_path_elem_hasher(density: Density, show_operations: bool) -> PathElemHasher:
    """Return the key function for `density`."""
    try:
        factory = HASHER_FACTORIES[Density(density)]
    except (KeyError, ValueError):
        raise ValueError(
            f"Density {density!r} has not been implemented, try one of: "
            f"{', '.join(d.value for d in Density)}"
        ) from None
    return factory(show_operations)
