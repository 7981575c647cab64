"""
Payload to model transform.

Builds PathElems for every hop of every path, registers services and
operations, and assigns each PathElem a visibility index such that indices
grow with absolute distance from the focal node:

    distance 0, then 1, then -1, then 2, then -2, ...

Within a distance tier, elements keep the order their (sorted) paths were
parsed in, so identical payloads always yield identical indices.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import MissingFocalNode
from .path_elem import Path, PathElem, Service
from .types import FocalSelector, PayloadEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DdgModel:
    """
    Output of the transform. Read-only; compared and hashed by identity.
    """
    paths: Tuple[Path, ...]
    services: Mapping[str, Service]
    distance_to_path_elems: Mapping[int, Tuple[PathElem, ...]]
    vis_idx_to_path_elem: Tuple[PathElem, ...]

    @property
    def size(self) -> int:
        return len(self.vis_idx_to_path_elem)


def _path_sort_key(path: Sequence[PayloadEntry]) -> str:
    return ",".join(entry.sort_key() for entry in path)


def _as_selector(focal: Union[FocalSelector, Mapping[str, Optional[str]]]) -> FocalSelector:
    if isinstance(focal, FocalSelector):
        return focal
    return FocalSelector(**focal)


def _as_entries(payload_path: Sequence[Union[PayloadEntry, Mapping[str, str]]]) -> List[PayloadEntry]:
    return [
        entry if isinstance(entry, PayloadEntry) else PayloadEntry.model_validate(entry)
        for entry in payload_path
    ]


def transform_ddg_data(
    payload: Sequence[Sequence[Union[PayloadEntry, Mapping[str, str]]]],
    focal: Union[FocalSelector, Mapping[str, Optional[str]]],
) -> DdgModel:
    """
    Transform payload paths into a DdgModel centered on `focal`.

    Entries may be PayloadEntry models or plain `{service, operation}` dicts.

    Raises:
        MissingFocalNode: If any path lacks an entry matching `focal`.
    """
    selector = _as_selector(focal)
    services: Dict[str, Service] = {}
    distance_to_path_elems: Dict[int, List[PathElem]] = {}
    paths: List[Path] = []
    entries = [_as_entries(payload_path) for payload_path in payload]

    for path_index, payload_path in enumerate(sorted(entries, key=_path_sort_key)):
        path = Path()

        for i, entry in enumerate(payload_path):
            service = services.get(entry.service)
            if service is None:
                service = Service(name=entry.service)
                services[entry.service] = service
            operation = service.get_or_add_operation(entry.operation)

            # First occurrence of the focal node wins
            if path.focal_idx == -1 and selector.matches(entry.service, entry.operation):
                path.focal_idx = i

            path_elem = PathElem(path=path, operation=operation, member_idx=i)
            operation.path_elems.append(path_elem)
            path.members.append(path_elem)

        if path.focal_idx == -1:
            raise MissingFocalNode(selector.service, selector.operation, path_index)

        # Distance depends on focal_idx, so bucket only after the path is complete
        for member in path.members:
            distance_to_path_elems.setdefault(member.distance, []).append(member)

        paths.append(path)

    vis_idx_to_path_elem = _assign_visibility_indices(distance_to_path_elems)

    logger.debug(
        "Transformed %d paths into %d path elems across %d services",
        len(paths), len(vis_idx_to_path_elem), len(services),
    )

    return DdgModel(
        paths=tuple(paths),
        services=MappingProxyType(services),
        distance_to_path_elems=MappingProxyType(
            {distance: tuple(elems) for distance, elems in distance_to_path_elems.items()}
        ),
        vis_idx_to_path_elem=vis_idx_to_path_elem,
    )


def _assign_visibility_indices(
    distance_to_path_elems: Mapping[int, Sequence[PathElem]],
) -> Tuple[PathElem, ...]:
    ordered: List[PathElem] = []
    magnitude = 0

    while True:
        if magnitude == 0:
            tiers = [distance_to_path_elems.get(0)]
        else:
            # Downstream tier first, then the upstream tier of the same magnitude
            tiers = [distance_to_path_elems.get(magnitude), distance_to_path_elems.get(-magnitude)]
        if not any(tiers):
            break
        for elems in tiers:
            for path_elem in elems or ():
                path_elem.visibility_idx = len(ordered)
                ordered.append(path_elem)
        magnitude += 1

    return tuple(ordered)
