"""
Raw payload parsing.

Accepts the two shapes dependency payloads arrive in:

    [[{"service": "a", "operation": "x"}, ...], ...]
    {"dependencies": [{"path": [...], "attributes": [{"key": ..., "value": ...}]}]}

and normalizes both to a list of paths of PayloadEntry.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import TypeAdapter, ValidationError

from .errors import PayloadError
from .result import Err, Ok, Result
from .types import PayloadEntry, PayloadPath

logger = logging.getLogger(__name__)

Payload = List[List[PayloadEntry]]

_LEGACY_ADAPTER = TypeAdapter(List[List[PayloadEntry]])
_WRAPPED_ADAPTER = TypeAdapter(List[PayloadPath])


def parse_payload(data: Any, source: Union[str, None] = None) -> Payload:
    """
    Validate decoded JSON and return the list of paths.

    Raises:
        PayloadError: If `data` matches neither payload shape.
    """
    try:
        if isinstance(data, dict):
            if "dependencies" not in data:
                raise PayloadError("object payload must have a 'dependencies' list", source)
            wrapped = _WRAPPED_ADAPTER.validate_python(data["dependencies"])
            paths = [item.path for item in wrapped]
        elif isinstance(data, list):
            paths = _LEGACY_ADAPTER.validate_python(data)
        else:
            raise PayloadError(f"expected a list or object, got {type(data).__name__}", source)
    except ValidationError as e:
        raise PayloadError(str(e), source) from e

    empty = [i for i, path in enumerate(paths) if not path]
    if empty:
        raise PayloadError(f"paths must not be empty (indices {empty})", source)

    logger.debug("Parsed payload with %d paths", len(paths))
    return paths


def load_payload(path: Union[str, Path]) -> Result[Payload, PayloadError]:
    """Read and validate a JSON payload file."""
    payload_path = Path(path)
    if not payload_path.exists():
        return Err(PayloadError("file not found", str(payload_path)))

    try:
        data = json.loads(payload_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return Err(PayloadError(f"could not read JSON: {e}", str(payload_path)))

    try:
        return Ok(parse_payload(data, str(payload_path)))
    except PayloadError as e:
        return Err(e)
