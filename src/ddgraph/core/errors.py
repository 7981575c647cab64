"""
Error taxonomy for ddgraph.

Invariant violations (write-once misuse, disconnected elements) indicate
bugs and always propagate. Boundary errors (malformed tokens, invalid
payloads) are meant to be caught by the caller and degraded gracefully.
"""

from typing import Optional


class DdgError(Exception):
    """Base class for every ddgraph error."""


class MissingFocalNode(DdgError):
    """
    Raised when a payload path has no entry matching the focal selector.

    Attributes:
        service: Focal service that was searched for.
        operation: Focal operation, or None when any operation matches.
        path_index: Index of the offending path in sorted order.
    """

    def __init__(self, service: str, operation: Optional[str], path_index: int):
        self.service = service
        self.operation = operation
        self.path_index = path_index
        focal = f"{service}::{operation}" if operation is not None else service
        super().__init__(f"A payload path lacked the focal node {focal} (path {path_index})")


class VisibilityIndexAlreadySet(DdgError):
    """Raised when a PathElem's visibility index is assigned a second time."""

    def __init__(self, current: int, attempted: int):
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Visibility index cannot be changed once set (is {current}, attempted {attempted})"
        )


class VisibilityIndexUnset(DdgError):
    """Raised when a PathElem's visibility index is read before assignment."""

    def __init__(self, description: str = ""):
        self.description = description
        message = "Visibility index was never set for this PathElem"
        if description:
            message = f"{message}: {description}"
        super().__init__(message)


class DisconnectedPathElem(DdgError):
    """
    Raised while building a GraphModel when a non-focal PathElem's
    focal-side neighbor has not been given a vertex yet.
    """

    def __init__(self, path_elem_description: str):
        self.path_elem_description = path_elem_description
        super().__init__(
            f"Non-focal PathElem cannot be connected to graph. PathElem: {path_elem_description}"
        )


class MalformedVisibilityToken(DdgError):
    """
    Raised when a visibility token cannot be decoded.

    Attributes:
        token: The rejected token.
        reason: Why it was rejected.
    """

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"Malformed visibility token {token!r}: {reason}")


class UnknownVertexKey(DdgError):
    """Raised when a mutator is given a vertex absent from the model."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"{key} does not exist in graph")


class PayloadError(DdgError):
    """Raised when a raw payload does not have a recognizable shape."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source
        location = f" in {source}" if source else ""
        super().__init__(f"Invalid payload{location}: {message}")


class ConfigError(DdgError):
    """Raised when a settings file cannot be parsed or validated."""
