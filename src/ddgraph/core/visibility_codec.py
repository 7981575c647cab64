"""
Visibility codec.

Encodes a set of non-negative visibility indices as a short, URL-safe
token made of run-length segments:

    token    := "" | segment ("." segment)*
    segment  := gap | gap "-" extra

Indices are sorted and grouped into maximal runs of consecutive integers.
For each run, `gap` is the number of skipped indices since the previous
run (the first run counts from -1, so its gap is its start) and `extra`
is the run length minus one. Numbers are lowercase base 36.

    {}                 -> ""
    {0, 1, 2, 3}       -> "0-3"
    {0, 1, 2, 7, 9}    -> "0-2.4.1"

Growing a visible range only touches the segments around it, and the
common "first k tiers visible" case is a single segment.
"""

import re
from typing import Iterable, List, Optional, Set, Tuple

from .errors import MalformedVisibilityToken

EMPTY_TOKEN = ""
SEGMENT_DELIMITER = "."
RUN_DELIMITER = "-"

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_SEGMENT_RE = re.compile(r"([0-9a-z]+)(?:-([0-9a-z]+))?")


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def _runs(indices: Iterable[int]) -> List[Tuple[int, int]]:
    ordered = sorted(set(indices))
    runs: List[Tuple[int, int]] = []
    for idx in ordered:
        if runs and runs[-1][1] == idx - 1:
            runs[-1] = (runs[-1][0], idx)
        else:
            runs.append((idx, idx))
    return runs


def encode(indices: Iterable[int]) -> str:
    """
    Encode visibility indices into a token.

    Raises:
        ValueError: If any index is negative or not an integer.
    """
    values = list(indices)
    for idx in values:
        if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
            raise ValueError(f"Visibility indices must be non-negative integers, got {idx!r}")

    segments = []
    prev_end = -1
    for start, end in _runs(values):
        segment = _to_base36(start - prev_end - 1)
        if end > start:
            segment += RUN_DELIMITER + _to_base36(end - start)
        segments.append(segment)
        prev_end = end
    return SEGMENT_DELIMITER.join(segments)


def decode_runs(token: str) -> List[Tuple[int, int]]:
    """
    Decode a token into its inclusive `(start, end)` runs, in ascending order.

    Only the run bounds are computed, so a short token naming an enormous
    range stays cheap.

    Raises:
        MalformedVisibilityToken: If the token is not a well-formed encoding.
    """
    if not isinstance(token, str):
        raise MalformedVisibilityToken(repr(token), "token must be a string")
    if token == EMPTY_TOKEN:
        return []

    runs: List[Tuple[int, int]] = []
    prev_end = -1
    for segment in token.split(SEGMENT_DELIMITER):
        match = _SEGMENT_RE.fullmatch(segment)
        if match is None:
            raise MalformedVisibilityToken(token, f"invalid segment {segment!r}")
        gap, extra = match.groups()
        try:
            start = prev_end + 1 + int(gap, 36)
            end = start + (int(extra, 36) if extra is not None else 0)
        except ValueError as e:
            # int() refuses digit strings past the interpreter's conversion limit
            raise MalformedVisibilityToken(token, str(e)) from e
        runs.append((start, end))
        prev_end = end
    return runs


def decode(token: str, limit: Optional[int] = None) -> Set[int]:
    """
    Decode a token produced by `encode`.

    When `limit` is given, only indices below it are returned and runs are
    clipped before they are expanded.

    Raises:
        MalformedVisibilityToken: If the token is not a well-formed encoding.
    """
    indices: Set[int] = set()
    for start, end in decode_runs(token):
        if limit is not None:
            if start >= limit:
                break
            end = min(end, limit - 1)
        indices.update(range(start, end + 1))
    return indices
