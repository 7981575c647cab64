"""
Codec Commands - Convert between visibility indices and tokens.
"""

import sys
from typing import Tuple

import click

from ...core.errors import MalformedVisibilityToken
from ...core.visibility_codec import decode_runs
from ...core.visibility_codec import encode as encode_indices
from ..utils import echo_error


@click.command()
@click.argument("indices", nargs=-1, type=click.IntRange(min=0))
def encode(indices: Tuple[int, ...]) -> None:
    """Encode visibility INDICES into a token."""
    click.echo(encode_indices(indices))


@click.command()
@click.argument("token")
def decode(token: str) -> None:
    """
    Decode TOKEN into its runs of visibility indices.

    Runs print as `start-end`, single indices on their own.
    """
    try:
        runs = decode_runs(token)
    except MalformedVisibilityToken as e:
        echo_error(str(e))
        sys.exit(1)
    click.echo(" ".join(str(start) if start == end else f"{start}-{end}" for start, end in runs))
