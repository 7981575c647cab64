"""
Visibility Commands - Hide or reveal vertices, producing a new token.
"""

import json
import sys
from typing import Optional, Tuple

import click

from ...core.errors import UnknownVertexKey
from ..utils import echo_error, echo_warning, load_graph_model, model_options, resolve_encoding


@click.command()
@click.argument("vertex_key")
@model_options
def hide(
    vertex_key: str,
    payload: str,
    service: str,
    operation: Optional[str],
    density: Optional[str],
    show_operations: Optional[bool],
    vis_encoding: Optional[str],
    config_path: Optional[str],
    as_json: bool,
) -> None:
    """
    Hide VERTEX_KEY and everything beyond it; prints the new token.
    """
    model = load_graph_model(payload, service, operation, density, show_operations, config_path)
    encoding = resolve_encoding(vis_encoding)

    new_encoding = model.get_vis_without_vertex(vertex_key, encoding)

    if as_json:
        click.echo(json.dumps({"vertex": vertex_key, "visEncoding": new_encoding}, indent=2))
        return

    if new_encoding is None:
        echo_warning(f"'{vertex_key}' is unknown or already hidden")
        return
    click.echo(new_encoding)


@click.command()
@click.argument("vertex_keys", nargs=-1, required=True)
@model_options
def reveal(
    vertex_keys: Tuple[str, ...],
    payload: str,
    service: str,
    operation: Optional[str],
    density: Optional[str],
    show_operations: Optional[bool],
    vis_encoding: Optional[str],
    config_path: Optional[str],
    as_json: bool,
) -> None:
    """
    Reveal VERTEX_KEYS along with their paths to the focal node; prints the new token.
    """
    model = load_graph_model(payload, service, operation, density, show_operations, config_path)
    encoding = resolve_encoding(vis_encoding)

    try:
        new_encoding = model.get_vis_with_vertices(vertex_keys, encoding)
    except UnknownVertexKey as e:
        echo_error(str(e))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"vertices": list(vertex_keys), "visEncoding": new_encoding}, indent=2))
        return
    click.echo(new_encoding)
