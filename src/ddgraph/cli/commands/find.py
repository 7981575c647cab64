"""
Find Command - Search visible vertices by service/operation substring.
"""

import json
from typing import Optional

import click

from ..utils import echo_info, echo_warning, load_graph_model, model_options, resolve_encoding


@click.command()
@click.argument("query")
@model_options
def find(
    query: str,
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
    Find vertices matching QUERY.

    QUERY is split on whitespace; a vertex matches if any word is a
    case-insensitive substring of its service or operation.
    """
    model = load_graph_model(payload, service, operation, density, show_operations, config_path)
    encoding = resolve_encoding(vis_encoding)

    visible_order = {vertex: i for i, vertex in enumerate(model.get_visible(encoding).vertices)}
    matches = sorted(model.get_visible_ui_find_matches(query, encoding), key=visible_order.__getitem__)
    hidden = sorted(vertex.key for vertex in model.get_hidden_ui_find_matches(query, encoding))

    if as_json:
        click.echo(json.dumps({
            "query": query,
            "matches": [vertex.key for vertex in matches],
            "hidden": hidden,
        }, indent=2))
        return

    if not matches:
        echo_warning(f"No visible vertex matches '{query}'")
    for vertex in matches:
        label = f"{vertex.service}::{vertex.operation}" if vertex.operation else vertex.service
        click.echo(f"  {click.style(label, fg='cyan')}  {click.style(vertex.key, dim=True)}")

    if hidden:
        echo_info(f"{len(hidden)} hidden vertex(es) also match. Use 'ddg reveal' to show them.")
