"""
Show Command - Print the visible vertices and edges.
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...graph.export import get_stats, to_dict, to_dot
from ..utils import echo_info, echo_success, load_graph_model, model_options, resolve_encoding

console = Console()


@click.command()
@model_options
@click.option("--dot", "dot_output", default=None, type=click.Path(dir_okay=False),
              help="Also write the visible subgraph as DOT")
def show(
    payload: str,
    service: str,
    operation: Optional[str],
    density: Optional[str],
    show_operations: Optional[bool],
    vis_encoding: Optional[str],
    config_path: Optional[str],
    as_json: bool,
    dot_output: Optional[str],
) -> None:
    """
    Show the dependency graph around a focal service.

    Without --vis, everything within two hops of the focal node is shown.
    """
    model = load_graph_model(payload, service, operation, density, show_operations, config_path)
    encoding = resolve_encoding(vis_encoding)

    if dot_output:
        Path(dot_output).write_text(to_dot(model, encoding))

    if as_json:
        click.echo(json.dumps(to_dict(model, encoding), indent=2))
        return

    visible = model.get_visible(encoding)
    stats = get_stats(model, encoding)

    vertex_table = Table(title=f"Vertices ({stats['visible_vertices']}/{stats['total_vertices']})")
    vertex_table.add_column("Key", style="cyan")
    vertex_table.add_column("Service")
    vertex_table.add_column("Operation")
    vertex_table.add_column("Focal", justify="center")
    for vertex in visible.vertices:
        vertex_table.add_row(
            vertex.key,
            vertex.service,
            vertex.operation or "",
            "★" if vertex.is_focal_node else "",
        )

    edge_table = Table(title=f"Edges ({len(visible.edges)}/{stats['total_edges']})")
    edge_table.add_column("From", style="magenta")
    edge_table.add_column("To", style="green")
    for edge in visible.edges:
        edge_table.add_row(edge.from_key, edge.to_key)

    console.print(vertex_table)
    console.print(edge_table)

    encoding_label = encoding if encoding is not None else "(default)"
    echo_info(f"Density: {model.density.value}   Encoding: {encoding_label}")
    if dot_output:
        echo_success(f"Generated: {dot_output}")
