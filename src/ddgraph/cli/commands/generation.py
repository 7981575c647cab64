"""
Generation Command - Inspect or toggle the next generation of a vertex.
"""

import json
from typing import Optional

import click

from ...core.types import Direction
from ..utils import echo_info, echo_success, echo_warning, load_graph_model, model_options, resolve_encoding

DIRECTIONS = {
    "upstream": Direction.UPSTREAM,
    "downstream": Direction.DOWNSTREAM,
}


@click.command()
@click.argument("vertex_key")
@model_options
@click.option("--direction", type=click.Choice(list(DIRECTIONS)), default="downstream",
              help="Which side of the vertex to look at")
@click.option("--toggle", is_flag=True, help="Hide the generation if fully visible, else show it")
def generation(
    vertex_key: str,
    payload: str,
    service: str,
    operation: Optional[str],
    density: Optional[str],
    show_operations: Optional[bool],
    vis_encoding: Optional[str],
    config_path: Optional[str],
    as_json: bool,
    direction: str,
    toggle: bool,
) -> None:
    """
    Report whether the generation beyond VERTEX_KEY is empty, partial or full.
    """
    model = load_graph_model(payload, service, operation, density, show_operations, config_path)
    encoding = resolve_encoding(vis_encoding)
    step = DIRECTIONS[direction]

    members = model.get_generation(vertex_key, step, encoding)
    status = model.get_generation_visibility(vertex_key, step, encoding)
    update = model.get_vis_with_updated_generation(vertex_key, step, encoding) if toggle else None

    if as_json:
        click.echo(json.dumps({
            "vertex": vertex_key,
            "direction": direction,
            "size": len(members),
            "status": status.value if status else None,
            "visEncoding": update.vis_encoding if update else None,
            "update": update.update.value if update else None,
        }, indent=2))
        return

    if status is None:
        echo_warning(f"No {direction} generation for '{vertex_key}'")
        return

    click.echo(f"{direction.capitalize()} generation of {click.style(vertex_key, fg='cyan')}: "
               f"{len(members)} element(s), {click.style(status.value, bold=True)}")

    if update is not None:
        echo_success(f"Generation is now {update.update.value}")
        click.echo(update.vis_encoding)
    elif toggle:
        echo_info("Nothing to toggle")
