"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, the common payload/model options, and the logic that
turns those options into a GraphModel.
"""

import sys
from typing import Callable, Optional

import click

from ..config import load_settings
from ..core.errors import ConfigError, DdgError, MalformedVisibilityToken
from ..core.graph_model import GraphModel, make_graph
from ..core.payload import load_payload
from ..core.transform import transform_ddg_data
from ..core.types import Density, FocalSelector
from ..core.visibility_codec import decode_runs

DENSITY_CHOICES = [density.value for density in Density]


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"), err=True)


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def model_options(func: Callable) -> Callable:
    """Attach the payload argument and graph configuration options to a command."""
    options = [
        click.argument("payload", type=click.Path(exists=True, dir_okay=False)),
        click.option("-s", "--service", required=True, help="Focal service"),
        click.option("-o", "--operation", default=None, help="Focal operation (any if omitted)"),
        click.option("-d", "--density", type=click.Choice(DENSITY_CHOICES), default=None,
                     help="Vertex merge policy (default from settings)"),
        click.option("--show-ops/--hide-ops", "show_operations", default=None,
                     help="Include operations in vertex identity"),
        click.option("--vis", "vis_encoding", default=None, help="Visibility token"),
        click.option("-c", "--config", "config_path", default=None, help="Settings YAML file"),
        click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_graph_model(
    payload: str,
    service: str,
    operation: Optional[str],
    density: Optional[str],
    show_operations: Optional[bool],
    config_path: Optional[str],
) -> GraphModel:
    """
    Load a payload file and build the GraphModel for the given options.

    Prints the error and exits with status 1 on any boundary failure.
    """
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)

    result = load_payload(payload)
    if result.is_err():
        echo_error(str(result.unwrap_err()))
        sys.exit(1)

    try:
        ddg_model = transform_ddg_data(result.unwrap(), FocalSelector(service=service, operation=operation))
    except DdgError as e:
        echo_error(str(e))
        sys.exit(1)

    return make_graph(
        ddg_model,
        settings.show_operations if show_operations is None else show_operations,
        Density(density) if density else settings.density,
        settings.visible_hops,
    )


def resolve_encoding(vis_encoding: Optional[str]) -> Optional[str]:
    """Validate a user-supplied token; a malformed one falls back to the default view."""
    if vis_encoding is None:
        return None
    try:
        decode_runs(vis_encoding)
    except MalformedVisibilityToken as e:
        echo_warning(f"{e}. Showing the default view.")
        return None
    return vis_encoding
