"""
ddg CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging

import click

from .commands import codec, find, generation, show, visibility


@click.group()
@click.version_option(package_name="ddgraph")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """ddg: Deep Dependency Graph explorer.

    Builds the upstream/downstream graph around a focal service from
    observed call paths, and manages which parts of it are visible.

    \b
    Quick Start:
      ddg show paths.json -s checkout
      ddg generation 'checkout::pay' paths.json -s checkout --toggle
      ddg decode 0-4
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="[%X]",
    )


# Register commands
main.add_command(show.show)
main.add_command(find.find)
main.add_command(generation.generation)
main.add_command(visibility.hide)
main.add_command(visibility.reveal)
main.add_command(codec.encode)
main.add_command(codec.decode)

if __name__ == "__main__":
    main()
