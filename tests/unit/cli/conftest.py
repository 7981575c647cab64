"""Shared helpers for CLI tests."""

import pytest
from click.testing import CliRunner

from ddgraph.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, payload_file):
    """Run a ddg subcommand against the fan-out payload with a most-concise graph."""

    def _invoke(command, *args):
        return runner.invoke(main, [command, *args, str(payload_file), "-s", "focal", "-o", "op", "-d", "mc"])

    return _invoke
