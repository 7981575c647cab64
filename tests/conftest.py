"""Shared sample payloads for the ddgraph test suite."""

import json

import pytest

from ddgraph.core.transform import transform_ddg_data


def entry(service, operation):
    return {"service": service, "operation": operation}


FOCAL = entry("focal", "op")

ALPHA = entry("alpha", "a")
BETA = entry("beta", "b")
GAMMA = entry("gamma", "c")
DELTA = entry("delta", "d")


@pytest.fixture
def focal():
    return dict(FOCAL)


@pytest.fixture
def simple_path():
    """Five hops with the focal node in the middle: distances -2..2."""
    return [ALPHA, BETA, FOCAL, GAMMA, DELTA]


@pytest.fixture
def simple_model(simple_path, focal):
    return transform_ddg_data([simple_path], focal)


@pytest.fixture
def convergent_paths():
    """Two paths sharing everything up to the focal node, diverging then reconverging downstream."""
    return [
        [ALPHA, FOCAL, entry("x", "x1"), entry("z", "z1")],
        [ALPHA, FOCAL, entry("y", "y1"), entry("z", "z1")],
    ]


@pytest.fixture
def fan_out_paths():
    """
    Three paths through the same upstream and middle hops, each ending in a different leaf.

    Visibility indices: focal 0-2, mid 3-5, up 6-8, leaves 9-11.
    """
    up = entry("up", "u")
    mid = entry("mid", "m")
    return [
        [up, FOCAL, mid, entry("leaf1", "l")],
        [up, FOCAL, mid, entry("leaf2", "l")],
        [up, FOCAL, mid, entry("leaf3", "l")],
    ]


@pytest.fixture
def fan_out_model(fan_out_paths, focal):
    return transform_ddg_data(fan_out_paths, focal)


@pytest.fixture
def payload_file(tmp_path, fan_out_paths):
    path = tmp_path / "paths.json"
    path.write_text(json.dumps(fan_out_paths))
    return path
