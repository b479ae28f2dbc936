"""
conftest.py
~~~~~~~~~~~

Shared fixtures: small seeded networks and tiny MNIST-style datasets.
"""

import pytest

from mlpnet.initializer import make_rng
from mlpnet.network import Network

# Two separable classes over four "pixels"
TOY_PATTERNS = {
    0: [255, 255, 0, 0],
    1: [0, 0, 255, 255],
}


def write_toy_csv(path, repeats=10):
    """Write alternating class 0/1 records and return the record count."""
    lines = []
    for i in range(repeats):
        for label, pixels in TOY_PATTERNS.items():
            lines.append(','.join(str(v) for v in [label] + pixels))
    path.write_text('\n'.join(lines) + '\n')
    return len(lines)


@pytest.fixture
def rng():
    """Deterministic random source."""
    return make_rng(1234)


@pytest.fixture
def small_network(rng):
    """A 2-3-2 network with seeded weights."""
    return Network(2, 3, 2, 0.5, rng=rng)


@pytest.fixture
def toy_csv(tmp_path):
    """A 20 record, 4 pixel, 2 class CSV dataset."""
    path = tmp_path / "toy.csv"
    write_toy_csv(path)
    return str(path)


@pytest.fixture
def toy_network():
    """A 4-4-2 network matching the toy dataset."""
    return Network(4, 4, 2, 0.5, rng=make_rng(7))
