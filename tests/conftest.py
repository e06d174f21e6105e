import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest

from wsn_lifetime.config import RadioParams
from wsn_lifetime.topology import generate_field


@pytest.fixture
def params():
    return RadioParams()


@pytest.fixture
def small_field():
    """20 nodes in a 100x100 m field, sink at the centre."""
    return generate_field(n_nodes=20, area=100, seed=7)


@pytest.fixture
def ring_field():
    """Four nodes at 10, 20, 30 and 40 m from a sink at the origin."""
    positions = np.array([[10.0, 0.0], [0.0, 20.0], [-30.0, 0.0], [0.0, -40.0]])
    sink = np.array([0.0, 0.0])
    return positions, sink
