"""
Network Topology Module.
Creates the sensor field and places the dedicated cluster heads.
"""

import numpy as np
from typing import Tuple
from .config import N_NODES, AREA_SIZE, SEED, NUM_SPECIAL_CH


def generate_field(n_nodes: int = N_NODES, area: float = AREA_SIZE,
                   seed: int = SEED) -> Tuple[np.ndarray, np.ndarray]:
    """
    Scatter nodes uniformly over an area x area field.

    Returns:
    --------
    (positions, sink) - positions has shape (n_nodes, 2), the sink sits
    at the centre of the field
    """
    rng = np.random.default_rng(seed)
    positions = rng.uniform(0, area, size=(n_nodes, 2))
    sink = np.array([area / 2, area / 2])
    return positions, sink


def place_special_chs(sink: np.ndarray, radius: float,
                      count: int = NUM_SPECIAL_CH) -> np.ndarray:
    """
    Evenly space `count` points on a circle around the sink.
    First angle is 0; 2*pi is not repeated.
    """
    angles = np.linspace(0, 2 * np.pi, count + 1)[:-1]
    sink = np.asarray(sink, dtype=float)
    return np.column_stack([sink[0] + radius * np.cos(angles),
                            sink[1] + radius * np.sin(angles)])


class NetworkTopology:
    """
    Sensor field used by the study driver.

    - n_nodes regular nodes, uniform in an area x area square
    - Sink at the centre
    """

    def __init__(self, n_nodes: int = N_NODES, area: float = AREA_SIZE, seed: int = SEED):
        self.n_nodes = n_nodes
        self.area = area
        self.seed = seed
        self.positions, self.sink = generate_field(n_nodes, area, seed)

    @property
    def x(self) -> np.ndarray:
        return self.positions[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.positions[:, 1]

    def distances_to_sink(self) -> np.ndarray:
        return np.linalg.norm(self.positions - self.sink, axis=1)

    def print_summary(self):
        """Print network topology summary."""
        d = self.distances_to_sink()
        print(f"  > Created {self.n_nodes} sensor nodes in {self.area}x{self.area}m area (seed={self.seed})")
        print(f"  > Sink at center ({self.sink[0]:.0f}, {self.sink[1]:.0f})m")
        print(f"  > Distance to sink: min {d.min():.1f}m, mean {d.mean():.1f}m, max {d.max():.1f}m")
