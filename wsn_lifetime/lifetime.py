"""
Lifetime bookkeeping: alive-count series and first node death (T1).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass
class CycleSnapshot:
    """State of the network at the end of one cycle."""
    cycle: int
    energy: np.ndarray
    alive: np.ndarray
    head_energy: Optional[np.ndarray] = None


class LifetimeTracker:
    """
    Records (cycle, alive count) per completed cycle and freezes T1 with
    a copy of the energy vector the first time a node is found dead.
    """

    def __init__(self, n_nodes: int, trace: Optional[List[CycleSnapshot]] = None):
        self.n_nodes = n_nodes
        self.trace = trace
        self.cycles: List[int] = []
        self.alive_counts: List[int] = []
        self.t1: Optional[int] = None
        self.energy_at_t1: Optional[np.ndarray] = None

    @property
    def last_cycle(self) -> int:
        return self.cycles[-1] if self.cycles else 0

    def record(self, cycle: int, alive: np.ndarray, energy: np.ndarray,
               head_energy: Optional[np.ndarray] = None):
        n_alive = int(np.count_nonzero(alive))
        self.cycles.append(cycle)
        self.alive_counts.append(n_alive)

        if self.t1 is None and n_alive < self.n_nodes:
            self.t1 = cycle
            self.energy_at_t1 = energy.copy()

        if self.trace is not None:
            self.trace.append(CycleSnapshot(
                cycle=cycle,
                energy=energy.copy(),
                alive=alive.copy(),
                head_energy=None if head_energy is None else head_energy.copy(),
            ))

    def finish(self, last_energy: np.ndarray) -> Tuple[np.ndarray, np.ndarray, int, np.ndarray]:
        """
        Close the record. Without any death, T1 falls back to the last
        completed cycle and the snapshot to the final energy vector.
        """
        if self.t1 is None:
            t1 = self.last_cycle
            energy_at_t1 = last_energy.copy()
        else:
            t1 = self.t1
            energy_at_t1 = self.energy_at_t1
        return (np.asarray(self.cycles, dtype=int),
                np.asarray(self.alive_counts, dtype=int),
                t1, energy_at_t1)
