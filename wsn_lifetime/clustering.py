"""
Cluster Formation: nearest-CH assignment and energy-aware CH election.
"""

from enum import IntEnum
from typing import Optional

import numpy as np
from scipy.spatial.distance import cdist

from .config import ASSUMED_CLUSTER_SIZE, RadioParams
from .energy import transmit_energy, receive_energy, aggregation_energy

UNASSIGNED = -1


class Role(IntEnum):
    """Role tag of an ordinary node for the current rotation window."""
    ORDINARY = 0
    CLUSTER_HEAD = 1


# =============================================================================
# CLUSTER ASSIGNMENT
# =============================================================================

def assign_nearest(positions: np.ndarray, head_positions: np.ndarray,
                   alive_mask: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Assign every node to its nearest cluster head.

    Parameters:
    -----------
    positions : np.ndarray
        Shape (n, 2) - node coordinates
    head_positions : np.ndarray
        Shape (k, 2) - cluster head coordinates
    alive_mask : np.ndarray, optional
        Shape (n,) - only these nodes are assigned, the rest get UNASSIGNED

    Returns:
    --------
    np.ndarray: Shape (n,) - head index per node; ties go to the lowest index
    """
    n = len(positions)
    assignment = np.full(n, UNASSIGNED, dtype=int)
    if len(head_positions) == 0:
        return assignment

    selected = np.arange(n) if alive_mask is None else np.flatnonzero(alive_mask)
    if selected.size == 0:
        return assignment

    dists = cdist(positions[selected], head_positions)
    # argmin returns the first minimum, i.e. the lowest head index
    assignment[selected] = np.argmin(dists, axis=1)
    return assignment


def nearest_alive_head(position: np.ndarray, head_positions: np.ndarray,
                       head_alive: np.ndarray) -> Optional[int]:
    """Nearest live head for a single node, or None if every head is dead."""
    candidates = np.flatnonzero(head_alive)
    if candidates.size == 0:
        return None
    dists = np.linalg.norm(head_positions[candidates] - position, axis=1)
    return int(candidates[np.argmin(dists)])


# =============================================================================
# CLUSTER HEAD ELECTION (rotating strategy)
# =============================================================================

def ch_cost_estimate(sink_distance: np.ndarray, params: RadioParams,
                     assumed_cluster_size: int = ASSUMED_CLUSTER_SIZE) -> np.ndarray:
    """
    Conservative per-cycle energy a node would spend as CH.

    Sink transmission at the node's real distance, plus reception and
    aggregation for a fixed cluster size (real membership is unknown
    before election).
    """
    e_tx = transmit_energy(params.data_packet_bits, sink_distance,
                           params.electronics_energy_per_bit, params.amp_coeff_short,
                           params.amp_coeff_long, params.distance_threshold)
    e_rx = receive_energy(params.overhead_packet_bits, params.electronics_energy_per_bit)
    e_da = aggregation_energy(params.data_packet_bits, params.aggregation_energy_per_bit,
                              assumed_cluster_size)
    return e_tx + assumed_cluster_size * e_rx + e_da


def elect_cluster_heads(positions: np.ndarray, sink: np.ndarray, energy: np.ndarray,
                        alive: np.ndarray, num_ch: int, window_length: int,
                        params: RadioParams,
                        assumed_cluster_size: int = ASSUMED_CLUSTER_SIZE) -> np.ndarray:
    """
    Elect cluster heads for the next rotation window.

    Nodes whose residual energy covers `window_length` cycles of the CH
    cost estimate are preferred, highest energy first. If too few qualify,
    the highest-energy alive nodes are taken anyway.

    Returns:
    --------
    np.ndarray: indices of elected heads, min(num_ch, alive count) of them.
    Empty when no node is alive.
    """
    alive_idx = np.flatnonzero(alive)
    num_ch = min(num_ch, alive_idx.size)
    if num_ch == 0:
        return np.empty(0, dtype=int)

    sink_distance = np.linalg.norm(positions[alive_idx] - sink, axis=1)
    required = window_length * ch_cost_estimate(sink_distance, params, assumed_cluster_size)

    # Stable sort keeps the lower index first among equal energies
    order = np.argsort(-energy[alive_idx], kind='stable')
    ranked = alive_idx[order]
    qualified = ranked[energy[ranked] > required[order]]

    if qualified.size >= num_ch:
        return qualified[:num_ch]
    return ranked[:num_ch]


def round_half_up(x: float) -> int:
    return int(np.floor(x + 0.5))


def num_cluster_heads(n_nodes: int, ch_fraction: float) -> int:
    """Number of heads elected per window, at least one."""
    return max(1, round_half_up(ch_fraction * n_nodes))
