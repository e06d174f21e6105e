"""
Simulation Engine for Network Lifetime with Cycle-Step Processing.

Two cluster head strategies are compared:
- Rotating CHs: every C cycles, 5% of the nodes are elected CH
- Special CHs: 5 dedicated high-energy CHs on a circle around the sink

In each cycle CHs receive, aggregate and forward to the sink, then the
remaining nodes send their reading to their CH. A node whose energy
drops to zero is dead for the rest of the run.
"""

import logging
from typing import List, NamedTuple, Optional

import numpy as np

from .config import (CH_FRACTION, NUM_SPECIAL_CH, SPECIAL_CH_ENERGY,
                     MAX_CYCLES_ROTATION, MAX_CYCLES_SPECIAL, PROGRESS_INTERVAL,
                     ConfigurationError, RadioParams)
from .clustering import (UNASSIGNED, Role, assign_nearest, elect_cluster_heads,
                         nearest_alive_head, num_cluster_heads)
from .energy import transmit_energy, receive_energy, aggregation_energy
from .lifetime import CycleSnapshot, LifetimeTracker
from .topology import place_special_chs

logger = logging.getLogger(__name__)


class RotationResult(NamedTuple):
    cycles: np.ndarray
    alive_counts: np.ndarray
    t1: int
    energy_at_t1: np.ndarray


class SpecialNodesResult(NamedTuple):
    cycles: np.ndarray
    alive_counts: np.ndarray
    t1: int
    energy_at_t1: np.ndarray
    ch_positions: np.ndarray


# =============================================================================
# HELPERS
# =============================================================================

def validate_inputs(positions, sink, n_nodes: int, initial_energy: float,
                    params: RadioParams):
    """
    Check the run inputs and return (positions, sink) as float arrays.

    Raises:
    -------
    ConfigurationError on malformed topology or non-positive parameters
    """
    positions = np.asarray(positions, dtype=float)
    if positions.ndim != 2 or positions.shape[1] != 2:
        raise ConfigurationError(f"positions must have shape (N, 2), got {positions.shape}")
    if n_nodes < 1:
        raise ConfigurationError(f"n_nodes must be at least 1, got {n_nodes}")
    if len(positions) != n_nodes:
        raise ConfigurationError(f"expected {n_nodes} positions, got {len(positions)}")

    sink = np.asarray(sink, dtype=float)
    if sink.shape != (2,):
        raise ConfigurationError(f"sink must be an (x, y) point, got shape {sink.shape}")
    if not initial_energy > 0:
        raise ConfigurationError(f"initial_energy must be positive, got {initial_energy!r}")

    params.validate()
    return positions, sink


def _tx(params: RadioParams, packet_bits: int, distance) -> np.ndarray:
    return transmit_energy(packet_bits, distance, params.electronics_energy_per_bit,
                           params.amp_coeff_short, params.amp_coeff_long,
                           params.distance_threshold)


def _apply_deaths(energy: np.ndarray, alive: np.ndarray) -> np.ndarray:
    """Mark depleted nodes dead and clamp their energy to exactly 0."""
    dead = np.flatnonzero(alive & (energy <= 0))
    alive[dead] = False
    energy[dead] = 0.0
    return dead


# =============================================================================
# STRATEGY A: ROTATING CLUSTER HEADS
# =============================================================================

def _form_clusters(positions: np.ndarray, heads: np.ndarray, alive: np.ndarray) -> np.ndarray:
    """Full reassignment of live nodes to the nearest elected head (node indices)."""
    nearest = assign_nearest(positions, positions[heads], alive)
    assignment = np.where(nearest == UNASSIGNED, UNASSIGNED, heads[nearest])
    # A head always serves itself, even if it shares a spot with another head
    assignment[heads] = heads
    return assignment


def _rotation_step(positions: np.ndarray, sink_distance: np.ndarray, energy: np.ndarray,
                   alive: np.ndarray, roles: np.ndarray, assignment: np.ndarray,
                   params: RadioParams):
    """One cycle of the rotating strategy. Mutates energy and alive in place."""
    is_head = roles == Role.CLUSTER_HEAD
    members = alive & ~is_head & (assignment != UNASSIGNED)
    counts = np.bincount(assignment[members], minlength=len(energy))

    # 1. CH: receive from members, aggregate members + own reading, send to sink
    heads = np.flatnonzero(alive & is_head)
    m = counts[heads]
    cost = (m * receive_energy(params.overhead_packet_bits, params.electronics_energy_per_bit)
            + aggregation_energy(params.data_packet_bits, params.aggregation_energy_per_bit, m + 1)
            + _tx(params, params.data_packet_bits, sink_distance[heads]))
    energy[heads] -= cost
    _apply_deaths(energy, alive)

    # 2. Regular nodes: send to CH, only while that CH is still alive
    senders = np.flatnonzero(alive & ~is_head)
    targets = assignment[senders]
    reachable = (targets != UNASSIGNED) & alive[targets]
    senders, targets = senders[reachable], targets[reachable]

    d = np.linalg.norm(positions[senders] - positions[targets], axis=1)
    energy[senders] -= _tx(params, params.overhead_packet_bits, d)
    _apply_deaths(energy, alive)


def run_rotating_strategy(positions, sink, n_nodes: int, initial_energy: float,
                          window_length: int, params: RadioParams, *,
                          ch_fraction: float = CH_FRACTION,
                          max_cycles: int = MAX_CYCLES_ROTATION,
                          trace: Optional[List[CycleSnapshot]] = None) -> RotationResult:
    """
    Simulate the network with CHs re-elected every `window_length` cycles.

    Parameters:
    -----------
    positions : array-like
        Shape (n_nodes, 2) - node coordinates, not modified
    sink : array-like
        (x, y) of the sink
    n_nodes : int
        Number of nodes
    initial_energy : float
        Initial energy per node (J)
    window_length : int
        C, cycles between CH elections
    params : RadioParams
        Radio and packet parameters
    ch_fraction : float
        Share of nodes elected CH per window
    max_cycles : int
        Safety limit on the run
    trace : list, optional
        Receives one CycleSnapshot per completed cycle

    Returns:
    --------
    RotationResult(cycles, alive_counts, t1, energy_at_t1)
    """
    positions, sink = validate_inputs(positions, sink, n_nodes, initial_energy, params)
    if window_length < 1:
        raise ConfigurationError(f"window_length must be at least 1, got {window_length}")

    energy = np.full(n_nodes, float(initial_energy))
    alive = np.ones(n_nodes, dtype=bool)
    roles = np.full(n_nodes, Role.ORDINARY, dtype=np.int8)
    assignment = np.full(n_nodes, UNASSIGNED, dtype=int)
    sink_distance = np.linalg.norm(positions - sink, axis=1)
    num_ch = num_cluster_heads(n_nodes, ch_fraction)

    tracker = LifetimeTracker(n_nodes, trace)
    cycle = 0

    while alive.any() and cycle < max_cycles:
        cycle += 1

        if (cycle - 1) % window_length == 0:
            heads = elect_cluster_heads(positions, sink, energy, alive, num_ch,
                                        window_length, params)
            if heads.size == 0:
                logger.info("Cycle %d: no viable cluster head, network is dead", cycle)
                break
            roles[:] = Role.ORDINARY
            roles[heads] = Role.CLUSTER_HEAD
            assignment = _form_clusters(positions, heads, alive)

        _rotation_step(positions, sink_distance, energy, alive, roles, assignment, params)
        tracker.record(cycle, alive, energy)

        if cycle % PROGRESS_INTERVAL == 0:
            logger.debug("Cycle %d: %d nodes alive", cycle, tracker.alive_counts[-1])

    if alive.any() and cycle >= max_cycles:
        logger.warning("Reached maximum cycles (%d) with %d nodes alive",
                       max_cycles, int(alive.sum()))

    result = RotationResult(*tracker.finish(energy))
    logger.info("Rotating CHs (C=%d): T1=%d, last cycle=%d",
                window_length, result.t1, tracker.last_cycle)
    return result


# =============================================================================
# STRATEGY B: FIXED SPECIAL CLUSTER HEADS
# =============================================================================

def _special_step(positions: np.ndarray, energy: np.ndarray, alive: np.ndarray,
                  ch_positions: np.ndarray, ch_sink_distance: np.ndarray,
                  ch_energy: np.ndarray, ch_alive: np.ndarray,
                  assignment: np.ndarray, params: RadioParams) -> np.ndarray:
    """
    One cycle of the special-CH strategy. Mutates energies, alive flags and
    the assignment of orphaned nodes in place.

    Returns indices of CHs that died this cycle.
    """
    counts = np.bincount(assignment[alive], minlength=len(ch_energy))

    # 1. Special CH: receive and forward member data only (no own sensing)
    heads = np.flatnonzero(ch_alive)
    m = counts[heads]
    ch_energy[heads] -= m * receive_energy(params.overhead_packet_bits,
                                           params.electronics_energy_per_bit)
    busy = heads[m > 0]
    ch_energy[busy] -= (aggregation_energy(params.data_packet_bits,
                                           params.aggregation_energy_per_bit, counts[busy])
                        + _tx(params, params.data_packet_bits, ch_sink_distance[busy]))
    dead_heads = _apply_deaths(ch_energy, ch_alive)

    # 2. Regular nodes: send to CH, repairing the assignment if the CH is dead
    senders = np.flatnonzero(alive)
    orphans = senders[~ch_alive[assignment[senders]]]
    if orphans.size:
        stranded = []
        for i in orphans:
            new_ch = nearest_alive_head(positions[i], ch_positions, ch_alive)
            if new_ch is None:
                stranded.append(i)
            else:
                assignment[i] = new_ch
        senders = np.setdiff1d(senders, stranded)

    d = np.linalg.norm(positions[senders] - ch_positions[assignment[senders]], axis=1)
    energy[senders] -= _tx(params, params.overhead_packet_bits, d)
    _apply_deaths(energy, alive)
    return dead_heads


def run_fixed_special_ch(positions, sink, n_nodes: int, initial_energy: float,
                         radius: float, params: RadioParams, *,
                         num_special_ch: int = NUM_SPECIAL_CH,
                         special_energy: float = SPECIAL_CH_ENERGY,
                         max_cycles: int = MAX_CYCLES_SPECIAL,
                         trace: Optional[List[CycleSnapshot]] = None) -> SpecialNodesResult:
    """
    Simulate the network with dedicated CHs on a circle of `radius` around the sink.

    Parameters:
    -----------
    positions, sink, n_nodes, initial_energy, params
        As for run_rotating_strategy
    radius : float
        R, distance of the special CHs from the sink (m)
    num_special_ch : int
        Number of dedicated CHs
    special_energy : float
        Initial energy per dedicated CH (J)
    max_cycles : int
        Safety limit on the run
    trace : list, optional
        Receives one CycleSnapshot per completed cycle (head_energy set)

    Returns:
    --------
    SpecialNodesResult(cycles, alive_counts, t1, energy_at_t1, ch_positions)
    """
    positions, sink = validate_inputs(positions, sink, n_nodes, initial_energy, params)
    if radius < 0:
        raise ConfigurationError(f"radius must be non-negative, got {radius}")
    if num_special_ch < 1:
        raise ConfigurationError(f"num_special_ch must be at least 1, got {num_special_ch}")
    if not special_energy > 0:
        raise ConfigurationError(f"special_energy must be positive, got {special_energy!r}")

    ch_positions = place_special_chs(sink, radius, num_special_ch)
    ch_sink_distance = np.linalg.norm(ch_positions - sink, axis=1)

    energy = np.full(n_nodes, float(initial_energy))
    alive = np.ones(n_nodes, dtype=bool)
    ch_energy = np.full(num_special_ch, float(special_energy))
    ch_alive = np.ones(num_special_ch, dtype=bool)

    # Fixed assignment, touched again only when a node's CH dies
    assignment = assign_nearest(positions, ch_positions)

    tracker = LifetimeTracker(n_nodes, trace)
    cycle = 0

    while alive.any() and ch_alive.any() and cycle < max_cycles:
        cycle += 1

        dead_heads = _special_step(positions, energy, alive, ch_positions, ch_sink_distance,
                                   ch_energy, ch_alive, assignment, params)
        for ch in dead_heads:
            logger.debug("Cycle %d: special CH %d depleted", cycle, ch)

        tracker.record(cycle, alive, energy, ch_energy)

        if cycle % PROGRESS_INTERVAL == 0:
            logger.debug("Cycle %d: %d nodes alive, %d CHs alive",
                         cycle, tracker.alive_counts[-1], int(ch_alive.sum()))

    if alive.any() and not ch_alive.any():
        logger.info("Cycle %d: all special CHs depleted with %d nodes alive",
                    cycle, int(alive.sum()))
    elif alive.any() and cycle >= max_cycles:
        logger.warning("Reached maximum cycles (%d) with %d nodes alive",
                       max_cycles, int(alive.sum()))

    cycles, alive_counts, t1, energy_at_t1 = tracker.finish(energy)
    logger.info("Special CHs (R=%g): T1=%d, last cycle=%d", radius, t1, tracker.last_cycle)
    return SpecialNodesResult(cycles, alive_counts, t1, energy_at_t1, ch_positions)
