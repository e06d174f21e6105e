import logging

import numpy as np
import pytest

from wsn_lifetime.config import ConfigurationError, RadioParams
from wsn_lifetime.simulation import (run_rotating_strategy, run_fixed_special_ch,
                                     validate_inputs)


def check_lifetime_invariants(result, trace, n_nodes):
    cycles, counts, t1, energy_at_t1 = result[:4]

    np.testing.assert_array_equal(cycles, np.arange(1, len(cycles) + 1))
    assert np.all(np.diff(counts) <= 0)
    assert len(energy_at_t1) == n_nodes

    below = np.flatnonzero(counts < n_nodes)
    if below.size:
        assert t1 == cycles[below[0]]
    else:
        assert t1 == cycles[-1]
        np.testing.assert_array_equal(energy_at_t1, trace[-1].energy)

    for prev, cur in zip(trace, trace[1:]):
        assert np.all(cur.energy >= 0)
        # Depletion only, and the dead stay dead at exactly zero
        assert np.all(cur.energy[prev.alive] <= prev.energy[prev.alive])
        assert not np.any(cur.alive & ~prev.alive)
        assert np.all(cur.energy[~cur.alive] == 0.0)
    np.testing.assert_array_equal([s.alive.sum() for s in trace], counts)


# =============================================================================
# Rotating CHs
# =============================================================================

def test_rotation_invariants(small_field, params):
    positions, sink = small_field
    trace = []
    result = run_rotating_strategy(positions, sink, 20, 0.5, 5, params, trace=trace)

    check_lifetime_invariants(result, trace, 20)
    # Runs until the whole field is depleted
    assert result.alive_counts[-1] == 0
    assert result.t1 < result.cycles[-1]


def test_rotation_is_deterministic(small_field, params):
    positions, sink = small_field
    before = positions.copy()
    a = run_rotating_strategy(positions, sink, 20, 0.5, 3, params)
    b = run_rotating_strategy(positions, sink, 20, 0.5, 3, params)

    assert a.t1 == b.t1
    np.testing.assert_array_equal(a.energy_at_t1, b.energy_at_t1)
    np.testing.assert_array_equal(a.alive_counts, b.alive_counts)
    np.testing.assert_array_equal(positions, before)


def test_rotation_result_unpacks_as_tuple(small_field, params):
    positions, sink = small_field
    cycles, alive_counts, t1, energy_at_t1 = run_rotating_strategy(
        positions, sink, 20, 0.2, 5, params)
    assert len(cycles) == len(alive_counts)


def test_lone_head_pays_for_its_own_reading(params):
    positions = np.array([[10.0, 0.0]])
    trace = []
    run_rotating_strategy(positions, [0.0, 0.0], 1, 1.0, 5, params, max_cycles=1, trace=trace)

    # Aggregation of one signal plus a data packet to the sink at 10 m
    cost = 4000 * 50e-9 + (4000 * 50e-9 + 4000 * 10e-9 * 100)
    assert trace[0].energy[0] == pytest.approx(1.0 - cost)


def test_member_skips_when_head_died_this_cycle(params):
    # Node 0 is elected (equal energies, lowest index) and dies at cycle 1
    positions = np.array([[0.0, 0.0], [10.0, 0.0]])
    trace = []
    result = run_rotating_strategy(positions, [0.0, 0.0], 2, 5e-4, 5, params, trace=trace)

    np.testing.assert_array_equal(result.cycles, [1, 2, 3, 4, 5, 6])
    np.testing.assert_array_equal(result.alive_counts, [1, 1, 1, 1, 1, 0])
    assert result.t1 == 1
    np.testing.assert_allclose(result.energy_at_t1, [0.0, 5e-4])
    # Orphan does not transmit until the next election promotes it at cycle 6
    for snapshot in trace[:5]:
        assert snapshot.energy[1] == 5e-4


def test_rotation_hits_cap(small_field, params, caplog):
    positions, sink = small_field
    trace = []
    with caplog.at_level(logging.WARNING, logger='wsn_lifetime.simulation'):
        result = run_rotating_strategy(positions, sink, 20, 100.0, 5, params,
                                       max_cycles=4, trace=trace)

    np.testing.assert_array_equal(result.cycles, [1, 2, 3, 4])
    assert result.t1 == 4
    np.testing.assert_array_equal(result.energy_at_t1, trace[-1].energy)
    assert "Reached maximum cycles" in caplog.text


def test_rotation_rejects_bad_window(small_field, params):
    positions, sink = small_field
    with pytest.raises(ConfigurationError):
        run_rotating_strategy(positions, sink, 20, 2.0, 0, params)


# =============================================================================
# Special CHs
# =============================================================================

def test_special_invariants(small_field, params):
    positions, sink = small_field
    trace = []
    result = run_fixed_special_ch(positions, sink, 20, 0.5, 25, params, trace=trace)

    check_lifetime_invariants(result, trace, 20)
    assert result.ch_positions.shape == (5, 2)
    for prev, cur in zip(trace, trace[1:]):
        assert np.all(cur.head_energy >= 0)
        assert np.all(cur.head_energy <= prev.head_energy)


def test_special_is_deterministic(small_field, params):
    positions, sink = small_field
    a = run_fixed_special_ch(positions, sink, 20, 0.5, 15, params)
    b = run_fixed_special_ch(positions, sink, 20, 0.5, 15, params)
    assert a.t1 == b.t1
    np.testing.assert_array_equal(a.energy_at_t1, b.energy_at_t1)
    np.testing.assert_array_equal(a.ch_positions, b.ch_positions)


def test_special_end_to_end_single_head_at_sink(ring_field, params):
    positions, sink = ring_field
    result = run_fixed_special_ch(positions, sink, 4, 0.001, 0, params, num_special_ch=1)

    np.testing.assert_array_equal(result.cycles, [1])
    np.testing.assert_array_equal(result.alive_counts, [0])
    assert result.t1 == 1
    assert len(result.energy_at_t1) == 4
    np.testing.assert_array_equal(result.energy_at_t1, np.zeros(4))
    np.testing.assert_array_equal(result.ch_positions, [[0.0, 0.0]])


def test_special_staggered_deaths(ring_field, params):
    positions, sink = ring_field
    result = run_fixed_special_ch(positions, sink, 4, 0.01, 0, params, num_special_ch=1)

    # Per-cycle transmit cost at 10, 20, 30 and 40 m
    cost = 1000 * 50e-9 + 1000 * 10e-9 * np.array([10.0, 20.0, 30.0, 40.0]) ** 2
    np.testing.assert_array_equal(result.alive_counts, [3, 2, 1, 1, 1, 1, 1, 1, 1, 0])
    assert result.t1 == 1
    np.testing.assert_allclose(result.energy_at_t1, [0.01 - cost[0], 0.01 - cost[1],
                                                     0.01 - cost[2], 0.0])


def test_idle_special_heads_pay_nothing(params):
    positions = np.array([[62.0, 50.0]])
    trace = []
    run_fixed_special_ch(positions, [50.0, 50.0], 1, 1.0, 10, params, max_cycles=3, trace=trace)

    # Only the head at angle 0 serves the node
    for snapshot in trace:
        assert snapshot.head_energy[0] < 4.0
        np.testing.assert_array_equal(snapshot.head_energy[1:], 4.0)


def test_orphan_is_repaired_to_next_live_head(params, caplog):
    # Heads at (60, 50) and (40, 50); the node starts with the closer one
    positions = np.array([[62.0, 50.0]])
    trace = []
    with caplog.at_level(logging.INFO, logger='wsn_lifetime.simulation'):
        result = run_fixed_special_ch(positions, [50.0, 50.0], 1, 1.0, 10, params,
                                      num_special_ch=2, special_energy=1e-3, trace=trace)

    repaired_tx = 1000 * 50e-9 + 1000 * 10e-9 * 22.0 ** 2
    # Cycle 1: head 0 dies, node repairs to head 1 at 22 m
    np.testing.assert_array_equal(trace[0].head_energy, [0.0, 1e-3])
    assert trace[0].energy[0] == pytest.approx(1.0 - repaired_tx)
    # Cycle 2: head 1 dies too, node has nobody to send to
    np.testing.assert_array_equal(trace[1].head_energy, [0.0, 0.0])
    assert trace[1].energy[0] == trace[0].energy[0]

    # Run ends on head exhaustion with the node still alive
    np.testing.assert_array_equal(result.alive_counts, [1, 1])
    assert result.t1 == 2
    np.testing.assert_allclose(result.energy_at_t1, trace[-1].energy)
    assert "all special CHs depleted" in caplog.text


def test_special_hits_cap(small_field, params):
    positions, sink = small_field
    result = run_fixed_special_ch(positions, sink, 20, 100.0, 25, params, max_cycles=7)
    assert result.cycles[-1] == 7
    assert result.t1 == 7


@pytest.mark.parametrize("kwargs", [
    {"radius": -1.0},
    {"num_special_ch": 0},
    {"special_energy": 0.0},
])
def test_special_rejects_bad_setup(small_field, params, kwargs):
    positions, sink = small_field
    args = {"radius": 25.0}
    args.update(kwargs)
    radius = args.pop("radius")
    with pytest.raises(ConfigurationError):
        run_fixed_special_ch(positions, sink, 20, 2.0, radius, params, **args)


# =============================================================================
# Input validation
# =============================================================================

@pytest.mark.parametrize("positions, sink, n_nodes, energy", [
    (np.zeros((3, 3)), [0.0, 0.0], 3, 1.0),
    (np.zeros(6), [0.0, 0.0], 6, 1.0),
    (np.zeros((3, 2)), [0.0, 0.0], 4, 1.0),
    (np.zeros((0, 2)), [0.0, 0.0], 0, 1.0),
    (np.zeros((3, 2)), [0.0, 0.0, 0.0], 3, 1.0),
    (np.zeros((3, 2)), [0.0, 0.0], 3, 0.0),
    (np.zeros((3, 2)), [0.0, 0.0], 3, -2.0),
])
def test_validate_inputs_rejects(positions, sink, n_nodes, energy, params):
    with pytest.raises(ConfigurationError):
        validate_inputs(positions, sink, n_nodes, energy, params)


def test_validate_inputs_rejects_bad_params():
    with pytest.raises(ConfigurationError):
        validate_inputs(np.zeros((2, 2)), [0, 0], 2, 1.0, RadioParams(data_packet_bits=0))


def test_validate_inputs_accepts_lists(params):
    positions, sink = validate_inputs([[1, 2], [3, 4]], (0, 0), 2, 1.0, params)
    assert positions.dtype == float
    assert sink.shape == (2,)


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_radio_params_default_threshold():
    p = RadioParams()
    assert p.distance_threshold == pytest.approx(np.sqrt(10e-9 / 0.0013e-9))
    assert RadioParams(distance_threshold=50.0).distance_threshold == 50.0
