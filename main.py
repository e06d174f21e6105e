"""
WSN Lifetime Simulation - Rotating CHs vs Special CHs
Clustered sensor field with data aggregation, single-hop CH to sink.
"""

import logging
import numpy as np
from wsn_lifetime.config import (N_NODES, AREA_SIZE, SEED, INITIAL_ENERGY, NUM_SPECIAL_CH,
                                 SPECIAL_CH_ENERGY, DEFAULT_WINDOW, DEFAULT_RADIUS,
                                 WINDOW_RANGE, RADIUS_RANGE, RadioParams)
from wsn_lifetime.topology import NetworkTopology
from wsn_lifetime.simulation import run_rotating_strategy, run_fixed_special_ch
from wsn_lifetime.sweep import (sweep_window_length, sweep_radius, best_row,
                                comparison_table, deployed_energy, pad_collapse)
from wsn_lifetime.visualization import (plot_network_topology, plot_active_nodes,
                                        plot_energy_at_t1, plot_sweep,
                                        plot_strategy_comparison, plot_t1_comparison,
                                        plot_efficiency)


def section(title):
    print("\n" + "-" * 70)
    print(f"| {title:<66} |")
    print("-" * 70)


def print_energy_stats(energy):
    print(f"  Energy statistics at T1:")
    print(f"    > Mean remaining energy: {np.mean(energy):.4f} J")
    print(f"    > Std remaining energy:  {np.std(energy, ddof=1):.4f} J")
    print(f"    > Max remaining energy:  {np.max(energy):.4f} J")
    print(f"    > Min remaining energy:  {np.min(energy):.4f} J")


def main(verbose: bool = False, n_jobs: int = 1):
    """
    Run the full lifetime study.

    Parameters:
    -----------
    verbose : bool
        Log per-cycle progress of every run (default: False)
    n_jobs : int
        Worker processes for the C and R sweeps (default: 1)
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    # Banner
    print("\n")
    print("=" * 70)
    print("        WIRELESS SENSOR NETWORK LIFETIME SIMULATION")
    print("=" * 70)
    print("  Strategies: Rotating CHs vs Special (dedicated) CHs")
    print("=" * 70)

    params = RadioParams()
    print(f"\n  Network Parameters:")
    print(f"    > Network size: {AREA_SIZE} x {AREA_SIZE} m")
    print(f"    > Number of nodes: {N_NODES}")
    print(f"    > Initial energy: {INITIAL_ENERGY:.2f} J")
    print(f"    > Distance threshold d0: {params.distance_threshold:.2f} m")

    # A. Topology
    section("[A] NETWORK TOPOLOGY")
    topology = NetworkTopology(N_NODES, AREA_SIZE, SEED)
    topology.print_summary()
    positions, sink = topology.positions, topology.sink
    plot_network_topology(positions, sink, AREA_SIZE)

    # B. Rotating CHs with the default window
    section(f"[B] ROTATING CHs (C={DEFAULT_WINDOW})")
    rot = run_rotating_strategy(positions, sink, N_NODES, INITIAL_ENERGY, DEFAULT_WINDOW, params)
    print(f"  Total cycles simulated: {len(rot.cycles)}")
    print(f"  First node death (T1): {rot.t1} cycles")
    print(f"  Last node death: {rot.cycles[-1]} cycles")
    plot_active_nodes(rot.cycles, rot.alive_counts,
                      f'Active Nodes vs Cycles (C = {DEFAULT_WINDOW})',
                      save_path='active_nodes_rotation.png')

    # C. Energy at T1
    section("[C] ENERGY ANALYSIS AT T1")
    print_energy_stats(rot.energy_at_t1)
    plot_energy_at_t1(rot.energy_at_t1,
                      f'Remaining Energy at T1 = {rot.t1} cycles (C = {DEFAULT_WINDOW})',
                      save_path='energy_at_t1_rotation.png')

    # D. Sweep C
    section("[D] FINDING OPTIMAL C")
    c_sweep = sweep_window_length(positions, sink, N_NODES, INITIAL_ENERGY, params,
                                  WINDOW_RANGE, n_jobs=n_jobs)
    for row in c_sweep.itertuples():
        print(f"  C = {row.C:2d} ... T1 = {row.T1} cycles")
    best_c = best_row(c_sweep)
    c_opt, t1_c_opt = int(best_c['C']), int(best_c['T1'])
    print(f"\n  Optimal C = {c_opt} with T1 = {t1_c_opt} cycles")
    plot_sweep(c_sweep, 'C', 'C (Cycles between CH rotation)',
               'Network Lifetime vs CH Rotation Period', save_path='lifetime_vs_c.png')

    rot_opt = run_rotating_strategy(positions, sink, N_NODES, INITIAL_ENERGY, c_opt, params)
    plot_energy_at_t1(rot_opt.energy_at_t1, f'Remaining Energy at T1 (Optimal C = {c_opt})',
                      save_path='energy_at_t1_optimal_c.png')

    # E. Special CHs with the default radius
    section(f"[E] SPECIAL CHs (R={DEFAULT_RADIUS})")
    spc = run_fixed_special_ch(positions, sink, N_NODES, INITIAL_ENERGY, DEFAULT_RADIUS, params)
    spc_cycles, spc_counts = pad_collapse(spc.cycles, spc.alive_counts)
    print(f"  First node death (T1): {spc.t1} cycles")
    print(f"  Last node death: {spc_cycles[-1]} cycles")
    plot_network_topology(positions, sink, AREA_SIZE, spc.ch_positions, DEFAULT_RADIUS,
                          save_path='network_topology_special.png')
    plot_active_nodes(spc_cycles, spc_counts,
                      f'Active Nodes vs Cycles (Special CHs, R = {DEFAULT_RADIUS} m)',
                      save_path='active_nodes_special.png')
    plot_energy_at_t1(spc.energy_at_t1,
                      f'Remaining Energy at T1 = {spc.t1} cycles (R = {DEFAULT_RADIUS} m)',
                      save_path='energy_at_t1_special.png')
    plot_strategy_comparison([
        (f'Rotating CHs (C={DEFAULT_WINDOW})', rot.cycles, rot.alive_counts),
        (f'Special CHs (R={DEFAULT_RADIUS})', spc_cycles, spc_counts),
    ])
    improvement = 100 * (spc.t1 - rot.t1) / rot.t1 if rot.t1 > 0 else 0
    print(f"\n  Part B (C={DEFAULT_WINDOW}): T1 = {rot.t1} cycles")
    print(f"  Part E (R={DEFAULT_RADIUS}): T1 = {spc.t1} cycles")
    print(f"  Improvement: {improvement:.2f}%")

    # F. Sweep R
    section("[F] FINDING OPTIMAL R")
    r_sweep = sweep_radius(positions, sink, N_NODES, INITIAL_ENERGY, params,
                           RADIUS_RANGE, n_jobs=n_jobs)
    for row in r_sweep.itertuples():
        print(f"  R = {row.R:2d} m ... T1 = {row.T1} cycles")
    best_r = best_row(r_sweep)
    r_opt, t1_r_opt = int(best_r['R']), int(best_r['T1'])
    print(f"\n  Optimal R = {r_opt} m with T1 = {t1_r_opt} cycles")
    plot_sweep(r_sweep, 'R', 'R - Radius of CH Placement (m)',
               'Network Lifetime vs CH Placement Radius', save_path='lifetime_vs_r.png')

    spc_opt = run_fixed_special_ch(positions, sink, N_NODES, INITIAL_ENERGY, r_opt, params)
    plot_energy_at_t1(spc_opt.energy_at_t1, f'Remaining Energy at T1 (Optimal R = {r_opt} m)',
                      save_path='energy_at_t1_optimal_r.png')

    # G. Comparison
    section("[G] COMPREHENSIVE COMPARISON")
    e_regular = deployed_energy(N_NODES, INITIAL_ENERGY)
    e_special = deployed_energy(N_NODES, INITIAL_ENERGY, NUM_SPECIAL_CH, SPECIAL_CH_ENERGY)
    table = comparison_table([
        (f'Rotating C={DEFAULT_WINDOW}', rot.t1, e_regular),
        (f'Rotating C={c_opt} (Opt)', t1_c_opt, e_regular),
        (f'Special R={DEFAULT_RADIUS}', spc.t1, e_special),
        (f'Special R={r_opt} (Opt)', t1_r_opt, e_special),
    ])

    print(f"\n  {'Approach':<24} {'T1 (cycles)':>12} {'Energy (J)':>12} {'Cycles/J':>10}")
    print("  " + "-" * 62)
    for row in table.itertuples():
        print(f"  {row.approach:<24} {row.T1:>12d} {row.total_energy:>12.2f} {row.efficiency:>10.3f}")

    plot_t1_comparison(table)
    plot_efficiency(table)

    print("\n  Analysis:")
    if t1_r_opt > t1_c_opt:
        print(f"    > Special CHs with R={r_opt} is BETTER")
        print(f"    > Provides {t1_r_opt - t1_c_opt} more cycles "
              f"({100 * (t1_r_opt - t1_c_opt) / max(t1_c_opt, 1):.2f}% improvement)")
        print(f"    > Trade-off: uses {e_special - e_regular:.0f} J extra energy")
    else:
        print(f"    > Rotating CHs with C={c_opt} is BETTER")
        print(f"    > More energy efficient without additional hardware")

    print("\n" + "=" * 70)
    print("  ALL SIMULATIONS COMPLETED")
    print("=" * 70)

    return table


if __name__ == '__main__':
    main()
