"""
Visualization Module for Network Lifetime Results.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_network_topology(positions, sink, area, ch_positions=None, radius=None,
                          save_path='network_topology.png'):
    """
    Plot sensor nodes and sink, optionally the special CHs and their circle.
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    ax.scatter(positions[:, 0], positions[:, 1], c='blue', s=40, marker='o',
               label='Sensor Nodes', zorder=3)
    ax.scatter(sink[0], sink[1], c='red', s=200, marker='^',
               edgecolors='black', linewidths=1, label='Sink', zorder=10)

    if ch_positions is not None:
        ax.scatter(ch_positions[:, 0], ch_positions[:, 1], c='green', s=120, marker='s',
                   edgecolors='black', linewidths=1, label='Special CHs', zorder=5)
        if radius:
            theta = np.linspace(0, 2 * np.pi, 100)
            ax.plot(sink[0] + radius * np.cos(theta), sink[1] + radius * np.sin(theta),
                    'k--', linewidth=1, zorder=2)
        title = f'Network Topology with Special CHs (R = {radius} m)'
    else:
        title = 'Wireless Sensor Network Topology'

    ax.set_xlim(0, area)
    ax.set_ylim(0, area)
    ax.set_xlabel('X Position (m)', fontsize=12)
    ax.set_ylabel('Y Position (m)', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.set_aspect('equal')

    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"Network topology saved to: {save_path}")


def plot_active_nodes(cycles, alive_counts, title, save_path='active_nodes.png'):
    """Number of active nodes vs cycles."""
    plt.figure(figsize=(10, 6))
    plt.plot(cycles, alive_counts, 'b-', linewidth=2)
    plt.xlabel('Number of Cycles', fontsize=12)
    plt.ylabel('Number of Active Nodes', fontsize=12)
    plt.title(title, fontsize=14, fontweight='bold')
    plt.grid(True, alpha=0.3)

    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"Active nodes plot saved to: {save_path}")


def plot_energy_at_t1(energy_at_t1, title, save_path='energy_at_t1.png'):
    """Remaining energy per node at the first node death."""
    plt.figure(figsize=(12, 5))
    plt.bar(np.arange(1, len(energy_at_t1) + 1), energy_at_t1, color='steelblue')
    plt.xlabel('Node Index', fontsize=12)
    plt.ylabel('Remaining Energy (J)', fontsize=12)
    plt.title(title, fontsize=14, fontweight='bold')
    plt.grid(axis='y', alpha=0.3)

    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"Energy plot saved to: {save_path}")


def plot_sweep(df: pd.DataFrame, column: str, xlabel: str, title: str,
               save_path='lifetime_sweep.png'):
    """T1 vs a swept parameter, with the optimum highlighted."""
    best = df.loc[df['T1'].idxmax()]

    plt.figure(figsize=(10, 6))
    plt.plot(df[column], df['T1'], 'b-o', linewidth=2, markersize=6, label=f'T1 vs {column}')
    plt.plot(float(best[column]), int(best['T1']), 'r*', markersize=15, linewidth=2,
             label=f"Optimal: {column}={float(best[column]):g}, T1={int(best['T1'])}")
    plt.xlabel(xlabel, fontsize=12)
    plt.ylabel('T1 - Network Lifetime (cycles)', fontsize=12)
    plt.title(title, fontsize=14, fontweight='bold')
    plt.legend(fontsize=11)
    plt.grid(True, alpha=0.3)

    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"Sweep plot saved to: {save_path}")


def plot_strategy_comparison(series, save_path='strategy_comparison.png'):
    """
    Overlay active-node curves.

    Parameters:
    -----------
    series : list of (label, cycles, alive_counts)
    """
    colors = ['b-', 'r-', 'g-', 'm-']
    plt.figure(figsize=(10, 6))
    for i, (label, cycles, counts) in enumerate(series):
        plt.plot(cycles, counts, colors[i % len(colors)], linewidth=2, label=label)
    plt.xlabel('Number of Cycles', fontsize=12)
    plt.ylabel('Number of Active Nodes', fontsize=12)
    plt.title('Comparison: Rotating CHs vs Special CHs', fontsize=14, fontweight='bold')
    plt.legend(fontsize=11)
    plt.grid(True, alpha=0.3)

    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()
    print(f"Comparison plot saved to: {save_path}")


def _annotated_bars(labels, values, fmt, ylabel, title, save_path):
    colors = ['#3366cc', '#1a994d', '#cc6633', '#cc3333']

    plt.figure(figsize=(10, 6))
    bars = plt.bar(labels, values, color=colors[:len(values)], width=0.6)
    top = max(values) if len(values) else 0
    for bar in bars:
        height = bar.get_height()
        plt.text(bar.get_x() + bar.get_width() / 2., height + top * 0.03,
                 fmt.format(height),
                 ha='center', va='bottom', fontsize=9, fontweight='bold')

    plt.ylabel(ylabel, fontsize=12)
    plt.title(title, fontsize=14, fontweight='bold')
    plt.xticks(rotation=15)
    plt.ylim(0, top * 1.15 if top > 0 else 1)
    plt.grid(axis='y', alpha=0.3)

    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close()


def plot_t1_comparison(table: pd.DataFrame, save_path='t1_comparison.png'):
    """T1 per approach (comparison table from sweep.comparison_table)."""
    _annotated_bars(table['approach'].tolist(), table['T1'].to_numpy(), '{:.0f} cycles',
                    'T1 - Network Lifetime (cycles)', 'Comparison of Different CH Strategies',
                    save_path)
    print(f"T1 comparison saved to: {save_path}")


def plot_efficiency(table: pd.DataFrame, save_path='energy_efficiency.png'):
    """Lifetime per unit of deployed energy."""
    _annotated_bars(table['approach'].tolist(), table['efficiency'].to_numpy(), '{:.3f}',
                    'Lifetime per Unit Energy (cycles/J)', 'Energy Efficiency Comparison',
                    save_path)
    print(f"Efficiency plot saved to: {save_path}")
