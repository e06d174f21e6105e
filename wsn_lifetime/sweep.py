"""
Parameter Sweeps and Strategy Comparison.

Every run owns its own state, so sweep points can be spread over a
process pool without changing the results.
"""

import multiprocessing
from functools import partial
from typing import Iterable, List, Tuple

import numpy as np
import pandas as pd

from .config import (WINDOW_RANGE, RADIUS_RANGE, MAX_CYCLES_ROTATION, MAX_CYCLES_SPECIAL,
                     SPECIAL_CH_ENERGY, RadioParams)
from .simulation import run_rotating_strategy, run_fixed_special_ch


def _rotation_point(window_length, positions, sink, n_nodes, initial_energy, params,
                    max_cycles=MAX_CYCLES_ROTATION):
    result = run_rotating_strategy(positions, sink, n_nodes, initial_energy,
                                   window_length, params, max_cycles=max_cycles)
    last = int(result.cycles[-1]) if len(result.cycles) else 0
    return window_length, result.t1, last, last >= max_cycles


def _special_point(radius, positions, sink, n_nodes, initial_energy, params,
                   max_cycles=MAX_CYCLES_SPECIAL):
    result = run_fixed_special_ch(positions, sink, n_nodes, initial_energy,
                                  radius, params, max_cycles=max_cycles)
    last = int(result.cycles[-1]) if len(result.cycles) else 0
    return radius, result.t1, last, last >= max_cycles


def _map(func, values: List, n_jobs: int) -> List:
    if n_jobs > 1:
        with multiprocessing.Pool(processes=n_jobs) as pool:
            return pool.map(func, values)
    return [func(v) for v in values]


def sweep_window_length(positions, sink, n_nodes: int, initial_energy: float,
                        params: RadioParams, window_lengths: Iterable[int] = WINDOW_RANGE,
                        n_jobs: int = 1, max_cycles: int = MAX_CYCLES_ROTATION) -> pd.DataFrame:
    """
    T1 of the rotating strategy for each rotation window C.

    Returns:
    --------
    pd.DataFrame with columns C, T1, last_cycle, hit_cap
    """
    func = partial(_rotation_point, positions=positions, sink=sink, n_nodes=n_nodes,
                   initial_energy=initial_energy, params=params, max_cycles=max_cycles)
    rows = _map(func, list(window_lengths), n_jobs)
    return pd.DataFrame(rows, columns=['C', 'T1', 'last_cycle', 'hit_cap'])


def sweep_radius(positions, sink, n_nodes: int, initial_energy: float,
                 params: RadioParams, radii: Iterable[float] = RADIUS_RANGE,
                 n_jobs: int = 1, max_cycles: int = MAX_CYCLES_SPECIAL) -> pd.DataFrame:
    """
    T1 of the special-CH strategy for each placement radius R.

    Returns:
    --------
    pd.DataFrame with columns R, T1, last_cycle, hit_cap
    """
    func = partial(_special_point, positions=positions, sink=sink, n_nodes=n_nodes,
                   initial_energy=initial_energy, params=params, max_cycles=max_cycles)
    rows = _map(func, list(radii), n_jobs)
    return pd.DataFrame(rows, columns=['R', 'T1', 'last_cycle', 'hit_cap'])


def best_row(df: pd.DataFrame, column: str = 'T1') -> pd.Series:
    """Row with the largest `column`; the first one wins on ties."""
    return df.loc[df[column].idxmax()]


def deployed_energy(n_nodes: int, initial_energy: float, num_special_ch: int = 0,
                    special_energy: float = SPECIAL_CH_ENERGY) -> float:
    """Energy budget of a deployment: regular nodes plus the extra carried by special CHs."""
    return n_nodes * initial_energy + num_special_ch * (special_energy - initial_energy)


def comparison_table(entries: Iterable[Tuple[str, int, float]]) -> pd.DataFrame:
    """
    Summary of strategies.

    Parameters:
    -----------
    entries : iterable of (approach, T1, total_energy)

    Returns:
    --------
    pd.DataFrame with columns approach, T1, total_energy, efficiency (cycles/J)
    """
    df = pd.DataFrame(list(entries), columns=['approach', 'T1', 'total_energy'])
    df['efficiency'] = df['T1'] / df['total_energy']
    return df


def pad_collapse(cycles: np.ndarray, alive_counts: np.ndarray,
                 cap: int = MAX_CYCLES_SPECIAL) -> Tuple[np.ndarray, np.ndarray]:
    """
    Close a special-CH series that stopped early with live nodes (all CHs
    depleted) by repeating the last cycle with 0 alive, so plots drop to zero.
    """
    cycles = np.asarray(cycles)
    alive_counts = np.asarray(alive_counts)
    if len(cycles) and alive_counts[-1] > 0 and cycles[-1] < cap:
        cycles = np.append(cycles, cycles[-1])
        alive_counts = np.append(alive_counts, 0)
    return cycles, alive_counts
