"""
Energy Model - First Order Radio Model.

E_TX = k*E_elec + k*eps_fs*d^2   for d <= d0  (free space)
E_TX = k*E_elec + k*eps_mp*d^4   for d >  d0  (multipath)
E_RX = k*E_elec
E_DA = k*E_agg*n_signals

All functions work element-wise; a scalar argument is handled as a
length-1 array and an array is always returned.
"""

import numpy as np


def transmit_energy(packet_bits, distance, e_elec, eps_short, eps_long, d0) -> np.ndarray:
    """
    Energy to transmit a packet over each distance.

    Parameters:
    -----------
    packet_bits : int
        Packet size k (bits)
    distance : float or array-like
        Transmission distance(s) in meters
    e_elec, eps_short, eps_long : float
        Electronics energy and amplifier coefficients
    d0 : float
        Regime threshold; d == d0 uses the free space term

    Returns:
    --------
    np.ndarray: Joules per distance
    """
    d = np.atleast_1d(np.asarray(distance, dtype=float))
    amp = np.where(d <= d0, eps_short * d**2, eps_long * d**4)
    return packet_bits * e_elec + packet_bits * amp


def receive_energy(packet_bits, e_elec) -> np.ndarray:
    """Energy to receive one packet."""
    return np.atleast_1d(np.asarray(packet_bits, dtype=float)) * e_elec


def aggregation_energy(packet_bits, e_agg, num_signals) -> np.ndarray:
    """Energy to fuse `num_signals` packets into one."""
    n = np.atleast_1d(np.asarray(num_signals, dtype=float))
    return packet_bits * e_agg * n


def threshold_distance(eps_short: float, eps_long: float) -> float:
    """Crossover distance d0 between the two amplifier regimes."""
    return float(np.sqrt(eps_short / eps_long))
