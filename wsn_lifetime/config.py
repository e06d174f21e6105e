"""
Configuration and Constants for WSN Lifetime Simulation.
"""

from dataclasses import dataclass, fields
from typing import Optional

from .energy import threshold_distance

# =============================================================================
# RADIO CONSTANTS (first order radio model)
# =============================================================================

E_ELEC = 50e-9  # 50 nJ/bit
EPS_AMP_SHORT = 10e-9  # J/bit/m^2 (free space)
EPS_AMP_LONG = 0.0013e-9  # J/bit/m^4 (multipath)
E_AGG = 50e-9  # J/bit/signal

DATA_PACKET_SIZE = 500 * 8  # bits
OVERHEAD_PACKET_SIZE = 125 * 8  # bits

# =============================================================================
# NODE ENERGY
# =============================================================================

INITIAL_ENERGY = 2.0  # Joules, regular nodes
SPECIAL_CH_ENERGY = 4.0  # Joules, dedicated cluster heads
NUM_SPECIAL_CH = 5

# Topology Constants
N_NODES = 100
AREA_SIZE = 100  # meters, square field
SEED = 42

# =============================================================================
# CLUSTER HEAD MANAGEMENT
# =============================================================================

CH_FRACTION = 0.05  # 5% of nodes become CH at each election
ASSUMED_CLUSTER_SIZE = 20  # Members assumed per CH when estimating CH cost

# Safety caps on the cycle loops
MAX_CYCLES_ROTATION = 5000
MAX_CYCLES_SPECIAL = 10000
PROGRESS_INTERVAL = 100

# Study defaults
DEFAULT_WINDOW = 5
DEFAULT_RADIUS = 25
WINDOW_RANGE = range(1, 21)
RADIUS_RANGE = range(5, 55, 5)


class ConfigurationError(ValueError):
    """Raised when simulation inputs are malformed."""


@dataclass
class RadioParams:
    """Radio and packet parameters shared by both CH strategies."""
    electronics_energy_per_bit: float = E_ELEC
    amp_coeff_short: float = EPS_AMP_SHORT
    amp_coeff_long: float = EPS_AMP_LONG
    aggregation_energy_per_bit: float = E_AGG
    data_packet_bits: int = DATA_PACKET_SIZE
    overhead_packet_bits: int = OVERHEAD_PACKET_SIZE
    distance_threshold: Optional[float] = None

    def __post_init__(self):
        # d0 where the two amplifier terms are equal
        if self.distance_threshold is None:
            self.distance_threshold = threshold_distance(self.amp_coeff_short, self.amp_coeff_long)

    def validate(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not value > 0:
                raise ConfigurationError(f"{f.name} must be positive, got {value!r}")
        return self
