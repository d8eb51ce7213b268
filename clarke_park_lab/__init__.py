"""Real-time Clarke & Park transform lab."""

from .clock import SimulationClock, wrap_angle
from .config import LabConfig, create_default_config
from .history import Domain, HistoryBuffer
from .scheduler import ManualScheduler, Scheduler
from .session import Session, SimulationState
from .transforms import (
    ClarkePair,
    ParkPair,
    PhaseTriple,
    clarke,
    inverse_clarke,
    inverse_park,
    park,
    three_phase,
    three_phase_array,
)

__version__ = "0.1.0"

__all__ = [
    "ClarkePair",
    "Domain",
    "HistoryBuffer",
    "LabConfig",
    "ManualScheduler",
    "ParkPair",
    "PhaseTriple",
    "Scheduler",
    "Session",
    "SimulationClock",
    "SimulationState",
    "clarke",
    "create_default_config",
    "inverse_clarke",
    "inverse_park",
    "park",
    "three_phase",
    "three_phase_array",
    "wrap_angle",
]
