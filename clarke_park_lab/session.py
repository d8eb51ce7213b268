"""
Simulation session: owns the state, the clock and the three histories, and applies
commands and ticks to them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from .clock import SimulationClock
from .config import LabConfig, create_default_config
from .history import Domain, HistoryBuffer
from .scheduler import Scheduler
from .transforms import ClarkePair, ParkPair, PhaseTriple, clarke, park, three_phase

logger = logging.getLogger(__name__)

Listener = Callable[["Session"], None]


@dataclass(frozen=True)
class SimulationState:
    angle: float = 0.0           # radians, always in [0, 2π)
    speed: float = 1.0           # revolutions per second
    amplitude: float = 1.0
    is_playing: bool = True
    show_projections: bool = True


def _finite(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


class Session:
    def __init__(self, config: Optional[LabConfig] = None) -> None:
        self.config = (config or create_default_config()).validate()
        self._state = SimulationState(
            angle=0.0,
            speed=float(self.config.speed),
            amplitude=float(self.config.amplitude),
            is_playing=self.config.playing,
            show_projections=self.config.show_projections,
        )
        self._clock = SimulationClock()
        self._histories: Dict[Domain, HistoryBuffer] = {
            domain: HistoryBuffer(domain.width, self.config.history_length) for domain in Domain
        }
        self._scheduler: Optional[Scheduler] = None
        self._stopped = False
        self._listeners: List[Listener] = []
        self._recompute()

    # --- Lifecycle ---

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self, scheduler: Scheduler) -> None:
        if self._scheduler is not None:
            raise RuntimeError("session is already running")
        self._stopped = False
        self._clock.rebase()
        self._scheduler = scheduler
        scheduler.start(self.tick)
        logger.info("session started")

    def stop(self) -> None:
        self._stopped = True
        if self._scheduler is None:
            return
        scheduler, self._scheduler = self._scheduler, None
        scheduler.stop()
        logger.info("session stopped")

    # --- Tick ---

    def tick(self, timestamp: float) -> None:
        if self._stopped:
            return
        state = self._state
        angle = self._clock.advance(timestamp, state.angle, state.speed, state.is_playing)
        if angle != state.angle:
            self._state = replace(state, angle=angle)
        phase, pair, dq = self._recompute()
        if state.is_playing:
            self._histories[Domain.ABC].push(phase)
            self._histories[Domain.ALPHABETA].push(pair)
            self._histories[Domain.DQ].push(dq)
        logger.debug("tick t=%.4f angle=%.4f", timestamp, angle)
        self._notify()

    def _recompute(self) -> Tuple[PhaseTriple, ClarkePair, ParkPair]:
        # one angle for all three domains
        angle = self._state.angle
        phase = three_phase(angle, self._state.amplitude)
        pair = clarke(phase)
        dq = park(pair, angle)
        self._current = (phase, pair, dq)
        return self._current

    # --- Commands ---

    def set_playing(self, playing: bool) -> None:
        self._state = replace(self._state, is_playing=bool(playing))
        self._notify()

    def toggle_playing(self) -> None:
        self.set_playing(not self._state.is_playing)

    def set_show_projections(self, show: bool) -> None:
        self._state = replace(self._state, show_projections=bool(show))
        self._notify()

    def toggle_projections(self) -> None:
        self.set_show_projections(not self._state.show_projections)

    def set_speed(self, speed: float) -> bool:
        if not _finite(speed):
            logger.warning("ignoring non-finite speed %r", speed)
            return False
        self._state = replace(self._state, speed=float(speed))
        self._notify()
        return True

    def set_amplitude(self, amplitude: float) -> bool:
        if not _finite(amplitude):
            logger.warning("ignoring non-finite amplitude %r", amplitude)
            return False
        self._state = replace(self._state, amplitude=float(amplitude))
        self._recompute()
        self._notify()
        return True

    def reset(self) -> None:
        self._state = replace(self._state, angle=0.0)
        for buffer in self._histories.values():
            buffer.clear()
        self._recompute()
        logger.info("session reset")
        self._notify()

    # --- Queries ---

    def current_state(self) -> SimulationState:
        return self._state

    def current_phase(self) -> PhaseTriple:
        return self._current[0]

    def current_clarke(self) -> ClarkePair:
        return self._current[1]

    def current_park(self) -> ParkPair:
        return self._current[2]

    def history(self, domain: Union[str, Domain]) -> Tuple[Tuple[float, ...], ...]:
        return self._histories[Domain.parse(domain)].snapshot()

    def history_array(self, domain: Union[str, Domain]) -> np.ndarray:
        return self._histories[Domain.parse(domain)].as_array()

    # --- Listeners ---

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
