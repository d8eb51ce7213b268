"""
Tunable parameters for the Clarke & Park lab.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# --- Simulation Parameters ---
HISTORY_LENGTH = 300         # samples kept per waveform trace
DEFAULT_SPEED = 1.0          # revolutions per second
DEFAULT_AMPLITUDE = 1.0      # peak value of each phase
SPEED_RANGE = (0.1, 3.0)     # enforced by the controls, not by the core
AMPLITUDE_RANGE = (0.2, 1.5)
FRAME_INTERVAL_MS = 16       # ~60 fps

# --- Styling ---

# Modern Dark Theme Colors
COLOR_BG = "#1e1e1e"
COLOR_PANEL = "#252526"
COLOR_TEXT = "#d4d4d4"
COLOR_ACCENT = "#007acc"
COLOR_ACCENT_HOVER = "#0098ff"
COLOR_BORDER = "#3e3e42"

# Plot Colors (Neon/Bright for dark background)
COLOR_PHASES = ['#FF5555', '#55FF55', '#5555FF']  # a, b, c
COLOR_ALPHA = '#FFA500'
COLOR_BETA = '#FF55FF'
COLOR_D = '#00FFFF'
COLOR_Q = '#FFFF55'
COLOR_RESULTANT = '#FFFFFF'
COLOR_PROJECTION = '#888888'


@dataclass(frozen=True)
class LabConfig:
    history_length: int = HISTORY_LENGTH
    speed: float = DEFAULT_SPEED
    amplitude: float = DEFAULT_AMPLITUDE
    playing: bool = True
    show_projections: bool = True
    frame_interval_ms: int = FRAME_INTERVAL_MS

    def validate(self) -> "LabConfig":
        if self.history_length <= 0:
            raise ValueError(f"history_length must be positive, got {self.history_length}")
        if self.frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be positive, got {self.frame_interval_ms}")
        for name in ("speed", "amplitude"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        return self


def create_default_config() -> LabConfig:
    return LabConfig()


__all__ = [
    "HISTORY_LENGTH",
    "DEFAULT_SPEED",
    "DEFAULT_AMPLITUDE",
    "SPEED_RANGE",
    "AMPLITUDE_RANGE",
    "FRAME_INTERVAL_MS",
    "LabConfig",
    "create_default_config",
]
