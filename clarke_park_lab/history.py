"""
Fixed-capacity rolling histories feeding the waveform traces.
"""

from __future__ import annotations

import enum
from collections import deque
from typing import Sequence, Tuple, Union

import numpy as np

from .config import HISTORY_LENGTH


class Domain(enum.Enum):
    ABC = "abc"
    ALPHABETA = "alphabeta"
    DQ = "dq"

    @property
    def width(self) -> int:
        return 3 if self is Domain.ABC else 2

    @property
    def labels(self) -> Tuple[str, ...]:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, "Domain"]) -> "Domain":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"unknown domain {value!r} (expected one of: {names})") from None


_LABELS = {
    Domain.ABC: ("Ia (A)", "Ib (B)", "Ic (C)"),
    Domain.ALPHABETA: ("Iα (Alpha)", "Iβ (Beta)"),
    Domain.DQ: ("Id (Direct)", "Iq (Quadrature)"),
}


class HistoryBuffer:
    """
    Newest-first sequence of exactly ``capacity`` samples.

    Samples are stored as tuples and never modified; ``push`` adds at the front and the
    bounded deque drops the oldest in the same operation.
    """

    def __init__(self, width: int, capacity: int = HISTORY_LENGTH) -> None:
        if width <= 0 or capacity <= 0:
            raise ValueError("width and capacity must be positive")
        self.width = width
        self.capacity = capacity
        self._zero = (0.0,) * width
        self._samples: deque = deque((self._zero for _ in range(capacity)), maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    def __getitem__(self, index: int) -> Tuple[float, ...]:
        return self._samples[index]

    def __iter__(self):
        return iter(self.snapshot())

    def push(self, sample: Sequence[float]) -> None:
        values = tuple(float(v) for v in sample)
        if len(values) != self.width:
            raise ValueError(f"expected {self.width} values per sample, got {len(values)}")
        self._samples.appendleft(values)

    def clear(self) -> None:
        self._samples = deque((self._zero for _ in range(self.capacity)), maxlen=self.capacity)

    def snapshot(self) -> Tuple[Tuple[float, ...], ...]:
        return tuple(self._samples)

    def as_array(self) -> np.ndarray:
        return np.array(self._samples, dtype=float).reshape(self.capacity, self.width)
