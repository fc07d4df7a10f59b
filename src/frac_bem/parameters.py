"""Validated value types passed to the element builders.

This module provides:
  - VertexWeights: per-vertex weights defining non-uniform edge partitioning.
  - NumericalParameters: collocation offset and crack-tip settings.

Both validate at construction time, so the builders never divide by a zero
weight or place collocation points outside the element.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import config
from .errors import InvalidWeightError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VertexWeights:
    """Three strictly positive partition weights, one per element vertex.

    The mid-edge node between vertices a and b sits at
    ``(w_a * v_a + w_b * v_b) / (w_a + w_b)``; equal weights give midpoints.

    Attributes:
        w0, w1, w2: Weights of vertices 0, 1 and 2.

    Raises:
        InvalidWeightError: If any weight is zero, negative or not finite.
    """

    w0: float = 1.0
    w1: float = 1.0
    w2: float = 1.0

    def __post_init__(self) -> None:
        for name in ("w0", "w1", "w2"):
            val = float(getattr(self, name))
            if not math.isfinite(val) or val <= 0.0:
                _LOGGER.error("VertexWeights: %s=%r is not a positive number", name, val)
                raise InvalidWeightError(
                    f"vertex weight {name} must be positive and finite, got {val!r}"
                )
            object.__setattr__(self, name, val)

    @classmethod
    def from_sequence(cls, weights: Sequence[float] | NDArray[np.float64]) -> VertexWeights:
        """Build from any 3-element sequence.

        Raises:
            InvalidWeightError: If there are not exactly three weights or any is invalid.
        """
        vals = [float(w) for w in np.asarray(weights, dtype=float).reshape(-1)]
        if len(vals) != 3:
            raise InvalidWeightError(f"expected 3 vertex weights, got {len(vals)}")
        return cls(*vals)

    @classmethod
    def coerce(cls, weights: VertexWeights | Sequence[float] | None) -> VertexWeights:
        """Return `weights` as VertexWeights; None means uniform (1, 1, 1)."""
        if weights is None:
            return cls()
        if isinstance(weights, cls):
            return weights
        return cls.from_sequence(weights)

    def __iter__(self) -> Iterator[float]:
        return iter((self.w0, self.w1, self.w2))

    def __getitem__(self, k: int) -> float:
        return (self.w0, self.w1, self.w2)[k]

    def as_array(self) -> NDArray[np.float64]:
        return np.array([self.w0, self.w1, self.w2], dtype=float)

    def ratios(self) -> Tuple[float, float, float]:
        """Return (p12, p13, p23) = (w0/w1, w0/w2, w1/w2)."""
        return self.w0 / self.w1, self.w0 / self.w2, self.w1 / self.w2

    @property
    def is_uniform(self) -> bool:
        return self.w0 == self.w1 == self.w2


def check_beta(beta: float) -> float:
    """Validate a collocation offset and return it as float.

    Raises:
        ValueError: If `beta` is not in [0, 1).
    """
    b = float(beta)
    if not (0.0 <= b < 1.0):
        _LOGGER.error("check_beta: beta=%r outside [0, 1)", beta)
        raise ValueError(f"beta must lie in [0, 1), got {beta!r}")
    return b


@dataclass(frozen=True)
class NumericalParameters:
    """Numerical simulation parameters for the collocation scheme.

    Attributes:
        beta: Relative offset of collocation points towards the element
            centroid, in [0, 1).
        tip_type: How zero DD is enforced at the crack tip:
            0 -> no enforcement; 1 -> only at vertex nodes;
            2 -> at vertex and edge nodes.
        is_dd_local: True if DD are sought in the local element frame,
            False for the global (reference) frame.
    """

    beta: float = field(default_factory=lambda: config.beta)
    tip_type: int = field(default_factory=lambda: config.tip_type)
    is_dd_local: bool = field(default_factory=lambda: config.is_dd_local)

    def __post_init__(self) -> None:
        object.__setattr__(self, "beta", check_beta(self.beta))
        if self.tip_type not in (0, 1, 2):
            raise ValueError(f"tip_type must be 0, 1 or 2, got {self.tip_type!r}")
