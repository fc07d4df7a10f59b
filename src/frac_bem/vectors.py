"""Small 3-D vector primitives used by the element geometry builders."""
from __future__ import annotations

import logging
from typing import Any
from numpy.typing import ArrayLike, NDArray

import numpy as np

from .errors import DegenerateElementError

_LOGGER = logging.getLogger(__name__)


def as_vector(a: ArrayLike) -> NDArray[np.float64]:
    """Return `a` as a float 3-vector.

    Raises:
        ValueError: If `a` does not hold exactly three values.
    """
    v = np.asarray(a, dtype=float).reshape(-1)
    if v.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {np.shape(a)}")
    return v


def l2norm(a: ArrayLike) -> float:
    """L2 norm of a vector."""
    return float(np.linalg.norm(np.asarray(a, dtype=float)))


def normalize(a: ArrayLike, tol: float = 0.0) -> NDArray[np.float64]:
    """Return the unit vector along `a`.

    Args:
        a: Input 3-vector.
        tol: Lengths at or below this value are rejected.

    Returns:
        `a / |a|`.

    Raises:
        DegenerateElementError: If `|a|` is not finite or not above `tol`.
    """
    v = as_vector(a)
    n_a = l2norm(v)
    if not np.isfinite(n_a) or n_a <= tol:
        _LOGGER.error("normalize: vector %s has length %g <= %g", v.tolist(), n_a, tol)
        raise DegenerateElementError(
            f"cannot normalize vector of length {n_a:g} (tolerance {tol:g})"
        )
    return v / n_a


def cross(a: Any, b: Any) -> NDArray[np.float64]:
    """Cross product of two 3-D vectors."""
    u = as_vector(a)
    v = as_vector(b)
    return np.array(
        [
            u[1] * v[2] - u[2] * v[1],
            u[2] * v[0] - u[0] * v[2],
            u[0] * v[1] - u[1] * v[0],
        ],
        dtype=float,
    )
