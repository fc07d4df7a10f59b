"""Collocation points of quadratic triangular elements.

Six points per element: three vertex points and three edge points (edge
point n + 3 lies on the edge opposite vertex n), all pulled towards the
centroid by the relative offset ``beta``.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .geometry import as_vertices
from .parameters import VertexWeights, check_beta

_LOGGER = logging.getLogger(__name__)

# master-element vertices (0, 0), (1, 0), (0, 1)
_MASTER_VERTICES = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], dtype=float)


def _edge_points(
    points: NDArray[np.float64], weights: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Weighted edge points; row n lies on the edge opposite vertex n."""
    out = np.empty_like(points)
    for n in range(3):
        m = (n + 1) % 3
        l = (m + 1) % 3  # noqa: E741
        out[n] = (weights[m] * points[m] + weights[l] * points[l]) / (
            weights[m] + weights[l]
        )
    return out


def _collocation_points(
    vertices: ArrayLike, weights: NDArray[np.float64], beta: float
) -> NDArray[np.float64]:
    ev = as_vertices(vertices)
    b = check_beta(beta)
    centroid = ev.mean(axis=0)
    nodes = np.vstack((ev, _edge_points(ev, weights)))
    coll_pt_crd = (1.0 - b) * nodes + b * centroid
    _LOGGER.debug("collocation points (beta=%g, weights=%s): %s", b, weights, coll_pt_crd)
    return coll_pt_crd


def collocation_points_uniform(
    vertices: ArrayLike, beta: float = 0.0
) -> NDArray[np.float64]:
    """Collocation points with midpoint edge partitioning.

    Same result as ``collocation_points_nonuniform(vertices, (1, 1, 1), beta)``.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        beta: Relative offset towards the centroid, in [0, 1).

    Returns:
        (6, 3) array of point coordinates.

    Raises:
        ValueError: If `beta` is outside [0, 1).
    """
    return _collocation_points(vertices, np.ones(3, dtype=float), beta)


def collocation_points_nonuniform(
    vertices: ArrayLike,
    weights: VertexWeights | Sequence[float],
    beta: float = 0.0,
) -> NDArray[np.float64]:
    """Collocation points with edge partitioning defined by vertex weights.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        weights: Positive vertex weights (w0, w1, w2).
        beta: Relative offset towards the centroid, in [0, 1).

    Returns:
        (6, 3) array of point coordinates.

    Raises:
        InvalidWeightError: If any weight is not strictly positive.
        ValueError: If `beta` is outside [0, 1).
    """
    vw = VertexWeights.coerce(weights)
    return _collocation_points(vertices, vw.as_array(), beta)


def master_node_coordinates(
    weights: Optional[VertexWeights | Sequence[float]] = None,
) -> NDArray[np.float64]:
    """Node positions on the master triangle, matching the shape functions.

    Args:
        weights: Vertex weights; None for midpoint partitioning.

    Returns:
        (6, 2) array of master (x, y) coordinates.
    """
    vw = VertexWeights.coerce(weights)
    return np.vstack((_MASTER_VERTICES, _edge_points(_MASTER_VERTICES, vw.as_array())))
