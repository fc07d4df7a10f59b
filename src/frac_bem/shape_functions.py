"""Quadratic (6-node) shape functions of a triangular element.

Shape functions are stored as a 6x6 complex matrix whose row i holds the
coefficients of shape function i over the monomial basis

    [1, tau, conj(tau), tau**2, conj(tau)**2, tau*conj(tau)]

where tau is the complex local in-plane coordinate (origin at vertex 0).

Nodes are ordered as vertices 0, 1, 2 followed by the edge nodes 3, 4, 5;
edge node n + 3 lies on the edge opposite vertex n. Each shape function is 1
at its own node and 0 at the other five.

The master-element matrices are written over [1, x, y, x**2, y**2, x*y] on
the triangle (0, 0), (1, 0), (0, 1) and converted to the tau basis with the
element's conformal map.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .geometry import as_vertices, conformal_map
from .parameters import VertexWeights

_LOGGER = logging.getLogger(__name__)


def master_sfm_uniform() -> NDArray[np.float64]:
    """Shape-function coefficients on the master element, midpoint edge nodes.

    Returns:
        (6, 6) array; rows are shape functions over [1, x, y, x^2, y^2, xy].
    """
    sfm_mc = np.zeros((6, 6), dtype=float)
    sfm_mc[0] = [1.0, -3.0, -3.0, 2.0, 2.0, 4.0]
    sfm_mc[1, [1, 3]] = [-1.0, 2.0]
    sfm_mc[2, [2, 4]] = [-1.0, 2.0]
    sfm_mc[3, 5] = 4.0
    sfm_mc[4, [2, 4, 5]] = [4.0, -4.0, -4.0]
    sfm_mc[5, [1, 3, 5]] = [4.0, -4.0, -4.0]
    return sfm_mc


def master_sfm_nonuniform(
    weights: VertexWeights | Sequence[float],
) -> NDArray[np.float64]:
    """Shape-function coefficients on the master element, weighted edge nodes.

    Edge nodes sit at ``(w_a v_a + w_b v_b) / (w_a + w_b)``. The matrix
    reduces to `master_sfm_uniform` when all weights are equal.

    Args:
        weights: Positive vertex weights (w0, w1, w2).

    Returns:
        (6, 6) array; rows are shape functions over [1, x, y, x^2, y^2, xy].

    Raises:
        InvalidWeightError: If any weight is not strictly positive.
    """
    vw = VertexWeights.coerce(weights)
    p12, p13, p23 = vw.ratios()
    c122 = p12 + 1.0  # (w0 + w1) / w1
    c121 = 1.0 / p12 + 1.0  # (w0 + w1) / w0
    c12q = c121 + c122
    c233 = p23 + 1.0  # (w1 + w2) / w2
    c232 = 1.0 / p23 + 1.0  # (w1 + w2) / w1
    c23q = c232 + c233
    c133 = p13 + 1.0  # (w0 + w2) / w2
    c131 = 1.0 / p13 + 1.0  # (w0 + w2) / w0
    c13q = c131 + c133

    sfm_mc = np.zeros((6, 6), dtype=float)
    sfm_mc[0] = [1.0, -p12 - 2.0, -p13 - 2.0, c122, c133, p13 + p12 + 2.0]
    sfm_mc[1, [1, 3, 5]] = [-1.0 / p12, c121, 1.0 / p12 - p23]
    sfm_mc[2, [2, 4, 5]] = [-1.0 / p13, c131, 1.0 / p13 - 1.0 / p23]
    sfm_mc[3, 5] = c23q
    sfm_mc[4, [2, 4, 5]] = [c13q, -c13q, -c13q]
    sfm_mc[5, [1, 3, 5]] = [c12q, -c12q, -c12q]
    return sfm_mc


def quadratic_extension(transform: ArrayLike) -> NDArray[np.complex128]:
    """Transform of the quadratic monomials induced by a 2x2 linear map.

    If ``[x, y] = M @ [tau, tau_c]``, the returned Q satisfies
    ``[x^2, y^2, xy] = Q @ [tau^2, tau_c^2, tau*tau_c]``.
    """
    m = np.asarray(transform, dtype=complex)
    if m.shape != (2, 2):
        raise ValueError(f"expected a (2, 2) transform, got {m.shape}")
    m00, m01, m10, m11 = m[0, 0], m[0, 1], m[1, 0], m[1, 1]
    return np.array(
        [
            [m00 * m00, m01 * m01, 2.0 * m00 * m01],
            [m10 * m10, m11 * m11, 2.0 * m10 * m11],
            [m00 * m10, m01 * m11, m00 * m11 + m10 * m01],
        ],
        dtype=complex,
    )


def basis_change_matrix(transform: ArrayLike) -> NDArray[np.complex128]:
    """Block-diagonal map from the tau monomials to [1, x, y, x^2, y^2, xy].

    Returns:
        (6, 6) complex array ``diag(1, M, Q)``.
    """
    m = np.asarray(transform, dtype=complex)
    tau_sq_2_mc = np.zeros((6, 6), dtype=complex)
    tau_sq_2_mc[0, 0] = 1.0
    tau_sq_2_mc[1:3, 1:3] = m
    tau_sq_2_mc[3:6, 3:6] = quadratic_extension(m)
    return tau_sq_2_mc


def sfm_uniform(
    vertices: ArrayLike, rotation: Optional[ArrayLike] = None
) -> NDArray[np.complex128]:
    """Shape-function matrix of an element with midpoint edge nodes.

    Same result as ``sfm_nonuniform(vertices, (1, 1, 1))``.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        rotation: Global-to-local rotation tensor; built if omitted.

    Returns:
        (6, 6) complex array, rows over the tau monomial basis.

    Raises:
        DegenerateElementError: If the element has zero area.
    """
    ev = as_vertices(vertices)
    tau_2_mc = conformal_map(ev, rotation)
    sfm = master_sfm_uniform() @ basis_change_matrix(tau_2_mc)
    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(
            "sfm_uniform: %s",
            np.array2string(sfm, precision=4, suppress_small=True),
        )
    return sfm


def sfm_nonuniform(
    vertices: ArrayLike,
    weights: VertexWeights | Sequence[float],
    rotation: Optional[ArrayLike] = None,
) -> NDArray[np.complex128]:
    """Shape-function matrix of an element with weighted edge partitioning.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        weights: Positive vertex weights (w0, w1, w2).
        rotation: Global-to-local rotation tensor; built if omitted.

    Returns:
        (6, 6) complex array, rows over the tau monomial basis.

    Raises:
        InvalidWeightError: If any weight is not strictly positive.
        DegenerateElementError: If the element has zero area.
    """
    master = master_sfm_nonuniform(weights)
    ev = as_vertices(vertices)
    tau_2_mc = conformal_map(ev, rotation)
    sfm = master @ basis_change_matrix(tau_2_mc)
    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(
            "sfm_nonuniform(weights=%s): %s",
            tuple(VertexWeights.coerce(weights)),
            np.array2string(sfm, precision=4, suppress_small=True),
        )
    return sfm


def shift_matrix(z: complex) -> NDArray[np.complex128]:
    """Re-center the tau monomial basis at the complex point `z`.

    Row i expresses the un-shifted monomial i in terms of
    [1, (tau-z), conj(tau-z), (tau-z)^2, conj(tau-z)^2, |tau-z|^2],
    so ``sfm @ shift_matrix(z)`` gives the shape-function coefficients
    relative to `z`.

    Raises:
        ValueError: If `z` is not finite.
    """
    z = complex(z)
    if not np.isfinite(z):
        raise ValueError(f"shift origin must be finite, got {z!r}")
    zc = z.conjugate()
    shift_2_z = np.eye(6, dtype=complex)
    shift_2_z[1, 0] = z
    shift_2_z[2, 0] = zc
    shift_2_z[3, [0, 1]] = [z * z, 2.0 * z]
    shift_2_z[4, [0, 2]] = [zc * zc, 2.0 * zc]
    shift_2_z[5, [0, 1, 2]] = [z * zc, zc, z]
    return shift_2_z


def monomials(tau: complex | ArrayLike) -> NDArray[np.complex128]:
    """Evaluate [1, tau, tau_c, tau^2, tau_c^2, tau*tau_c].

    Args:
        tau: A complex scalar or an array of complex points.

    Returns:
        Array of shape ``(6,)`` for a scalar, ``(n, 6)`` for n points.
    """
    t = np.asarray(tau, dtype=complex)
    tc = np.conj(t)
    basis = np.stack([np.ones_like(t), t, tc, t * t, tc * tc, t * tc], axis=-1)
    return basis


def evaluate_shape_functions(
    sfm: ArrayLike, tau: complex | ArrayLike
) -> NDArray[np.complex128]:
    """Evaluate all six shape functions at tau.

    Returns:
        Shape ``(6,)`` for a scalar tau; ``(n, 6)`` for n points, where
        column i holds shape function i.
    """
    return monomials(tau) @ np.asarray(sfm, dtype=complex).T
