"""Local geometry of a flat triangular boundary element.

This module provides:
  - The element rotation tensor (local orthonormal frame).
  - Complex (tau) coordinates of the element vertices.
  - The conformal map between (tau, conj(tau)) and the master triangle.
  - Localization of an arbitrary 3-D point in the element frame.

Conventions:
  - ``vertices`` is a (3, 3) array, row k holding the position of vertex k.
    Vertex 0 is the origin of the local frame.
  - The rotation tensor ``R`` stores e1, e2, e3 as ROWS, so it maps global
    coordinates to local ones: ``v_local = R @ v_global``. Its transpose maps
    local coordinates back to global ones.
"""
from __future__ import annotations

import logging
import warnings
from typing import NamedTuple, Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import config, degeneracy_tol
from .errors import DegenerateElementError, NumericToleranceWarning
from .vectors import as_vector, cross, l2norm, normalize

_LOGGER = logging.getLogger(__name__)


class HZ(NamedTuple):
    """Position of a point relative to an element.

    Attributes:
        h: Height above the element plane (minus the local z-coordinate).
        z: Local in-plane coordinate as a complex number x + i*y.
    """

    h: float
    z: complex


def as_vertices(vertices: ArrayLike) -> NDArray[np.float64]:
    """Return element vertices as a float (3, 3) array (rows are vertices).

    Raises:
        ValueError: If the shape is not (3, 3) or values are not finite.
    """
    ev = np.asarray(vertices, dtype=float)
    if ev.shape != (3, 3):
        raise ValueError(f"element vertices must have shape (3, 3), got {ev.shape}")
    if not np.all(np.isfinite(ev)):
        raise ValueError("element vertices must be finite")
    return ev


def rotation_tensor(
    vertices: ArrayLike, tol: Optional[float] = None
) -> NDArray[np.float64]:
    """Compute the rotation tensor from global to element-local coordinates.

    e1 points along the edge from vertex 0 to vertex 1, e3 is the unit
    normal ``e1 x (v2 - v0)`` normalized, and e2 = e3 x e1 completes the
    right-handed set.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        tol: Relative degeneracy tolerance; defaults to the configured one.

    Returns:
        (3, 3) array with rows e1, e2, e3.

    Raises:
        DegenerateElementError: If vertex 1 coincides with vertex 0 or the
            three vertices are colinear.
    """
    ev = as_vertices(vertices)
    rel_tol = degeneracy_tol(tol)

    a1 = ev[1] - ev[0]
    a2 = ev[2] - ev[0]
    scale = max(l2norm(a1), l2norm(a2), l2norm(ev[2] - ev[1]))

    try:
        e1 = normalize(a1, rel_tol * scale)
    except DegenerateElementError:
        _LOGGER.error("rotation_tensor: zero-length edge v0->v1 in %s", ev.tolist())
        raise DegenerateElementError(
            "Degenerate element: vertices 0 and 1 coincide."
        ) from None

    a3 = cross(e1, a2)
    try:
        e3 = normalize(a3, rel_tol * scale)
    except DegenerateElementError:
        _LOGGER.error("rotation_tensor: colinear vertices %s", ev.tolist())
        raise DegenerateElementError(
            "Degenerate element: vertices are colinear (zero area)."
        ) from None
    e2 = normalize(cross(e3, e1))

    r_tensor = np.vstack((e1, e2, e3))
    check_orthonormal(r_tensor)

    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(
            "rotation_tensor: R=%s",
            np.array2string(r_tensor, precision=6, suppress_small=True),
        )
    return r_tensor


def check_orthonormal(
    r_tensor: NDArray[np.float64], tol: Optional[float] = None
) -> bool:
    """Check that `r_tensor` is a proper rotation within tolerance.

    Issues a NumericToleranceWarning (and logs it) instead of failing.

    Returns:
        True if ``R @ R.T`` is the identity within `tol` and det(R) > 0.
    """
    eps = config.orthonormality_tol if tol is None else float(tol)
    dev = float(np.max(np.abs(r_tensor @ r_tensor.T - np.eye(3))))
    det = float(np.linalg.det(r_tensor))
    if dev > eps or det <= 0.0:
        _LOGGER.warning(
            "Local frame not orthonormal: max|RR^T - I|=%.3e (tol=%.1e), det=%.6f",
            dev,
            eps,
            det,
        )
        warnings.warn(
            f"local frame deviates from orthonormal by {dev:.3e} (det={det:.6f})",
            NumericToleranceWarning,
            stacklevel=3,
        )
        return False
    return True


def _rotation_or_build(
    vertices: NDArray[np.float64], rotation: Optional[ArrayLike]
) -> NDArray[np.float64]:
    if rotation is None:
        return rotation_tensor(vertices)
    r_tensor = np.asarray(rotation, dtype=float)
    if r_tensor.shape != (3, 3):
        raise ValueError(f"rotation tensor must have shape (3, 3), got {r_tensor.shape}")
    return r_tensor


def tau_coordinates(
    vertices: ArrayLike, rotation: Optional[ArrayLike] = None
) -> NDArray[np.complex128]:
    """Complex local coordinates (tau) of the element's vertices.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        rotation: Global-to-local rotation tensor; built if omitted.

    Returns:
        Array ``[tau0, tau1, tau2]`` with ``tau0 == 0``.
    """
    ev = as_vertices(vertices)
    r_tensor = _rotation_or_build(ev, rotation)
    local = (ev - ev[0]) @ r_tensor.T  # rows are R @ (v_k - v0)
    return local[:, 0] + 1j * local[:, 1]


def conformal_map(
    vertices: ArrayLike,
    rotation: Optional[ArrayLike] = None,
    tol: Optional[float] = None,
) -> NDArray[np.complex128]:
    """Coordinate transform from (tau, conj(tau)) to master-triangle (x, y).

    With z1, z2 the tau-coordinates of vertices 1 and 2, the returned matrix
    ``M`` satisfies ``[x, y] = M @ [tau, conj(tau)]`` and sends z1 to (1, 0)
    and z2 to (0, 1). It is the inverse of ``[[z1, z2], [conj(z1), conj(z2)]]``.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        rotation: Global-to-local rotation tensor; built if omitted.
        tol: Relative degeneracy tolerance; defaults to the configured one.

    Returns:
        (2, 2) complex array.

    Raises:
        DegenerateElementError: If the determinant
            ``z1*conj(z2) - z2*conj(z1)`` is (numerically) zero.
    """
    ev = as_vertices(vertices)
    r_tensor = _rotation_or_build(ev, rotation)
    _, z1, z2 = tau_coordinates(ev, r_tensor)

    # common denominator (determinant)
    m_det = z1 * np.conj(z2) - z2 * np.conj(z1)
    limit = degeneracy_tol(tol) * abs(z1) * abs(z2)
    if not np.isfinite(m_det) or abs(m_det) <= limit:
        _LOGGER.error(
            "conformal_map: near-zero determinant %s (limit %.3e)", m_det, limit
        )
        raise DegenerateElementError(
            "Degenerate element: conformal map determinant is zero."
        )

    transform = np.array(
        [[np.conj(z2), -z2], [-np.conj(z1), z1]], dtype=complex
    ) / m_det

    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(
            "conformal_map: z1=%s z2=%s det=%s M=%s",
            z1,
            z2,
            m_det,
            np.array2string(transform, precision=6, suppress_small=True),
        )
    return transform


def localize_point(
    vertices: ArrayLike,
    point: ArrayLike,
    rotation: Optional[ArrayLike] = None,
) -> HZ:
    """Express a 3-D point in an element's local coordinates.

    Args:
        vertices: (3, 3) array of vertex positions (rows).
        point: Global coordinates of the point.
        rotation: Global-to-local rotation tensor; built if omitted.

    Returns:
        HZ with ``h = -z_local`` and ``z = x_local + i*y_local``.
    """
    ev = as_vertices(vertices)
    r_tensor = _rotation_or_build(ev, rotation)
    local = r_tensor @ (as_vector(point) - ev[0])
    return HZ(h=float(-local[2]), z=complex(local[0], local[1]))


def to_local(rotation: ArrayLike, vec: ArrayLike) -> NDArray[np.float64]:
    """Rotate global vector(s) into the local frame (last axis of size 3)."""
    return np.asarray(vec, dtype=float) @ np.asarray(rotation, dtype=float).T


def to_global(rotation: ArrayLike, vec: ArrayLike) -> NDArray[np.float64]:
    """Rotate local vector(s) back into the global frame (last axis of size 3)."""
    return np.asarray(vec, dtype=float) @ np.asarray(rotation, dtype=float)
