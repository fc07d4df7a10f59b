"""Dense linear solve of the assembled BEM system and nodal post-processing."""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
from numpy.typing import ArrayLike, NDArray

import numpy as np
import scipy.linalg as sla

from .errors import SingularMatrixError
from .mesh import Mesh
from .parameters import VertexWeights

_LOGGER = logging.getLogger(__name__)


def solve_dense(matrix: ArrayLike, rhs: ArrayLike) -> NDArray[Any]:
    """Solve ``A x = b`` by LU factorization.

    Args:
        matrix: Square (n, n) system matrix.
        rhs: Right-hand side of length n.

    Returns:
        NDArray[Any]: The solution vector.

    Raises:
        ValueError: If shapes do not match or inputs are not finite.
        SingularMatrixError: If the matrix is singular to machine precision.
    """
    a = np.asarray(matrix, dtype=float)
    b = np.asarray(rhs, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"matrix must be square, got shape {a.shape}")
    if a.size == 0:
        raise ValueError("matrix is empty")
    if b.shape[0] != a.shape[0]:
        raise ValueError(f"rhs has {b.shape[0]} rows, matrix has {a.shape[0]}")

    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        _LOGGER.error("solve_dense: matrix or rhs contains NaN or inf.")
        raise ValueError("matrix and rhs must be finite")

    # pivots are judged on the row- and column-equilibrated matrix
    row_max = np.max(np.abs(a), axis=1)
    if np.any(row_max == 0.0):
        _LOGGER.error("solve_dense: %d zero row(s).", int(np.count_nonzero(row_max == 0.0)))
        raise SingularMatrixError("matrix has a zero row")
    r = 1.0 / row_max
    a_r = a * r[:, None]
    col_max = np.max(np.abs(a_r), axis=0)
    if np.any(col_max == 0.0):
        _LOGGER.error("solve_dense: %d zero column(s).", int(np.count_nonzero(col_max == 0.0)))
        raise SingularMatrixError("matrix has a zero column")
    c = 1.0 / col_max
    a_s = a_r * c[None, :]

    try:
        lu, piv = sla.lu_factor(a_s, check_finite=False)
    except sla.LinAlgError as exc:
        _LOGGER.error("solve_dense: LU factorization failed: %s", exc)
        raise SingularMatrixError(f"LU factorization failed: {exc}") from exc

    pivots = np.abs(np.diag(lu))
    tiny = np.finfo(float).eps * a.shape[0]
    if np.min(pivots) <= tiny:
        _LOGGER.error(
            "solve_dense: singular matrix (min |pivot| of equilibrated matrix=%.3e <= %.3e)",
            float(np.min(pivots)),
            tiny,
        )
        raise SingularMatrixError("matrix is singular to machine precision")

    rhs_s = b * (r[:, None] if b.ndim > 1 else r)
    y = sla.lu_solve((lu, piv), rhs_s, check_finite=False)
    x = y * (c[:, None] if y.ndim > 1 else c)
    if not np.all(np.isfinite(x)):
        raise SingularMatrixError("solution is not finite")
    _LOGGER.info("solve_dense: solved system of size %d", a.shape[0])
    return x


def nodal_solution_table(
    mesh: Mesh,
    values: ArrayLike,
    beta: float = 0.0,
    weights: Optional[Sequence[VertexWeights | Sequence[float]]] = None,
) -> NDArray[Any]:
    """Pair every element node's position with its nodal values.

    Args:
        mesh: The mesh.
        values: (6 * n_elems, k) nodal values (or a flat array that reshapes
            to it, e.g. the raw DD solution with k = 3).
        beta: Offset of the reported points towards the centroids.
        weights: Optional per-element vertex weights.

    Returns:
        NDArray[Any]: (6 * n_elems, 3 + k) rows ``[x, y, z, v_0 .. v_{k-1}]``.
    """
    pts = mesh.collocation_points(beta, weights)
    vals = np.asarray(values, dtype=float).reshape(pts.shape[0], -1)
    return np.hstack((pts, vals))
