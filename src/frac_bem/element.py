"""Module defining the Element class, a cached view of one boundary element.

Each Element computes its local frame, tau coordinates, conformal map and
shape-function matrices on first use and keeps them, so kernel integration
and matrix assembly can query them repeatedly at no extra cost.
"""
from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Dict, Optional, Sequence, Tuple
from numpy.typing import ArrayLike, NDArray

import numpy as np

from .collocation import collocation_points_nonuniform, collocation_points_uniform
from .geometry import (
    HZ,
    as_vertices,
    conformal_map,
    localize_point,
    rotation_tensor,
    tau_coordinates,
    to_global,
    to_local,
)
from .parameters import VertexWeights
from .shape_functions import evaluate_shape_functions, sfm_nonuniform, sfm_uniform

_LOGGER = logging.getLogger(__name__)


class Element:
    """Flat triangular boundary element with quadratic shape functions.

    Args:
        vertices (ArrayLike): (3, 3) array, row k is the position of vertex k.
        index (Optional[int]): Element number in its mesh, if any.

    Attributes:
        vertices (NDArray[Any]): Read-only (3, 3) vertex array.
        index (Optional[int]): Element number in its mesh.
    """

    vertices: NDArray[Any]
    index: Optional[int]

    def __init__(self, vertices: ArrayLike, index: Optional[int] = None) -> None:
        ev = as_vertices(vertices).copy()
        ev.setflags(write=False)
        self.vertices = ev
        self.index = index
        self._sfm_cache: Dict[Tuple[float, float, float], NDArray[Any]] = {}

    def __repr__(self) -> str:
        return f"Element(index={self.index}, vertices={self.vertices.tolist()})"

    # ---- Geometry ---------------------------------------------------------
    @cached_property
    def rotation(self) -> NDArray[Any]:
        """Global-to-local rotation tensor (rows e1, e2, e3)."""
        r_tensor = rotation_tensor(self.vertices)
        r_tensor.setflags(write=False)
        return r_tensor

    @property
    def rotation_to_global(self) -> NDArray[Any]:
        """Local-to-global rotation tensor (transpose of `rotation`)."""
        return self.rotation.T

    @property
    def normal(self) -> NDArray[Any]:
        """Unit normal e3 (orientation set by the vertex order)."""
        return self.rotation[2]

    @cached_property
    def centroid(self) -> NDArray[Any]:
        return self.vertices.mean(axis=0)

    @cached_property
    def area(self) -> float:
        a = self.vertices[1] - self.vertices[0]
        b = self.vertices[2] - self.vertices[0]
        return 0.5 * float(np.linalg.norm(np.cross(a, b)))

    @cached_property
    def tau(self) -> NDArray[Any]:
        """Complex local coordinates of the three vertices."""
        return tau_coordinates(self.vertices, self.rotation)

    @cached_property
    def conformal_map(self) -> NDArray[Any]:
        """(2, 2) map from (tau, conj(tau)) to master (x, y)."""
        return conformal_map(self.vertices, self.rotation)

    def localize(self, point: ArrayLike) -> HZ:
        """Height and complex in-plane coordinate of `point`."""
        return localize_point(self.vertices, point, self.rotation)

    def to_local(self, vec: ArrayLike) -> NDArray[Any]:
        return to_local(self.rotation, vec)

    def to_global(self, vec: ArrayLike) -> NDArray[Any]:
        return to_global(self.rotation, vec)

    def master_to_tau(self, xy: ArrayLike) -> NDArray[Any]:
        """Map master-triangle (x, y) point(s) to complex local coordinates."""
        pts = np.asarray(xy, dtype=float)
        return pts[..., 0] * self.tau[1] + pts[..., 1] * self.tau[2]

    # ---- Basis ------------------------------------------------------------
    @cached_property
    def sfm(self) -> NDArray[Any]:
        """Shape-function matrix with midpoint edge nodes."""
        sfm = sfm_uniform(self.vertices, self.rotation)
        sfm.setflags(write=False)
        return sfm

    def sfm_for(
        self, weights: Optional[VertexWeights | Sequence[float]] = None
    ) -> NDArray[Any]:
        """Shape-function matrix for the given vertex weights (cached)."""
        vw = VertexWeights.coerce(weights)
        if vw.is_uniform:
            return self.sfm
        key = tuple(vw)
        sfm = self._sfm_cache.get(key)
        if sfm is None:
            sfm = sfm_nonuniform(self.vertices, vw, self.rotation)
            sfm.setflags(write=False)
            self._sfm_cache[key] = sfm
            _LOGGER.debug("Element %s: cached non-uniform sfm for weights %s", self.index, key)
        return sfm

    def shape_values(
        self,
        point: ArrayLike,
        weights: Optional[VertexWeights | Sequence[float]] = None,
    ) -> NDArray[Any]:
        """Shape functions evaluated at the projection of a 3-D point."""
        hz = self.localize(point)
        return evaluate_shape_functions(self.sfm_for(weights), hz.z)

    def collocation_points(
        self,
        beta: float = 0.0,
        weights: Optional[VertexWeights | Sequence[float]] = None,
    ) -> NDArray[Any]:
        """(6, 3) collocation points of this element."""
        if weights is None:
            return collocation_points_uniform(self.vertices, beta)
        return collocation_points_nonuniform(self.vertices, weights, beta)
