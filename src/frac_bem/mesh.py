"""Module defining the Mesh class for triangulated crack/fault surfaces.

This module provides:
  - Construction from node and connectivity arrays (index validation).
  - Computation of normals, centroids, areas and node-to-element maps.
  - Boundary (crack-tip) edge detection.
  - KD-tree nearest-node queries.
  - Cached per-element geometry and basis (see `Element`).

Mesh files are read elsewhere; any (n, 3) array of node positions and any
(m, 3) array of node indices will do.
"""
from __future__ import annotations

import collections
import logging
from typing import Any, DefaultDict, Dict, Iterator, List, Optional, Sequence, Tuple
from numpy.typing import ArrayLike, NDArray

import numpy as np
from scipy.spatial import cKDTree

from .config import degeneracy_tol
from .element import Element
from .parameters import VertexWeights

_LOGGER = logging.getLogger(__name__)


class Mesh:
    """Handle 3D triangular boundary-element meshes.

    Args:
        verts (ArrayLike): Node coordinates (n_nodes×3).
        connectivity (ArrayLike): Element node indices (n_elems×3).

    Attributes:
        verts (NDArray[Any]): Node array, shape (n_nodes, 3).
        connectivity (NDArray[Any]): Element indices, shape (n_elems, 3).
        normals (NDArray[Any]): Unit element normals, shape (n_elems, 3).
        centroids (NDArray[Any]): Element centroids, shape (n_elems, 3).
        node_to_tri (DefaultDict[int, List[int]]): Node→[element indices].
        tree (cKDTree): KD-tree over `verts` for nearest-node queries.
        boundary_edges (Optional[List[Tuple[int,int]]]): Edges on the mesh boundary.
        triareas (Optional[NDArray[Any]]): Element areas, shape (n_elems,).

    Raises:
        ValueError: If array shapes are wrong or connectivity refers to
            missing nodes.
    """

    verts: NDArray[Any]
    connectivity: NDArray[Any]
    normals: NDArray[Any]
    centroids: NDArray[Any]
    node_to_tri: DefaultDict[int, List[int]]
    tree: cKDTree
    boundary_edges: Optional[List[Tuple[int, int]]]
    triareas: Optional[NDArray[Any]]

    def __init__(self, verts: ArrayLike, connectivity: ArrayLike) -> None:
        self.verts = np.asarray(verts, dtype=float)
        conn = np.asarray(connectivity)
        if conn.size and not np.issubdtype(conn.dtype, np.integer):
            if not np.issubdtype(conn.dtype, np.number) or not np.array_equal(
                conn, np.round(conn)
            ):
                _LOGGER.error("Mesh __init__: non-integral connectivity entries.")
                raise ValueError("Connectivity entries must be integral node indices.")
        self.connectivity = conn.astype(int)

        if self.verts.ndim != 2 or self.verts.shape[1] != 3:
            raise ValueError(f"verts must be (n_nodes, 3); got {self.verts.shape}")
        if self.connectivity.ndim != 2 or self.connectivity.shape[1] != 3:
            raise ValueError(
                f"connectivity must be (n_elems, 3); got {self.connectivity.shape}"
            )
        n_verts = self.verts.shape[0]
        if (self.connectivity < 0).any() or (self.connectivity >= n_verts).any():
            _LOGGER.error("Mesh __init__: connectivity has out-of-range indices.")
            raise ValueError("Connectivity contains out-of-range node indices.")

        # ---- Geometry (vectorized) ---------------------------------------------
        a = self.verts[self.connectivity[:, 0]]
        b = self.verts[self.connectivity[:, 1]]
        c = self.verts[self.connectivity[:, 2]]

        n = np.cross(b - a, c - a)  # raw normals
        nn = np.linalg.norm(n, axis=1)
        # same relative test as rotation_tensor, scaled by the longest edge
        len_ab = np.linalg.norm(b - a, axis=1)
        scale = np.max(
            np.stack((len_ab, np.linalg.norm(c - a, axis=1), np.linalg.norm(c - b, axis=1))),
            axis=0,
        )
        tol = degeneracy_tol()
        deg_mask = (len_ab <= tol * scale) | (nn <= tol * scale * len_ab)
        safe = np.where(deg_mask, 1.0, nn)
        self.normals = n / safe[:, None]
        if np.any(deg_mask):
            # Zero-out degenerate element normals to avoid NaNs
            self.normals[deg_mask] = 0.0
            _LOGGER.warning(
                "Mesh __init__: %d degenerate element(s) with ~zero area; normals set to 0.",
                int(np.count_nonzero(deg_mask)),
            )
        self.centroids = (a + b + c) / 3.0

        # ---- Topology / search structures --------------------------------------
        self.node_to_tri = collections.defaultdict(list)
        for tri_idx, tri in enumerate(self.connectivity):
            for node in tri:
                self.node_to_tri[int(node)].append(tri_idx)

        self.tree = cKDTree(self.verts)

        self.boundary_edges = None
        self.triareas = None
        self._elements: Dict[int, Element] = {}

        _LOGGER.info(
            "Mesh initialized with %d nodes and %d elements",
            self.verts.shape[0],
            self.connectivity.shape[0],
        )

    @property
    def n_nodes(self) -> int:
        return int(self.verts.shape[0])

    @property
    def n_elems(self) -> int:
        return int(self.connectivity.shape[0])

    def __len__(self) -> int:
        return self.n_elems

    def element_vertices(self, element: int) -> NDArray[Any]:
        """Vertex coordinates of one element, shape (3, 3), rows are vertices."""
        if not 0 <= element < self.n_elems:
            raise IndexError(f"element index {element} out of range [0, {self.n_elems})")
        return self.verts[self.connectivity[element]]

    def element(self, element: int) -> Element:
        """Cached `Element` view of one mesh element."""
        elem = self._elements.get(element)
        if elem is None:
            elem = Element(self.element_vertices(element), index=element)
            self._elements[element] = elem
        return elem

    def elements(self) -> Iterator[Element]:
        """Iterate over all elements in index order."""
        for k in range(self.n_elems):
            yield self.element(k)

    def nearest_node(self, point: ArrayLike) -> Tuple[int, float]:
        """Closest mesh node to `point`.

        Returns:
            Tuple[int, float]: Node index and distance.
        """
        p = np.asarray(point, dtype=float)
        d, idx = self.tree.query(p)
        _LOGGER.debug("nearest_node: %s -> node=%d (dist=%.6g)", p.tolist(), int(idx), float(d))
        return int(idx), float(d)

    def detect_boundary(self) -> None:
        """Identify boundary edges (edges in exactly one element)."""
        edge_count: dict[tuple[int, int], int] = {}
        for tri in self.connectivity:
            a, b, c = map(int, tri)
            # undirected edges
            for u, v in ((a, b), (b, c), (c, a)):
                key = (u, v) if u < v else (v, u)
                edge_count[key] = edge_count.get(key, 0) + 1

        boundary_edges: list[tuple[int, int]] = [
            e for e, k in edge_count.items() if k == 1
        ]
        nonmanifold_edges: list[tuple[int, int]] = [
            e for e, k in edge_count.items() if k > 2
        ]

        self.boundary_edges = boundary_edges

        if nonmanifold_edges:
            _LOGGER.warning(
                "detect_boundary: %d non-manifold edge(s) detected (used by >2 elements).",
                len(nonmanifold_edges),
            )

        _LOGGER.debug(
            "detect_boundary: elems=%d -> boundary_edges=%d (unique undirected edges=%d).",
            self.n_elems,
            len(boundary_edges),
            len(edge_count),
        )

    def boundary_nodes(self) -> set[int]:
        """Nodes lying on at least one boundary edge."""
        if self.boundary_edges is None:
            self.detect_boundary()
        return {n for edge in self.boundary_edges or [] for n in edge}

    def tip_edges(self) -> NDArray[Any]:
        """Boundary edges expressed element-wise.

        Returns:
            NDArray[Any]: (n_tip, 3) int array of rows
            ``(element, local vertex a, local vertex b)``.
        """
        if self.boundary_edges is None:
            self.detect_boundary()
        boundary = set(self.boundary_edges or [])
        rows: list[tuple[int, int, int]] = []
        for tri_idx, tri in enumerate(self.connectivity):
            for la in range(3):
                lb = (la + 1) % 3
                u, v = int(tri[la]), int(tri[lb])
                if ((u, v) if u < v else (v, u)) in boundary:
                    rows.append((tri_idx, la, lb))
        return np.asarray(rows, dtype=int).reshape(-1, 3)

    def compute_triareas(self) -> None:
        """Compute and store per-element areas in `triareas`."""
        a = self.verts[self.connectivity[:, 0]]
        b = self.verts[self.connectivity[:, 1]]
        c = self.verts[self.connectivity[:, 2]]
        self.triareas = 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)
        _LOGGER.debug(
            "compute_triareas: total area=%.6e over %d elements",
            float(self.triareas.sum()),
            self.n_elems,
        )

    def collocation_points(
        self,
        beta: float = 0.0,
        weights: Optional[Sequence[VertexWeights | Sequence[float]]] = None,
    ) -> NDArray[Any]:
        """Collocation points of all elements.

        Args:
            beta: Relative offset towards the element centroids.
            weights: Optional per-element vertex weights (one entry per element).

        Returns:
            NDArray[Any]: (6 * n_elems, 3) array, element-major.
        """
        if weights is not None and len(weights) != self.n_elems:
            raise ValueError(
                f"expected {self.n_elems} weight triples, got {len(weights)}"
            )
        blocks = [
            self.element(k).collocation_points(
                beta, None if weights is None else weights[k]
            )
            for k in range(self.n_elems)
        ]
        return np.vstack(blocks) if blocks else np.empty((0, 3), dtype=float)
