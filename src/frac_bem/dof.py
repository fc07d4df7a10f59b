"""Degree-of-freedom handles for element-wise (discontinuous) unknowns.

Every element carries its own nodes, so a DOF handle is an
(n_elems, dofs_per_element) integer table. Local DOF ``node * n_components +
component`` of element ``e`` maps to global unknown ``dof_h[e, local]`` or to
``FIXED`` (-1) when that unknown is eliminated (e.g. zero DD at a crack tip).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple
from numpy.typing import ArrayLike, NDArray

import numpy as np

from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)

FIXED: int = -1


def nodes_per_element(ap_order: int) -> int:
    """Number of nodes of an element with approximation order 0, 1 or 2."""
    if ap_order not in (0, 1, 2):
        raise ValueError(f"approximation order must be 0, 1 or 2, got {ap_order!r}")
    return (ap_order + 1) * (ap_order + 2) // 2


@dataclass
class DofHandle:
    """Element-wise list of global DOF numbers.

    Attributes:
        n_dof (int): Number of DOF in use.
        dof_h (NDArray[Any]): (n_elems, dofs_per_element) table; FIXED marks
            an eliminated DOF.
        n_components (int): Unknowns per node (3 for DD, 1 for pressure).
    """

    n_dof: int
    dof_h: NDArray[Any]
    n_components: int = 1

    def __post_init__(self) -> None:
        self.dof_h = np.asarray(self.dof_h, dtype=int)
        if self.dof_h.ndim != 2:
            raise ValueError(f"dof_h must be 2-D, got shape {self.dof_h.shape}")
        if self.n_components < 1 or self.dof_h.shape[1] % self.n_components:
            raise ValueError(
                f"{self.dof_h.shape[1]} DOF per element is not a multiple of "
                f"{self.n_components} components"
            )

    @property
    def n_elems(self) -> int:
        return int(self.dof_h.shape[0])

    @property
    def dofs_per_element(self) -> int:
        return int(self.dof_h.shape[1])

    @property
    def nodes_per_element(self) -> int:
        return self.dofs_per_element // self.n_components

    @property
    def fixed_mask(self) -> NDArray[Any]:
        return self.dof_h == FIXED

    def free_dofs(self) -> NDArray[Any]:
        """Global numbers of all free DOF in table order."""
        return self.dof_h[~self.fixed_mask]

    def validate(self) -> None:
        """Check that free DOF numbers are exactly 0..n_dof-1 without repeats.

        Raises:
            ValueError: If the handle is inconsistent.
        """
        free = self.free_dofs()
        if (self.dof_h < FIXED).any():
            raise ValueError("DOF handle contains negative numbers other than FIXED")
        if free.size != self.n_dof or not np.array_equal(
            np.sort(free), np.arange(self.n_dof)
        ):
            _LOGGER.error(
                "DofHandle.validate: %d free entries, n_dof=%d", free.size, self.n_dof
            )
            raise ValueError(
                "DOF handle free entries must be exactly 0..n_dof-1 without repeats"
            )


def make_dof_handle(
    n_elems: int,
    dofs_per_element: int,
    fixed: Optional[Iterable[Tuple[int, int]]] = None,
    n_components: int = 1,
) -> DofHandle:
    """Number DOF sequentially, element-major, skipping `fixed` ones.

    Args:
        n_elems: Number of elements.
        dofs_per_element: DOF per element.
        fixed: (element, local DOF) pairs to eliminate.
        n_components: Unknowns per node.

    Returns:
        DofHandle: A validated handle.
    """
    mask = np.zeros((n_elems, dofs_per_element), dtype=bool)
    for elem, local in fixed or ():
        mask[elem, local] = True
    dof_h = np.full((n_elems, dofs_per_element), FIXED, dtype=int)
    n_dof = int(np.count_nonzero(~mask))
    dof_h[~mask] = np.arange(n_dof)
    handle = DofHandle(n_dof=n_dof, dof_h=dof_h, n_components=n_components)
    handle.validate()
    return handle


def _edge_node_is_tip(
    tri: NDArray[Any], n: int, boundary: set[tuple[int, int]]
) -> bool:
    u, v = int(tri[(n + 1) % 3]), int(tri[(n + 2) % 3])
    return ((u, v) if u < v else (v, u)) in boundary


def make_dof_h_crack(
    mesh: Mesh,
    ap_order: int,
    tip_type: int,
    n_components: int = 3,
) -> DofHandle:
    """DOF handle for an isolated crack with fixed DOF at crack-tip nodes.

    Crack-tip nodes are those on the mesh boundary.

    Args:
        mesh: The crack mesh.
        ap_order: Approximation order (0, 1 or 2).
        tip_type: 0 -> nothing fixed; 1 -> boundary vertex nodes fixed;
            2 -> boundary vertex nodes and boundary edge nodes fixed.
        n_components: Unknowns per node (3 for the DD vector).

    Returns:
        DofHandle: The crack DOF handle.
    """
    n_nodes = nodes_per_element(ap_order)
    if tip_type not in (0, 1, 2):
        raise ValueError(f"tip_type must be 0, 1 or 2, got {tip_type!r}")

    fixed_nodes: list[tuple[int, int]] = []
    if tip_type > 0 and ap_order > 0:
        tip_nodes = mesh.boundary_nodes()
        boundary = set(mesh.boundary_edges or [])
        for elem, tri in enumerate(mesh.connectivity):
            for k in range(3):
                if int(tri[k]) in tip_nodes:
                    fixed_nodes.append((elem, k))
            if tip_type == 2 and ap_order == 2:
                for n in range(3):
                    if _edge_node_is_tip(tri, n, boundary):
                        fixed_nodes.append((elem, n + 3))
    elif tip_type > 0:
        _LOGGER.debug("make_dof_h_crack: order 0 has no tip nodes to fix.")

    fixed = [
        (elem, node * n_components + comp)
        for elem, node in fixed_nodes
        for comp in range(n_components)
    ]
    handle = make_dof_handle(
        mesh.n_elems, n_nodes * n_components, fixed, n_components=n_components
    )
    _LOGGER.info(
        "make_dof_h_crack: order=%d tip_type=%d -> n_dof=%d (%d fixed)",
        ap_order,
        tip_type,
        handle.n_dof,
        len(fixed),
    )
    return handle


def dof_handle_from_array(dof_h: ArrayLike, n_components: int = 1) -> DofHandle:
    """Wrap an existing table, inferring and checking `n_dof`."""
    table = np.asarray(dof_h, dtype=int)
    n_dof = int(np.count_nonzero(table != FIXED))
    handle = DofHandle(n_dof=n_dof, dof_h=table, n_components=n_components)
    handle.validate()
    return handle
