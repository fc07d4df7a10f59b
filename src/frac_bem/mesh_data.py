"""Solution state attached to a mesh.

This module provides the MeshData container (time, active and fluid-filled
element sets, crack-tip edges, DOF handles and nodal unknowns) and the
conversions between nodal arrays and the flat unknown vector of the linear
system.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from numpy.typing import ArrayLike, NDArray

import numpy as np

from .dof import DofHandle, make_dof_h_crack, make_dof_handle, nodes_per_element
from .mesh import Mesh
from .parameters import NumericalParameters

_LOGGER = logging.getLogger(__name__)


@dataclass
class MeshData:
    """Solution state of a simulation on one mesh.

    The mesh is referenced, not owned.

    Attributes:
        mesh (Mesh): The underlying mesh.
        dof_h_dd (DofHandle): DOF handle of displacement discontinuities.
        dof_h_pp (DofHandle): DOF handle of fluid pressure.
        time (float): Current time.
        ae_set (NDArray[Any]): "Active" (slid or opened) element indices.
        fe_set (NDArray[Any]): Fluid-filled element indices.
        tip_set (NDArray[Any]): (n_tip, 3) rows (element, local vertex a,
            local vertex b) of the edges to propagate from.
        dd (NDArray[Any]): Nodal DD, shape (n_elems * nodes_per_element, 3).
        pp (NDArray[Any]): Nodal pressure, shape (n_elems * nodes_per_element,).
        is_dd_local (bool): True if `dd` holds components in each element's
            local frame, False if in the global frame.
    """

    mesh: Mesh
    dof_h_dd: DofHandle
    dof_h_pp: DofHandle
    time: float = 0.0
    ae_set: NDArray[Any] = field(default_factory=lambda: np.empty(0, dtype=int))
    fe_set: NDArray[Any] = field(default_factory=lambda: np.empty(0, dtype=int))
    tip_set: NDArray[Any] = field(default_factory=lambda: np.empty((0, 3), dtype=int))
    dd: Optional[NDArray[Any]] = None
    pp: Optional[NDArray[Any]] = None
    is_dd_local: bool = True

    def __post_init__(self) -> None:
        n_dd = self.mesh.n_elems * self.dof_h_dd.nodes_per_element
        n_pp = self.mesh.n_elems * self.dof_h_pp.nodes_per_element
        if self.dd is None:
            self.dd = np.zeros((n_dd, self.dof_h_dd.n_components), dtype=float)
        if self.pp is None:
            self.pp = np.zeros(n_pp, dtype=float)
        if self.dd.shape != (n_dd, self.dof_h_dd.n_components):
            raise ValueError(f"dd must have shape {(n_dd, self.dof_h_dd.n_components)}")
        if self.pp.shape != (n_pp,):
            raise ValueError(f"pp must have shape {(n_pp,)}")
        if self.dof_h_dd.n_components != 3:
            raise ValueError("DD handle must carry 3 components per node")

    def activate(self, elements: ArrayLike) -> None:
        """Add elements to the active set."""
        self.ae_set = np.union1d(self.ae_set, np.asarray(elements, dtype=int))

    def fill(self, elements: ArrayLike) -> None:
        """Add elements to the fluid-filled set."""
        self.fe_set = np.union1d(self.fe_set, np.asarray(elements, dtype=int))

    def _rotate_dd(self, to_global: bool) -> NDArray[Any]:
        npe = self.dof_h_dd.nodes_per_element
        dd = self.dd.reshape(self.mesh.n_elems, npe, -1)
        out = np.empty_like(dd)
        for elem in self.mesh.elements():
            block = dd[elem.index]
            out[elem.index] = elem.to_global(block) if to_global else elem.to_local(block)
        return out.reshape(self.dd.shape)

    def dd_global(self) -> NDArray[Any]:
        """Nodal DD in the global frame, shape like `dd`.

        Raises:
            DegenerateElementError: If local DD must be rotated on a
                degenerate element.
        """
        if not self.is_dd_local:
            return self.dd.copy()
        return self._rotate_dd(to_global=True)

    def dd_local(self) -> NDArray[Any]:
        """Nodal DD in each element's local frame, shape like `dd`."""
        if self.is_dd_local:
            return self.dd.copy()
        return self._rotate_dd(to_global=False)


def init_mesh_data_p_fault(
    mesh: Mesh,
    ap_order: int,
    inj_loc: ArrayLike,
    params: Optional[NumericalParameters] = None,
) -> MeshData:
    """Initialize the solution state of an undisturbed, pressurized fault.

    Args:
        mesh: The fault mesh.
        ap_order: Approximation order of the unknowns (0, 1 or 2).
        inj_loc: (n_inj, 2) rows (element, local node) of injection points.
        params: Numerical parameters (tip treatment); defaults from config.

    Returns:
        MeshData: Zero DD and pressure, injection elements active and filled.
    """
    params = params or NumericalParameters()
    n_nodes = nodes_per_element(ap_order)
    loc = np.asarray(inj_loc, dtype=int).reshape(-1, 2)
    if loc.size and (
        (loc[:, 0] < 0).any()
        or (loc[:, 0] >= mesh.n_elems).any()
        or (loc[:, 1] < 0).any()
        or (loc[:, 1] >= n_nodes).any()
    ):
        _LOGGER.error("init_mesh_data_p_fault: injection location out of range: %s", loc)
        raise ValueError("injection location refers to a missing element or node")

    inj_elems = np.unique(loc[:, 0])
    m_data = MeshData(
        mesh=mesh,
        dof_h_dd=make_dof_h_crack(mesh, ap_order, params.tip_type, n_components=3),
        dof_h_pp=make_dof_handle(mesh.n_elems, n_nodes, n_components=1),
        ae_set=inj_elems,
        fe_set=inj_elems.copy(),
        tip_set=mesh.tip_edges(),
        is_dd_local=params.is_dd_local,
    )
    _LOGGER.info(
        "init_mesh_data_p_fault: %d injection element(s), %d tip edge(s), n_dof_dd=%d",
        inj_elems.size,
        m_data.tip_set.shape[0],
        m_data.dof_h_dd.n_dof,
    )
    return m_data


def get_dd_vector(m_data: MeshData, include_p: bool = False) -> NDArray[Any]:
    """Collect the free nodal unknowns into one vector ordered by DOF number.

    Args:
        m_data: The solution state.
        include_p: Append the pressure DOF after the DD block.

    Returns:
        NDArray[Any]: Vector of length ``n_dof_dd (+ n_dof_pp)``.
    """
    dof_h = m_data.dof_h_dd
    n_tot = dof_h.n_dof + (m_data.dof_h_pp.n_dof if include_p else 0)
    dd_v = np.zeros(n_tot, dtype=float)

    # nodal row-major layout matches local DOF numbering node*nc + comp
    dd_flat = m_data.dd.reshape(dof_h.n_elems, dof_h.dofs_per_element)
    free = ~dof_h.fixed_mask
    dd_v[dof_h.dof_h[free]] = dd_flat[free]

    if include_p:
        pp_h = m_data.dof_h_pp
        pp_flat = m_data.pp.reshape(pp_h.n_elems, pp_h.dofs_per_element)
        p_free = ~pp_h.fixed_mask
        dd_v[dof_h.n_dof + pp_h.dof_h[p_free]] = pp_flat[p_free]
    return dd_v


def write_dd_vector(
    dd_v: ArrayLike, m_data: MeshData, include_p: bool = False
) -> None:
    """Scatter a solution vector back into the nodal arrays of `m_data`.

    Fixed DOF are set to zero.

    Raises:
        ValueError: If the vector length does not match the DOF handles.
    """
    vec = np.asarray(dd_v, dtype=float).reshape(-1)
    dof_h = m_data.dof_h_dd
    n_tot = dof_h.n_dof + (m_data.dof_h_pp.n_dof if include_p else 0)
    if vec.size != n_tot:
        _LOGGER.error("write_dd_vector: got %d values, expected %d", vec.size, n_tot)
        raise ValueError(f"solution vector has {vec.size} entries, expected {n_tot}")

    dd_flat = np.zeros((dof_h.n_elems, dof_h.dofs_per_element), dtype=float)
    free = ~dof_h.fixed_mask
    dd_flat[free] = vec[dof_h.dof_h[free]]
    m_data.dd = dd_flat.reshape(m_data.dd.shape)

    if include_p:
        pp_h = m_data.dof_h_pp
        pp_flat = np.zeros((pp_h.n_elems, pp_h.dofs_per_element), dtype=float)
        p_free = ~pp_h.fixed_mask
        pp_flat[p_free] = vec[dof_h.n_dof + pp_h.dof_h[p_free]]
        m_data.pp = pp_flat.reshape(m_data.pp.shape)
