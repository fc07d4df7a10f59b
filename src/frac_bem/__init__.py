"""The frac_bem package provides the element-local machinery of a 3-D BEM solver.

This package offers:
  - Local orthonormal frames and complex (tau) coordinates of flat triangles.
  - The conformal map between an element and the master triangle.
  - Quadratic shape-function matrices (uniform and weighted edge partitioning)
    and their re-centering at a field point.
  - Collocation-point placement and field-point localization.
  - Mesh, DOF handle and solution-state containers for crack/fault problems.

Submodules:
  - collocation: Collocation points and master node coordinates.
  - config: Logging level, tolerances and numerical defaults.
  - dof: Element-wise DOF handles.
  - element: Cached per-element geometry and basis.
  - errors: Exception and warning types.
  - geometry: Rotation tensor, tau coordinates, conformal map, localization.
  - mesh: Mesh class with topology utilities.
  - mesh_data: Solution state and unknown-vector packing.
  - parameters: Validated weights and numerical parameters.
  - shape_functions: Shape-function and shift matrices.
  - solve: Dense solver adapter and nodal tables.
  - vectors: 3-D vector primitives.
"""

from .config import (
    config,
    configure,
    use,
    settings,
    set_log_level,
)

from frac_bem.collocation import (
    collocation_points_nonuniform,
    collocation_points_uniform,
    master_node_coordinates,
)
from frac_bem.dof import (
    FIXED,
    DofHandle,
    make_dof_h_crack,
    make_dof_handle,
    nodes_per_element,
)
from frac_bem.element import Element
from frac_bem.errors import (
    DegenerateElementError,
    InvalidWeightError,
    NumericToleranceWarning,
    SingularMatrixError,
)
from frac_bem.geometry import (
    HZ,
    conformal_map,
    localize_point,
    rotation_tensor,
    tau_coordinates,
)
from frac_bem.mesh import Mesh
from frac_bem.mesh_data import (
    MeshData,
    get_dd_vector,
    init_mesh_data_p_fault,
    write_dd_vector,
)
from frac_bem.parameters import NumericalParameters, VertexWeights
from frac_bem.shape_functions import (
    evaluate_shape_functions,
    monomials,
    sfm_nonuniform,
    sfm_uniform,
    shift_matrix,
)
from frac_bem.solve import nodal_solution_table, solve_dense
from frac_bem.vectors import cross, l2norm, normalize

__all__ = [
    # Core classes
    "Element",
    "Mesh",
    "MeshData",
    "DofHandle",
    "VertexWeights",
    "NumericalParameters",
    "HZ",
    # Element builders
    "rotation_tensor",
    "tau_coordinates",
    "conformal_map",
    "localize_point",
    "sfm_uniform",
    "sfm_nonuniform",
    "shift_matrix",
    "monomials",
    "evaluate_shape_functions",
    "collocation_points_uniform",
    "collocation_points_nonuniform",
    "master_node_coordinates",
    # Vector primitives
    "l2norm",
    "normalize",
    "cross",
    # DOF and solution state
    "FIXED",
    "nodes_per_element",
    "make_dof_handle",
    "make_dof_h_crack",
    "init_mesh_data_p_fault",
    "get_dd_vector",
    "write_dd_vector",
    "solve_dense",
    "nodal_solution_table",
    # Errors
    "DegenerateElementError",
    "InvalidWeightError",
    "NumericToleranceWarning",
    "SingularMatrixError",
    # Configuration
    "config",
    "configure",
    "use",
    "settings",
    "set_log_level",
]
