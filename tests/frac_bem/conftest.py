from __future__ import annotations
import pytest

import numpy as np
from frac_bem.mesh import Mesh


@pytest.fixture
def right_triangle():
    """
    Right isosceles triangle in the XY plane:
        v0 = [0, 0, 0]
        v1 = [1, 0, 0]
        v2 = [0, 1, 0]
    """
    return np.array(
        [
            [0.0, 0.0, 0.0],  # v0
            [1.0, 0.0, 0.0],  # v1
            [0.0, 1.0, 0.0],  # v2
        ]
    )


@pytest.fixture
def skew_triangle():
    """A scalene triangle tilted out of every coordinate plane."""
    return np.array(
        [
            [0.3, -0.2, 1.1],
            [2.1, 0.4, 0.7],
            [0.9, 1.7, 2.0],
        ]
    )


@pytest.fixture
def colinear_triangle():
    """Degenerate triangle with three colinear vertices."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [2.0, 0.0, 0.0],
        ]
    )


@pytest.fixture
def simple_triangle_mesh(right_triangle):
    """Mesh made of the single right triangle."""
    connectivity = np.array([[0, 1, 2]])  # One triangle
    return Mesh(verts=right_triangle, connectivity=connectivity)


@pytest.fixture
def two_triangle_square():
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 (0,1) ---- v2 (1,1)
        |  \\           |
        |    \\         |
        |      \\       |
      v0 (0,0) ---- v1 (1,0)
    Triangles: [0,1,2] and [0,2,3]
    Boundary edges (undirected): (0,1),(1,2),(2,3),(0,3)
    Interior edge: (0,2)
    """
    verts = np.array(
        [
            [0.0, 0.0, 0.0],  # v0
            [1.0, 0.0, 0.0],  # v1
            [1.0, 1.0, 0.0],  # v2
            [0.0, 1.0, 0.0],  # v3
        ],
        dtype=float,
    )
    conn = np.array([[0, 1, 2], [0, 2, 3]], dtype=int)
    return Mesh(verts=verts, connectivity=conn)


@pytest.fixture
def hexagon_mesh():
    """
    Flat hexagonal patch: six triangles around a centre node (0).
    Every rim node lies on the boundary; the centre node does not.
    """
    angles = np.arange(6) * np.pi / 3.0
    rim = np.column_stack((np.cos(angles), np.sin(angles), np.zeros(6)))
    verts = np.vstack(([0.0, 0.0, 0.0], rim))
    conn = np.array([[0, 1 + k, 1 + (k + 1) % 6] for k in range(6)], dtype=int)
    return Mesh(verts=verts, connectivity=conn)
