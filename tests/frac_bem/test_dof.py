"""Unit tests for element-wise DOF handles."""
from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from frac_bem.dof import (
    FIXED,
    DofHandle,
    dof_handle_from_array,
    make_dof_h_crack,
    make_dof_handle,
    nodes_per_element,
)


def test_nodes_per_element():
    assert [nodes_per_element(k) for k in (0, 1, 2)] == [1, 3, 6]
    with pytest.raises(ValueError):
        nodes_per_element(3)


def test_make_dof_handle_sequential():
    h = make_dof_handle(2, 3, fixed=[(0, 1), (1, 0)])
    assert h.n_dof == 4
    assert_array_equal(h.dof_h, [[0, FIXED, 1], [FIXED, 2, 3]])
    assert_array_equal(h.free_dofs(), [0, 1, 2, 3])
    h.validate()


def test_validate_detects_repeats_and_gaps():
    with pytest.raises(ValueError):
        DofHandle(n_dof=3, dof_h=[[0, 1, 1]]).validate()
    with pytest.raises(ValueError):
        DofHandle(n_dof=3, dof_h=[[0, 1, 3]]).validate()
    with pytest.raises(ValueError):
        DofHandle(n_dof=2, dof_h=[[0, 1, -5]]).validate()


def test_dof_handle_from_array():
    h = dof_handle_from_array([[1, FIXED], [0, 2]])
    assert h.n_dof == 3
    with pytest.raises(ValueError):
        dof_handle_from_array([[1, FIXED], [1, 2]])


def test_dof_handle_component_check():
    with pytest.raises(ValueError):
        DofHandle(n_dof=0, dof_h=np.zeros((1, 4), dtype=int), n_components=3)


@pytest.mark.parametrize(
    "ap_order, tip_type, expected",
    [
        (2, 0, 108),
        (2, 1, 72),
        (2, 2, 54),
        (1, 1, 18),
        (0, 2, 18),
    ],
)
def test_crack_handle_hexagon(hexagon_mesh, ap_order, tip_type, expected):
    h = make_dof_h_crack(hexagon_mesh, ap_order, tip_type)
    assert h.n_dof == expected
    assert h.n_components == 3
    assert h.dof_h.shape == (6, 3 * nodes_per_element(ap_order))
    h.validate()


def test_crack_handle_fixes_tip_vertices(hexagon_mesh):
    h = make_dof_h_crack(hexagon_mesh, 2, 1)
    # the centre node (local vertex 0) stays free, rim vertices are fixed
    assert (h.dof_h[:, 0:3] != FIXED).all()
    assert (h.dof_h[:, 3:9] == FIXED).all()
    assert (h.dof_h[:, 9:] != FIXED).all()


def test_crack_handle_tip_edges(two_triangle_square):
    h = make_dof_h_crack(two_triangle_square, 2, 2)
    assert h.n_dof == 6
    # only the edge node on the interior diagonal survives in each element
    assert_array_equal(h.dof_h[0, 12:15], [0, 1, 2])
    assert_array_equal(h.dof_h[1, 15:18], [3, 4, 5])


def test_crack_handle_rejects_bad_tip_type(hexagon_mesh):
    with pytest.raises(ValueError):
        make_dof_h_crack(hexagon_mesh, 2, 5)
