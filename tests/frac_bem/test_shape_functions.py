"""Unit tests for shape-function and shift matrices.

The Kronecker tests evaluate every shape function at every node, mapping the
master node coordinates to the element's tau coordinates with
``tau = x * tau1 + y * tau2``.
"""
from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_allclose

from frac_bem.collocation import master_node_coordinates
from frac_bem.errors import DegenerateElementError, InvalidWeightError
from frac_bem.geometry import conformal_map, tau_coordinates
from frac_bem.shape_functions import (
    basis_change_matrix,
    evaluate_shape_functions,
    master_sfm_nonuniform,
    master_sfm_uniform,
    monomials,
    quadratic_extension,
    sfm_nonuniform,
    sfm_uniform,
    shift_matrix,
)


def _master_monomials(xy):
    x, y = xy[:, 0], xy[:, 1]
    return np.column_stack((np.ones_like(x), x, y, x * x, y * y, x * y))


def _node_taus(vertices, weights=None):
    _, t1, t2 = tau_coordinates(vertices)
    xy = master_node_coordinates(weights)
    return xy[:, 0] * t1 + xy[:, 1] * t2


@pytest.mark.parametrize("weights", [None, (1.0, 2.0, 3.0), (0.2, 5.0, 1.3)])
def test_master_matrix_kronecker(weights):
    sfm_mc = master_sfm_uniform() if weights is None else master_sfm_nonuniform(weights)
    values = _master_monomials(master_node_coordinates(weights)) @ sfm_mc.T
    assert_allclose(values, np.eye(6), atol=1e-12)


def test_nonuniform_master_reduces_to_uniform():
    assert_allclose(master_sfm_nonuniform((1.0, 1.0, 1.0)), master_sfm_uniform())
    assert_allclose(master_sfm_nonuniform((2.5, 2.5, 2.5)), master_sfm_uniform())


def test_sfm_uniform_kronecker(skew_triangle):
    sfm = sfm_uniform(skew_triangle)
    values = evaluate_shape_functions(sfm, _node_taus(skew_triangle))
    assert_allclose(values, np.eye(6), atol=1e-10)


@pytest.mark.parametrize("weights", [(1.0, 2.0, 3.0), (4.0, 0.5, 1.0)])
def test_sfm_nonuniform_kronecker(skew_triangle, weights):
    sfm = sfm_nonuniform(skew_triangle, weights)
    values = evaluate_shape_functions(sfm, _node_taus(skew_triangle, weights))
    assert_allclose(values, np.eye(6), atol=1e-10)


def test_sfm_reduction_equal_weights(skew_triangle):
    assert_allclose(
        sfm_nonuniform(skew_triangle, (1.0, 1.0, 1.0)),
        sfm_uniform(skew_triangle),
        atol=1e-12,
    )


def test_sfm_partition_of_unity(skew_triangle):
    """Quadratic Lagrange functions sum to one everywhere."""
    sfm = sfm_nonuniform(skew_triangle, (1.0, 3.0, 2.0))
    taus = np.array([0.1 + 0.2j, 0.7 - 0.3j, 1.5 + 1.0j])
    assert_allclose(evaluate_shape_functions(sfm, taus).sum(axis=1), 1.0, atol=1e-10)


def test_right_triangle_shape_function_zero(right_triangle):
    sfm = sfm_uniform(right_triangle)
    n0 = evaluate_shape_functions(sfm, np.array([0.0, 1.0, 1.0j]))[:, 0]
    assert_allclose(n0, [1.0, 0.0, 0.0], atol=1e-14)


def test_sfm_degenerate_raises(colinear_triangle):
    with pytest.raises(DegenerateElementError):
        sfm_uniform(colinear_triangle)
    with pytest.raises(DegenerateElementError):
        sfm_nonuniform(colinear_triangle, (1.0, 2.0, 3.0))


@pytest.mark.parametrize("weights", [(0.0, 1.0, 1.0), (1.0, -2.0, 1.0), (1.0, 1.0, np.nan)])
def test_sfm_invalid_weights_raise(right_triangle, weights):
    with pytest.raises(InvalidWeightError):
        sfm_nonuniform(right_triangle, weights)


def test_quadratic_extension_matches_products(skew_triangle):
    M = conformal_map(skew_triangle)
    Q = quadratic_extension(M)
    tau = 0.37 - 0.81j
    x, y = M @ [tau, np.conj(tau)]
    quad = Q @ [tau**2, np.conj(tau) ** 2, tau * np.conj(tau)]
    assert_allclose(quad, [x * x, y * y, x * y], atol=1e-12)


def test_basis_change_matrix_blocks(skew_triangle):
    M = conformal_map(skew_triangle)
    C = basis_change_matrix(M)
    assert C[0, 0] == 1.0
    assert_allclose(C[1:3, 1:3], M)
    assert_allclose(C[3:, 3:], quadratic_extension(M))
    assert np.count_nonzero(C[0, 1:]) == 0
    assert np.count_nonzero(C[1:3, 3:]) == 0


def test_shift_matrix_recenters_polynomial(skew_triangle):
    sfm = sfm_uniform(skew_triangle)
    z = 0.6 + 0.25j
    shifted = sfm @ shift_matrix(z)
    for tau in (0.1 + 0.1j, 1.2 - 0.4j):
        assert_allclose(
            monomials(tau - z) @ shifted.T,
            monomials(tau) @ sfm.T,
            atol=1e-12,
        )


def test_shift_round_trip():
    z = -1.3 + 0.45j
    assert_allclose(shift_matrix(z) @ shift_matrix(-z), np.eye(6), atol=1e-10)
    assert_allclose(shift_matrix(0.0), np.eye(6))


def test_shift_matrix_rejects_non_finite():
    with pytest.raises(ValueError):
        shift_matrix(complex(np.inf, 0.0))


def test_monomials_shapes():
    assert monomials(1.0 + 1.0j).shape == (6,)
    assert monomials(np.array([0.0, 1.0j])).shape == (2, 6)
    assert_allclose(monomials(2.0j), [1.0, 2.0j, -2.0j, -4.0, -4.0, 4.0])
