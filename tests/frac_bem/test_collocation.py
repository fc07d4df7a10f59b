"""Unit tests for collocation-point placement."""
from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from frac_bem.collocation import (
    collocation_points_nonuniform,
    collocation_points_uniform,
    master_node_coordinates,
)
from frac_bem.errors import InvalidWeightError


def test_uniform_beta_zero_is_exact(skew_triangle):
    cp = collocation_points_uniform(skew_triangle, 0.0)
    v0, v1, v2 = skew_triangle

    assert cp.shape == (6, 3)
    assert_array_equal(cp[:3], skew_triangle)
    # edge point n + 3 is opposite vertex n
    assert_array_equal(cp[3], (v1 + v2) / 2.0)
    assert_array_equal(cp[4], (v2 + v0) / 2.0)
    assert_array_equal(cp[5], (v0 + v1) / 2.0)


def test_nonuniform_beta_zero_weighted_midpoints(skew_triangle):
    w = (1.0, 2.0, 3.0)
    cp = collocation_points_nonuniform(skew_triangle, w, 0.0)
    v0, v1, v2 = skew_triangle

    assert_array_equal(cp[:3], skew_triangle)
    assert_allclose(cp[3], (2.0 * v1 + 3.0 * v2) / 5.0)
    assert_allclose(cp[4], (3.0 * v2 + 1.0 * v0) / 4.0)
    assert_allclose(cp[5], (1.0 * v0 + 2.0 * v1) / 3.0)


def test_nonuniform_equal_weights_match_uniform(skew_triangle):
    assert_allclose(
        collocation_points_nonuniform(skew_triangle, (2.0, 2.0, 2.0), 0.125),
        collocation_points_uniform(skew_triangle, 0.125),
    )


def test_points_collapse_to_centroid(skew_triangle):
    centroid = skew_triangle.mean(axis=0)
    cp = collocation_points_uniform(skew_triangle, 1.0 - 1e-12)
    assert_allclose(cp, np.tile(centroid, (6, 1)), atol=1e-10)
    cp_n = collocation_points_nonuniform(skew_triangle, (1.0, 4.0, 0.5), 1.0 - 1e-12)
    assert_allclose(cp_n, np.tile(centroid, (6, 1)), atol=1e-10)


def test_beta_offsets_linearly(right_triangle):
    beta = 0.25
    cp = collocation_points_uniform(right_triangle, beta)
    centroid = np.array([1.0, 1.0, 0.0]) / 3.0
    assert_allclose(cp[1], 0.75 * right_triangle[1] + 0.25 * centroid)
    assert_allclose(cp[3], 0.75 * np.array([0.5, 0.5, 0.0]) + 0.25 * centroid)


@pytest.mark.parametrize("beta", [-0.1, 1.0, 1.5])
def test_invalid_beta_raises(right_triangle, beta):
    with pytest.raises(ValueError):
        collocation_points_uniform(right_triangle, beta)


def test_invalid_weights_raise(right_triangle):
    with pytest.raises(InvalidWeightError):
        collocation_points_nonuniform(right_triangle, (1.0, 0.0, 1.0))


def test_master_node_coordinates():
    assert_allclose(
        master_node_coordinates(),
        [[0, 0], [1, 0], [0, 1], [0.5, 0.5], [0, 0.5], [0.5, 0]],
    )
    xy = master_node_coordinates((1.0, 3.0, 1.0))
    assert_allclose(xy[3], [0.75, 0.25])
    assert_allclose(xy[5], [0.75, 0.0])
