from __future__ import annotations

import dataclasses
import logging

import numpy as np
import pytest

from frac_bem.config import (
    bool_env,
    config,
    configure,
    float_env,
    int_env,
    set_log_level,
    settings,
    use,
)
from frac_bem.errors import DegenerateElementError
from frac_bem.geometry import rotation_tensor


def test_bool_int_float_env_roundtrip(monkeypatch):
    monkeypatch.setenv("TBOOL", "true")
    assert bool_env("TBOOL", False) is True
    monkeypatch.setenv("TBOOL", "0")
    assert bool_env("TBOOL", True) is False
    monkeypatch.setenv("TINT", "42")
    assert int_env("TINT", 0) == 42
    monkeypatch.setenv("TFLOAT", "1e-8")
    assert float_env("TFLOAT", 0.0) == 1e-8
    assert float_env("TFLOAT_UNSET_XYZ", 0.5) == 0.5


def test_bool_env_invalid(monkeypatch):
    monkeypatch.setenv("TBOOL", "maybe")
    with pytest.raises(ValueError):
        bool_env("TBOOL", False)


def test_use_context_restores_settings():
    prev = settings()
    with use(degeneracy_tol=1e-3, beta=0.25) as tmp:
        assert tmp.degeneracy_tol == 1e-3
        assert config.beta == 0.25
    assert settings() == prev


def test_configure_validates():
    prev = settings()
    with pytest.raises(ValueError):
        configure(beta=1.0)
    with pytest.raises(TypeError):
        configure(not_a_setting=1)
    assert settings() == prev


def test_degeneracy_tolerance_is_relative():
    """A sliver triangle passes with the default tolerance, fails with a loose one."""
    sliver = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.5, 1e-6, 0.0]])
    rotation_tensor(sliver)
    with use(degeneracy_tol=1e-4):
        with pytest.raises(DegenerateElementError):
            rotation_tensor(sliver)


def test_env_overrides_on_reset(monkeypatch):
    monkeypatch.setenv("FRAC_BEM_BETA", "0.2")
    monkeypatch.setenv("FRAC_BEM_TIP_TYPE", "2")
    prev = settings()
    try:
        config.reset()
        assert config.beta == 0.2
        assert config.tip_type == 2
    finally:
        configure(**dataclasses.asdict(prev))


def test_set_log_level():
    logger = logging.getLogger("frac_bem")
    prev = logger.level
    try:
        set_log_level("DEBUG")
        assert logger.level == logging.DEBUG
        set_log_level("not-a-level")
        assert logger.level == logging.WARNING
    finally:
        logger.setLevel(prev)
