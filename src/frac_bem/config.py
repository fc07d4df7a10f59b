"""Global configuration for frac-bem numerical tolerances and defaults.

This module provides a package-wide configuration surface for the tolerances
used to reject degenerate elements and to check frame orthonormality, and for
the default numerical parameters (collocation offset, tip treatment, DD
coordinate system). Values are read from the environment once at import time
and can be changed programmatically or temporarily with `use`.
"""

from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, ContextManager, Iterator, Optional


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
_LOGGER = logging.getLogger("frac_bem.config")
_PACKAGE_LOGGER = logging.getLogger("frac_bem")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Parse a logging level string or int into a `logging` level constant.

    Args:
        val: The desired level (e.g., "DEBUG", 10). May be None.
        default: Fallback level if `val` cannot be parsed.

    Returns:
        An integer logging level (e.g., logging.DEBUG).
    """
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the package logger level programmatically.

    Args:
        level: A standard logging level name or integer.
    """
    _PACKAGE_LOGGER.setLevel(_parse_log_level(level))


# Default level can be overridden by env.
set_log_level(os.getenv("FRAC_BEM_LOGLEVEL", "WARNING"))


# -----------------------------------------------------------------------------
# Env helpers
# -----------------------------------------------------------------------------
def bool_env(varname: str, default: bool) -> bool:
    """Read an environment variable and interpret it as a boolean.

    True values: 'y', 'yes', 't', 'true', 'on', '1'.
    False values: 'n', 'no', 'f', 'false', 'off', '0'.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        A boolean value parsed from the environment.
    """
    val = os.getenv(varname, str(default))
    val = val.lower()
    if val in ("y", "yes", "t", "true", "on", "1"):
        return True
    if val in ("n", "no", "f", "false", "off", "0"):
        return False
    raise ValueError(f"invalid truth value {val!r} for environment {varname!r}")


def int_env(varname: str, default: int) -> int:
    """Read an environment variable and interpret it as an integer.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The integer value parsed from the environment.
    """
    return int(os.getenv(varname, str(default)))


def float_env(varname: str, default: float) -> float:
    """Read an environment variable and interpret it as a float.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The float value parsed from the environment.
    """
    return float(os.getenv(varname, repr(default)))


# -----------------------------------------------------------------------------
# Settings container
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """Snapshot of the numerical settings in effect.

    Attributes:
        degeneracy_tol: Relative threshold below which an edge length, a
            normal length or a conformal-map determinant is treated as zero.
        orthonormality_tol: Max abs deviation of R·Rᵀ from identity before a
            NumericToleranceWarning is issued.
        beta: Default relative offset of collocation points to the centroid.
        tip_type: Default crack-tip DOF treatment (0, 1 or 2).
        is_dd_local: Whether displacement discontinuities are sought in the
            element's local frame (True) or in the global one (False).
    """

    degeneracy_tol: float = 1e-12
    orthonormality_tol: float = 1e-10
    beta: float = 0.125
    tip_type: int = 1
    is_dd_local: bool = True


def _settings_from_env() -> Settings:
    """Build settings from FRAC_BEM_* environment variables."""
    settings = Settings(
        degeneracy_tol=float_env("FRAC_BEM_DEGENERACY_TOL", 1e-12),
        orthonormality_tol=float_env("FRAC_BEM_ORTHO_TOL", 1e-10),
        beta=float_env("FRAC_BEM_BETA", 0.125),
        tip_type=int_env("FRAC_BEM_TIP_TYPE", 1),
        is_dd_local=bool_env("FRAC_BEM_DD_LOCAL", True),
    )
    _LOGGER.debug("Settings from environment: %s", settings)
    return settings


def _check(settings: Settings) -> Settings:
    if not settings.degeneracy_tol >= 0.0:
        raise ValueError(f"degeneracy_tol must be >= 0, got {settings.degeneracy_tol}")
    if not settings.orthonormality_tol > 0.0:
        raise ValueError(
            f"orthonormality_tol must be > 0, got {settings.orthonormality_tol}"
        )
    if not 0.0 <= settings.beta < 1.0:
        raise ValueError(f"beta must lie in [0, 1), got {settings.beta}")
    if settings.tip_type not in (0, 1, 2):
        raise ValueError(f"tip_type must be 0, 1 or 2, got {settings.tip_type}")
    return settings


# -----------------------------------------------------------------------------
# Config singleton
# -----------------------------------------------------------------------------
class Config:
    """Global configuration for frac-bem.

    Holds the active `Settings` and lets callers change them either
    permanently (`configure`) or within a block (`use`).
    """

    def __init__(self) -> None:
        """Initialize config using environment defaults."""
        self._settings: Settings = _check(_settings_from_env())
        _LOGGER.info("Config initialized: %s", self._settings)

    @property
    def settings(self) -> Settings:
        """Return the active settings snapshot."""
        return self._settings

    @property
    def degeneracy_tol(self) -> float:
        return self._settings.degeneracy_tol

    @property
    def orthonormality_tol(self) -> float:
        return self._settings.orthonormality_tol

    @property
    def beta(self) -> float:
        return self._settings.beta

    @property
    def tip_type(self) -> int:
        return self._settings.tip_type

    @property
    def is_dd_local(self) -> bool:
        return self._settings.is_dd_local

    def configure(self, **overrides: Any) -> Config:
        """Replace selected settings.

        Args:
            **overrides: Any `Settings` field (e.g. ``degeneracy_tol=1e-10``).

        Returns:
            The `Config` instance (for chaining).

        Raises:
            TypeError: If an unknown setting name is given.
            ValueError: If a value is out of range.
        """
        new = _check(replace(self._settings, **overrides))
        _LOGGER.info("Reconfiguring: %s", new)
        self._settings = new
        return self

    @contextlib.contextmanager
    def use(self, **overrides: Any) -> Iterator[Settings]:
        """Temporarily override settings within a context manager.

        Args:
            **overrides: Any `Settings` field.

        Yields:
            The temporary settings. Restores the previous ones on exit.
        """
        prev = self._settings
        try:
            self.configure(**overrides)
            yield self._settings
        finally:
            self._settings = prev
            _LOGGER.info("Restored previous settings: %s", self._settings)

    def reset(self) -> Config:
        """Reload settings from the environment."""
        self._settings = _check(_settings_from_env())
        return self


# Singleton & forwards
config = Config()


def configure(**overrides: Any) -> Config:
    """Replace selected settings (module-level)."""
    return config.configure(**overrides)


def use(**overrides: Any) -> ContextManager[Settings]:
    """Temporarily override settings within a context manager (module-level)."""
    return config.use(**overrides)


def settings() -> Settings:
    """Return the active settings snapshot (module-level)."""
    return config.settings


def degeneracy_tol(override: Optional[float] = None) -> float:
    """Return `override` if given, else the configured degeneracy tolerance."""
    return config.degeneracy_tol if override is None else float(override)
