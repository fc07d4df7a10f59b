"""Exception and warning types raised by frac-bem.

All errors derive from the built-in families the rest of the package uses
(`ValueError` for bad geometry or parameters, `RuntimeError` for solver
failures), so callers that already catch those keep working.
"""


class DegenerateElementError(ValueError):
    """Raised when a triangle has (numerically) zero area.

    Covers coincident vertices, colinear vertices and a conformal-map
    determinant below tolerance.
    """


class InvalidWeightError(ValueError):
    """Raised when a vertex partition weight is zero, negative or not finite."""


class SingularMatrixError(RuntimeError):
    """Raised when a dense system matrix is singular to machine precision."""


class NumericToleranceWarning(RuntimeWarning):
    """Issued when a computed frame is not orthonormal within tolerance."""
