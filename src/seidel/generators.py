"""
Seidel Generators: random systems for demos and tests.

Not part of the solving contract. Values are drawn with numpy's
Generator API, so passing `seed` makes a call reproducible.
"""

import numpy as np

from seidel.storage import MatrixProperty


def _property(prop):
    if isinstance(prop, MatrixProperty):
        return prop
    return MatrixProperty(prop)


def random_matrix(n, max_value=15, property=MatrixProperty.DIAGONALLY_DOMINANT,
                  seed=None):
    """
    Generate a random n x n matrix with a requested property.

    Parameters
    ----------
    n : int
        Matrix size.
    max_value : int
        Entries are drawn from [0, max_value).
    property : MatrixProperty or str
        DIAGONALLY_DOMINANT: the diagonal is replaced by the off-diagonal
        row sum plus a random integer in [1, max_value].
        SYMMETRIC_POSITIVE_DEFINITE: M @ M.T of a random real matrix, with
        n * max_value added to the diagonal.
        NORMAL: plain random integers, no guarantee.
    seed : int or numpy.random.Generator, optional
        Random source.

    Returns
    -------
    numpy.ndarray
        (n, n) float64 matrix.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if max_value < 1:
        raise ValueError(f"max_value must be >= 1, got {max_value}")

    prop = _property(property)
    rng = np.random.default_rng(seed)
    A = rng.integers(0, max_value, size=(n, n)).astype(np.float64)

    if prop is MatrixProperty.DIAGONALLY_DOMINANT:
        off = A.sum(axis=1) - np.diag(A)
        A[np.diag_indices(n)] = off + rng.integers(1, max_value + 1, size=n)
    elif prop is MatrixProperty.SYMMETRIC_POSITIVE_DEFINITE:
        M = rng.random((n, n)) * max_value
        A = M @ M.T
        A = 0.5 * (A + A.T)
        A[np.diag_indices(n)] += n * max_value
    return A


def random_vector(n, max_value=15, seed=None):
    """Random length-n float64 vector of integers in [0, max_value)."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    rng = np.random.default_rng(seed)
    return rng.integers(0, max_value, size=n).astype(np.float64)
