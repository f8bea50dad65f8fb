"""
Seidel Validation: input checks for matrices, vectors and solve options.

Checks fail fast with the offending name and actual values in the
message. Array-likes are converted with np.asarray to float64; nothing
else is coerced.
"""

import numbers

import numpy as np

from seidel.exceptions import ConstructionError, DimensionError, ValidationError


def as_float_array(array, name, error=ConstructionError):
    """
    Convert an array-like to a float64 numpy array.

    Parameters
    ----------
    array : array_like
        Nested lists, tuples or an ndarray of numbers.
    name : str
        Parameter name for error messages.
    error : type
        Exception class raised on failure.

    Returns
    -------
    numpy.ndarray
        float64 copy of the input.
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        # ragged nesting ends up here on current numpy
        raise error(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise error(f"{name}: mixed types, ragged rows or non-numeric data")
    if not np.issubdtype(result.dtype, np.number):
        raise error(f"{name}: non-numeric dtype {result.dtype}, expected numbers")
    if np.iscomplexobj(result):
        raise error(f"{name}: complex values are not supported")

    result = np.array(result, dtype=np.float64)
    if not np.all(np.isfinite(result)):
        n_nan = int(np.sum(np.isnan(result)))
        n_inf = int(np.sum(np.isinf(result)))
        raise error(f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)")
    return result


def check_square_matrix(matrix, name="matrix"):
    """Return `matrix` as a non-empty n x n float64 array."""
    A = as_float_array(matrix, name)
    if A.ndim != 2 or A.shape[0] == 0 or A.shape[0] != A.shape[1]:
        raise ConstructionError(
            f"{name}: matrix is not square or empty (shape {A.shape})",
            expected="n x n, n >= 1", actual=A.shape,
        )
    return A


def check_system(matrix, vector):
    """
    Validate the pair (A, b) of a linear system.

    Returns
    -------
    tuple of numpy.ndarray
        (A, b) as float64 arrays, A of shape (n, n) and b of shape (n,).
    """
    b = as_float_array(vector, "vector")
    if b.ndim != 1:
        raise ConstructionError(
            f"vector: expected 1D array, got {b.ndim}D with shape {b.shape}",
            expected=1, actual=b.ndim,
        )

    A = as_float_array(matrix, "matrix")
    # Row count first so a mismatch is reported even for non-square input
    rows = A.shape[0] if A.ndim >= 1 else 0
    if rows != b.shape[0]:
        raise ConstructionError(
            f"Incompatible matrix and vector sizes: matrix has {rows} rows, "
            f"vector has {b.shape[0]} entries",
            expected=rows, actual=b.shape[0],
        )

    return check_square_matrix(A), b


def check_initial_guess(guess, n, name="initial_guess"):
    """Return a float64 copy of `guess`, which must have length n."""
    x = as_float_array(guess, name, error=DimensionError)
    if x.shape != (n,):
        raise DimensionError(
            f"{name}: expected shape ({n},), got {x.shape}"
        )
    return x


def check_solve_options(tolerance, max_iterations):
    """Reject non-positive tolerance and iteration limits below 1."""
    if (isinstance(tolerance, bool) or not isinstance(tolerance, numbers.Real)
            or not np.isfinite(tolerance) or tolerance <= 0):
        raise ValidationError(f"tolerance: must be a positive number, got {tolerance!r}")
    # bool is an Integral, but True is not an iteration limit
    if (isinstance(max_iterations, bool)
            or not isinstance(max_iterations, numbers.Integral)
            or max_iterations < 1):
        raise ValidationError(
            f"max_iterations: must be an integer >= 1, got {max_iterations!r}"
        )
