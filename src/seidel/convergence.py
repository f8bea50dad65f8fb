"""
Seidel Convergence: advisory checks for the Gauss-Seidel method.

Diagonal dominance and symmetric positive definiteness are each
sufficient for Gauss-Seidel to converge. Anything else may still
converge, so the advice only ever produces a warning.
"""

import numpy as np

from seidel.storage import MatrixProperty

_GUARANTEED = (
    MatrixProperty.DIAGONALLY_DOMINANT,
    MatrixProperty.SYMMETRIC_POSITIVE_DEFINITE,
)


def guarantees_convergence(prop):
    """True if `prop` is a sufficient condition for convergence."""
    return prop in _GUARANTEED


def make_diagonally_dominant(A, b):
    """
    Search for a row permutation that makes A diagonally dominant.

    Greedy: for each target row i, take the first unused source row j
    with |a_ji| >= sum of the other |a_jk|. The same permutation is
    applied to b.

    Parameters
    ----------
    A : numpy.ndarray
        Square matrix.
    b : numpy.ndarray
        Right-hand side.

    Returns
    -------
    tuple or None
        (A_permuted, b_permuted, order), or None if the greedy search
        finds no suitable row for some position.
    """
    n = A.shape[0]
    abs_A = np.abs(A)
    row_sums = abs_A.sum(axis=1)
    used = np.zeros(n, dtype=bool)
    order = []

    for i in range(n):
        for j in range(n):
            if used[j]:
                continue
            # |a_ji| >= row_sum - |a_ji|
            if 2.0 * abs_A[j, i] >= row_sums[j]:
                used[j] = True
                order.append(j)
                break
        else:
            return None

    order = np.array(order, dtype=np.int64)
    return A[order].copy(), b[order].copy(), order
