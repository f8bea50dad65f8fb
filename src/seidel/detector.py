"""
Seidel Detector: auto-detection of matrix structure and properties.

Classifies a dense square matrix with a strict precedence chain (first
match wins):

  1. Diagonal    every off-diagonal entry is zero
  2. Triangular  lower (checked first), then upper
  3. Band        max |i-j| over nonzeros is below n-1
  4. Sparse      more than half of the entries are zero -> CSR
  5. Dense       fallback

Independently tags the matrix as diagonally dominant, symmetric positive
definite or normal. Both are pure functions of the input.

Usage:
    import seidel
    report = seidel.detect_matrix(A)
    print(report["storage"], report["property"])
"""

import numpy as np
from scipy import linalg

from seidel.storage import StorageKind, MatrixProperty, encode
from seidel.convergence import guarantees_convergence
from seidel.validation import check_square_matrix

# Sparse if the zero fraction is strictly above this
SPARSE_ZERO_FRACTION = 0.5


def is_diagonally_dominant(A):
    """|a_ii| >= sum of |a_ij|, j != i, for every row (weak dominance)."""
    abs_A = np.abs(A)
    diag = np.diag(abs_A)
    off = np.where(np.eye(A.shape[0], dtype=bool), 0.0, abs_A).sum(axis=1)
    return bool(np.all(diag >= off))


def is_symmetric(A):
    """Exact symmetry, no tolerance."""
    return bool(np.array_equal(A, A.T))


def is_positive_definite(A):
    """True if a Cholesky factorisation completes with positive pivots."""
    try:
        linalg.cholesky(A, lower=True, check_finite=False)
    except linalg.LinAlgError:
        return False
    return True


def detect_property(A):
    """
    Determine the convergence-relevant property tag of a square matrix.

    Diagonal dominance is checked first and wins when the matrix is also
    symmetric positive definite.

    Returns
    -------
    MatrixProperty
    """
    if is_diagonally_dominant(A):
        return MatrixProperty.DIAGONALLY_DOMINANT
    if is_symmetric(A) and is_positive_definite(A):
        return MatrixProperty.SYMMETRIC_POSITIVE_DEFINITE
    return MatrixProperty.NORMAL


def bandwidth(A):
    """Largest |i - j| over the nonzero entries of A (0 for the zero matrix)."""
    rows, cols = np.nonzero(A)
    if rows.size == 0:
        return 0
    return int(np.max(np.abs(rows - cols)))


def detect_storage(A):
    """
    Choose the storage kind for a square matrix.

    Returns
    -------
    tuple
        (StorageKind, bandwidth). bandwidth is only meaningful for BAND
        and is None otherwise.
    """
    n = A.shape[0]
    off_diagonal = A[~np.eye(n, dtype=bool)]
    if not np.any(off_diagonal):
        return StorageKind.DIAGONAL, None

    if not np.any(np.triu(A, k=1)):
        return StorageKind.LOWER_TRIANGULAR, None
    if not np.any(np.tril(A, k=-1)):
        return StorageKind.UPPER_TRIANGULAR, None

    w = bandwidth(A)
    if w < n - 1:
        return StorageKind.BAND, w

    zero_fraction = np.count_nonzero(A == 0) / A.size
    if zero_fraction > SPARSE_ZERO_FRACTION:
        return StorageKind.SPARSE, None

    return StorageKind.DENSE, None


def classify_matrix(A):
    """
    Classify a dense square matrix.

    Parameters
    ----------
    A : numpy.ndarray
        Square float64 matrix.

    Returns
    -------
    tuple
        (StorageKind, MatrixProperty, bandwidth or None).
    """
    kind, w = detect_storage(A)
    return kind, detect_property(A), w


def store_matrix(A):
    """Classify A and pack it into the matching representation."""
    kind, prop, w = classify_matrix(A)
    return encode(A, kind, property=prop, bandwidth=w)


def detect_matrix(A):
    """
    Analyze matrix structure and report the chosen representation.

    Parameters
    ----------
    A : array_like
        Square matrix.

    Returns
    -------
    dict
        Structure report with shape, nnz, density, storage, property,
        bandwidth, convergence advice and memory estimates.
    """
    A_arr = check_square_matrix(A)
    n = A_arr.shape[0]
    nnz = int(np.count_nonzero(A_arr))
    total = A_arr.size
    density = nnz / total if total > 0 else 0

    stored = store_matrix(A_arr)
    kind = stored.kind
    prop = stored.property
    guaranteed = guarantees_convergence(prop)

    if kind is StorageKind.DIAGONAL:
        reason = "No off-diagonal entries, storing the diagonal only"
    elif kind in (StorageKind.LOWER_TRIANGULAR, StorageKind.UPPER_TRIANGULAR):
        reason = f"Triangular, packed storage of {n * (n + 1) // 2:,} entries"
    elif kind is StorageKind.BAND:
        reason = f"Band of width {stored.data.bandwidth} (< {n - 1})"
    elif kind is StorageKind.SPARSE:
        reason = f"Sparse ({density:.2%} nonzero), CSR storage"
    else:
        reason = f"Dense ({density:.1%} nonzero), full storage"

    ram_dense = A_arr.nbytes
    ram_stored = stored.nbytes

    return {
        "shape": A_arr.shape,
        "nnz": nnz,
        "density": round(density, 6),
        "storage": kind.value,
        "property": prop.value,
        "bandwidth": stored.data.bandwidth if kind is StorageKind.BAND else None,
        "convergence_guaranteed": guaranteed,
        "reason": reason,
        "ram_dense_bytes": ram_dense,
        "ram_stored_bytes": ram_stored,
        "compression": round(ram_dense / max(ram_stored, 1), 1),
    }
