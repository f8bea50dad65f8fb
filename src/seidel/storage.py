"""
Seidel Storage: compact matrix representations and the encoder.

A stored matrix is a tagged union: a StorageKind plus a kind-specific
payload. Entries outside a kind's structural pattern are implicitly zero
and never stored.

    DENSE             (n, n) array
    DIAGONAL          (n,) array of diagonal entries
    BAND              BandData: bandwidth w + row slices clipped to [i-w, i+w]
    LOWER_TRIANGULAR  packed rows a[i, 0..i], row i starts at i(i+1)/2
    UPPER_TRIANGULAR  packed rows a[i, i..n-1], row i starts at
                      n(n+1)/2 - (n-i)(n-i+1)/2
    SPARSE            CSRData built with scipy.sparse.csr_matrix

Payload arrays are read-only once encoded.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
from scipy import sparse

from seidel.exceptions import UnsupportedVariantError


class StorageKind(Enum):
    DENSE = "dense"
    DIAGONAL = "diagonal"
    BAND = "band"
    LOWER_TRIANGULAR = "lower-triangular"
    UPPER_TRIANGULAR = "upper-triangular"
    SPARSE = "sparse"


class MatrixProperty(Enum):
    """Convergence-relevant property, independent of the storage kind."""
    NORMAL = "normal"
    DIAGONALLY_DOMINANT = "diagonally-dominant"
    SYMMETRIC_POSITIVE_DEFINITE = "symmetric-positive-definite"


@dataclass(frozen=True, eq=False)
class BandData:
    """Band payload: rows[i] holds a[i, max(0, i-w) : min(n, i+w+1)]."""
    bandwidth: int
    rows: tuple


@dataclass(frozen=True, eq=False)
class CSRData:
    """Compressed sparse row payload.

    Fields
    ------
    values : numpy.ndarray
        Nonzero values, row by row.
    col_indices : numpy.ndarray of int64
        Column of each value, ascending within a row.
    row_offsets : numpy.ndarray of int64
        Length n+1; row i occupies values[row_offsets[i]:row_offsets[i+1]].
    """
    values: np.ndarray
    col_indices: np.ndarray
    row_offsets: np.ndarray


@dataclass(frozen=True, eq=False)
class MatrixStorage:
    """A classified n x n matrix in its compact form."""
    kind: StorageKind
    size: int
    property: MatrixProperty
    data: object

    @property
    def nbytes(self):
        """Bytes held by the payload arrays."""
        if self.kind is StorageKind.BAND:
            return sum(row.nbytes for row in self.data.rows)
        if self.kind is StorageKind.SPARSE:
            d = self.data
            return d.values.nbytes + d.col_indices.nbytes + d.row_offsets.nbytes
        return self.data.nbytes

    def __repr__(self):
        return (f"MatrixStorage(kind={self.kind.value}, n={self.size}, "
                f"property={self.property.value}, {self.nbytes:,} bytes)")


def read_only(arr):
    """Mark a numpy array non-writeable in place and return it."""
    arr.flags.writeable = False
    return arr


def upper_row_start(n, i):
    """Offset of row i in a packed upper-triangular array."""
    return n * (n + 1) // 2 - (n - i) * (n - i + 1) // 2


def lower_row_start(i):
    """Offset of row i in a packed lower-triangular array."""
    return i * (i + 1) // 2


def _pack_lower(A):
    n = A.shape[0]
    return read_only(np.concatenate([A[i, :i + 1] for i in range(n)]))


def _pack_upper(A):
    n = A.shape[0]
    return read_only(np.concatenate([A[i, i:] for i in range(n)]))


def _pack_band(A, bandwidth):
    n = A.shape[0]
    rows = tuple(
        read_only(A[i, max(0, i - bandwidth):min(n, i + bandwidth + 1)].copy())
        for i in range(n)
    )
    return BandData(bandwidth=bandwidth, rows=rows)


def _pack_csr(A):
    csr = sparse.csr_matrix(A)
    csr.eliminate_zeros()
    csr.sort_indices()
    return CSRData(
        values=read_only(csr.data.astype(np.float64)),
        col_indices=read_only(csr.indices.astype(np.int64)),
        row_offsets=read_only(csr.indptr.astype(np.int64)),
    )


def encode(A, kind, property=MatrixProperty.NORMAL, bandwidth=None):
    """
    Pack a dense square matrix into the representation for `kind`.

    Parameters
    ----------
    A : numpy.ndarray
        Dense (n, n) float64 matrix. Must actually fit the pattern of
        `kind`; entries outside it are dropped.
    kind : StorageKind
        Target representation.
    property : MatrixProperty
        Tag carried alongside the payload.
    bandwidth : int, optional
        Required for BAND.

    Returns
    -------
    MatrixStorage
    """
    n = A.shape[0]

    if kind is StorageKind.DENSE:
        data = read_only(A.copy())
    elif kind is StorageKind.DIAGONAL:
        data = read_only(np.diag(A).copy())
    elif kind is StorageKind.BAND:
        if bandwidth is None:
            raise ValueError("bandwidth is required for band storage")
        data = _pack_band(A, int(bandwidth))
    elif kind is StorageKind.LOWER_TRIANGULAR:
        data = _pack_lower(A)
    elif kind is StorageKind.UPPER_TRIANGULAR:
        data = _pack_upper(A)
    elif kind is StorageKind.SPARSE:
        data = _pack_csr(A)
    else:
        raise UnsupportedVariantError(kind)

    return MatrixStorage(kind=kind, size=n, property=property, data=data)
