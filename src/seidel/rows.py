"""
Seidel Rows: uniform row access over every storage kind.

Three reads are supported whatever the representation:

  get_row               full row, zero filled
  get_diagonal          a[i, i]
  off_diagonal_entries  (cols, values) of off-diagonal nonzeros, ascending

off_diagonal_entries is the only path the solver's inner loop uses, so
entries outside the stored pattern are never visited.
"""

import numpy as np

from seidel.exceptions import UnsupportedVariantError
from seidel.storage import StorageKind, lower_row_start, upper_row_start

_EMPTY_COLS = np.empty(0, dtype=np.int64)
_EMPTY_VALS = np.empty(0, dtype=np.float64)


def _band_start(i, bandwidth):
    return max(0, i - bandwidth)


def get_row(storage, i):
    """
    Reconstruct row i of a stored matrix.

    Parameters
    ----------
    storage : MatrixStorage
        Stored matrix.
    i : int
        Row index.

    Returns
    -------
    numpy.ndarray
        Length-n float64 row, zeros outside the stored entries.
    """
    kind, data, n = storage.kind, storage.data, storage.size
    row = np.zeros(n, dtype=np.float64)

    if kind is StorageKind.DENSE:
        row[:] = data[i]
    elif kind is StorageKind.DIAGONAL:
        row[i] = data[i]
    elif kind is StorageKind.BAND:
        start = _band_start(i, data.bandwidth)
        band_row = data.rows[i]
        row[start:start + band_row.size] = band_row
    elif kind is StorageKind.LOWER_TRIANGULAR:
        offset = lower_row_start(i)
        row[:i + 1] = data[offset:offset + i + 1]
    elif kind is StorageKind.UPPER_TRIANGULAR:
        offset = upper_row_start(n, i)
        row[i:] = data[offset:offset + n - i]
    elif kind is StorageKind.SPARSE:
        lo, hi = data.row_offsets[i], data.row_offsets[i + 1]
        row[data.col_indices[lo:hi]] = data.values[lo:hi]
    else:
        raise UnsupportedVariantError(kind)
    return row


def get_diagonal(storage, i):
    """Diagonal entry a[i, i]; a row-local scan for sparse storage."""
    kind, data, n = storage.kind, storage.data, storage.size

    if kind is StorageKind.DENSE:
        return float(data[i, i])
    if kind is StorageKind.DIAGONAL:
        return float(data[i])
    if kind is StorageKind.BAND:
        return float(data.rows[i][i - _band_start(i, data.bandwidth)])
    if kind is StorageKind.LOWER_TRIANGULAR:
        return float(data[lower_row_start(i) + i])
    if kind is StorageKind.UPPER_TRIANGULAR:
        return float(data[upper_row_start(n, i)])
    if kind is StorageKind.SPARSE:
        lo, hi = data.row_offsets[i], data.row_offsets[i + 1]
        for idx in range(lo, hi):
            if data.col_indices[idx] == i:
                return float(data.values[idx])
        # not stored means zero
        return 0.0
    raise UnsupportedVariantError(kind)


def _nonzero_excluding(cols, vals, i):
    keep = (vals != 0) & (cols != i)
    return cols[keep], vals[keep]


def off_diagonal_entries(storage, i):
    """
    Off-diagonal nonzero entries of row i.

    Returns
    -------
    tuple of numpy.ndarray
        (cols, values), cols strictly ascending and never equal to i.
    """
    kind, data, n = storage.kind, storage.data, storage.size

    if kind is StorageKind.DENSE:
        return _nonzero_excluding(np.arange(n, dtype=np.int64), data[i], i)
    if kind is StorageKind.DIAGONAL:
        return _EMPTY_COLS, _EMPTY_VALS
    if kind is StorageKind.BAND:
        band_row = data.rows[i]
        start = _band_start(i, data.bandwidth)
        cols = np.arange(start, start + band_row.size, dtype=np.int64)
        return _nonzero_excluding(cols, band_row, i)
    if kind is StorageKind.LOWER_TRIANGULAR:
        offset = lower_row_start(i)
        return _nonzero_excluding(
            np.arange(i, dtype=np.int64), data[offset:offset + i], i)
    if kind is StorageKind.UPPER_TRIANGULAR:
        # skip the diagonal, which is first in the packed row
        offset = upper_row_start(n, i) + 1
        return _nonzero_excluding(
            np.arange(i + 1, n, dtype=np.int64), data[offset:offset + n - i - 1], i)
    if kind is StorageKind.SPARSE:
        lo, hi = data.row_offsets[i], data.row_offsets[i + 1]
        return _nonzero_excluding(data.col_indices[lo:hi], data.values[lo:hi], i)
    raise UnsupportedVariantError(kind)


def to_dense(storage):
    """Reconstruct the full n x n matrix."""
    n = storage.size
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)
    return np.vstack([get_row(storage, i) for i in range(n)])
