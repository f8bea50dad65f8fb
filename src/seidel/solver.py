"""
Seidel Solver: Gauss-Seidel iteration over structure-aware storage.

The matrix is classified and packed once at construction. Each sweep
updates x in place, row by row, reading only the stored off-diagonal
nonzeros of each row, so later rows of a sweep already see the new
values of earlier rows.

Stopping:
  - step difference max|x - x_old| < tolerance          -> solved
  - ||b - Ax||_inf <= tolerance * ||b||_inf              -> solved (residual_check)
  - max_iterations exhausted                            -> did-not-converge,
    the last iterate is still returned

Usage:
    import seidel
    solver = seidel.GaussSeidelSolver(A, b)
    x = solver.solve(tolerance=1e-8, max_iterations=1000)
    solver.get_solver_state()        # SolverState.SOLVED
    solver.get_iteration_history()   # (IterationRecord, ...)
"""

import json
import os
import sys
import time
import warnings
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

import numpy as np

from seidel import generators
from seidel.convergence import guarantees_convergence, make_diagonally_dominant
from seidel.detector import store_matrix
from seidel.exceptions import (
    ConstructionError, ConvergenceWarning, MalformedInputError,
    SingularPivotError, ValidationError,
)
from seidel.rows import get_diagonal, off_diagonal_entries, to_dense
from seidel.storage import MatrixStorage, MatrixProperty, StorageKind, read_only
from seidel.validation import (
    check_initial_guess, check_solve_options, check_square_matrix, check_system,
)

DEFAULT_TOLERANCE = 1e-8
DEFAULT_MAX_ITERATIONS = 1000

_REQUIRED_FIELDS = ("matrix", "vector")


class SolverState(Enum):
    NOT_YET = "not-yet"
    SOLVED = "solved"
    DID_NOT_CONVERGE = "did-not-converge"


@dataclass(frozen=True, eq=False)
class IterationRecord:
    """One completed sweep.

    Fields
    ------
    old : numpy.ndarray
        Iterate before the sweep, read-only.
    new : numpy.ndarray
        Iterate after the sweep, read-only.
    error : float
        max |new - old|.
    residual : float
        ||b - A new||_inf.
    """
    old: np.ndarray
    new: np.ndarray
    error: float
    residual: float


def _empty_storage():
    return MatrixStorage(kind=StorageKind.DENSE, size=0,
                         property=MatrixProperty.NORMAL,
                         data=read_only(np.zeros((0, 0), dtype=np.float64)))


class GaussSeidelSolver:
    """
    Solve Ax = b with Gauss-Seidel iteration.

    Parameters
    ----------
    matrix : array_like, optional
        Square coefficient matrix.
    vector : array_like, optional
        Right-hand side, same length as the matrix.
    archive : bool
        Keep an IterationRecord per sweep. Default True.

    Omitting both matrix and vector gives an empty (n = 0) solver.

    Raises
    ------
    ConstructionError
        Size mismatch, empty, ragged, non-square or non-numeric input.

    Examples
    --------
    >>> solver = GaussSeidelSolver([[4, 1], [1, 3]], [1, 2])
    >>> solver.storage.kind
    <StorageKind.DENSE: 'dense'>
    >>> x = solver.solve(1e-10, 100)
    >>> solver.get_solver_state()
    <SolverState.SOLVED: 'solved'>
    """

    random_matrix = staticmethod(generators.random_matrix)
    random_vector = staticmethod(generators.random_vector)

    def __init__(self, matrix=None, vector=None, archive=True):
        if matrix is None and vector is None:
            self._storage = _empty_storage()
            self._vector = np.zeros(0, dtype=np.float64)
        elif matrix is None or vector is None:
            missing = "matrix" if matrix is None else "vector"
            raise ConstructionError(
                f"Both matrix and vector are required, {missing} is missing")
        else:
            A, b = check_system(matrix, vector)
            self._vector = b
            self._storage = store_matrix(A)

        self._archive = [] if archive else None
        self._state = SolverState.NOT_YET
        self._solution = None

    # ------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------

    @staticmethod
    def classify_and_store(matrix):
        """Classify a square matrix and return its packed MatrixStorage."""
        return store_matrix(check_square_matrix(matrix))

    @property
    def storage(self):
        return self._storage

    @property
    def matrix_property(self):
        return self._storage.property

    @property
    def size(self):
        return self._storage.size

    @property
    def vector(self):
        return self._vector.copy()

    @property
    def solution(self):
        """Last iterate returned by solve(), or None."""
        return None if self._solution is None else self._solution.copy()

    @property
    def is_archiving(self):
        return self._archive is not None

    def get_iteration_history(self):
        """Records of the latest solve(), or None if archiving is off."""
        if self._archive is None:
            return None
        return tuple(self._archive)

    def get_solver_state(self):
        return self._state

    def get_full_matrix(self):
        """Dense n x n reconstruction of the stored matrix."""
        return to_dense(self._storage)

    def residual(self, x=None):
        """
        Infinity norm of b - Ax.

        Parameters
        ----------
        x : array_like, optional
            Candidate solution. Defaults to the last solve() result.
        """
        if x is None:
            if self._solution is None:
                raise ValidationError("residual: no solution yet, call solve() first")
            x = self._solution
        else:
            x = check_initial_guess(x, self.size, name="x")
        entries = self._row_entries()
        return self._residual_norm(entries, self._diagonal(), x)

    def to_dict(self):
        """Plain {"matrix", "vector"} lists, the format from_json reads."""
        return {
            "matrix": self.get_full_matrix().tolist(),
            "vector": self._vector.tolist(),
        }

    # ------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------

    def _diagonal(self):
        n = self.size
        return np.array([get_diagonal(self._storage, i) for i in range(n)],
                        dtype=np.float64)

    def _row_entries(self):
        return [off_diagonal_entries(self._storage, i) for i in range(self.size)]

    def _residual_norm(self, entries, diag, x):
        if self.size == 0:
            return 0.0
        b = self._vector
        r = np.array([b[i] - diag[i] * x[i] - vals @ x[cols]
                      for i, (cols, vals) in enumerate(entries)])
        return float(np.max(np.abs(r)))

    def solve(self, tolerance=DEFAULT_TOLERANCE,
              max_iterations=DEFAULT_MAX_ITERATIONS, initial_guess=None,
              residual_check=True, verbose=False):
        """
        Run Gauss-Seidel sweeps until convergence or the iteration limit.

        Parameters
        ----------
        tolerance : float
            Stop once max|x - x_old| falls below this.
        max_iterations : int
            Upper bound on sweeps.
        initial_guess : array_like, optional
            Starting iterate, zeros by default. Copied, never modified.
        residual_check : bool
            Also stop when ||b - Ax||_inf <= tolerance * ||b||_inf, a test
            relative to the right-hand side. Default True.
        verbose : bool
            Print setup and result lines.

        Returns
        -------
        numpy.ndarray
            Last iterate. Check get_solver_state() to tell a converged
            result from a best-effort one.

        Raises
        ------
        SingularPivotError
            A diagonal entry is zero. No sweep is run.
        """
        check_solve_options(tolerance, max_iterations)
        n = self.size
        storage = self._storage

        diag = self._diagonal()
        zero_rows = np.flatnonzero(diag == 0)
        if zero_rows.size:
            raise SingularPivotError(int(zero_rows[0]))

        if initial_guess is None:
            x = np.zeros(n, dtype=np.float64)
        else:
            x = check_initial_guess(initial_guess, n)

        if not guarantees_convergence(storage.property):
            warnings.warn("Convergence is not guaranteed for this matrix.",
                          ConvergenceWarning, stacklevel=2)

        if verbose:
            print(f"  [Seidel] {n:,} x {n:,}, storage={storage.kind.value}, "
                  f"property={storage.property.value}, tol={tolerance:g}, "
                  f"max_iter={max_iterations}")
            sys.stdout.flush()

        entries = self._row_entries()
        b = self._vector
        b_scale = float(np.max(np.abs(b))) if n else 0.0
        residual_limit = tolerance * max(b_scale, np.finfo(np.float64).tiny)
        if self._archive is not None:
            self._archive = []

        t0 = time.time()
        sweeps = 0
        error = 0.0
        converged = False

        for sweeps in range(1, int(max_iterations) + 1):
            x_old = x.copy()
            for i, (cols, vals) in enumerate(entries):
                x[i] = (b[i] - vals @ x[cols]) / diag[i]

            error = float(np.max(np.abs(x - x_old))) if n else 0.0
            res = self._residual_norm(entries, diag, x)

            if self._archive is not None:
                self._archive.append(IterationRecord(
                    old=read_only(x_old), new=read_only(x.copy()),
                    error=error, residual=res))

            if error < tolerance or (residual_check and res <= residual_limit):
                converged = True
                break

        elapsed = time.time() - t0

        if converged:
            self._state = SolverState.SOLVED
        else:
            self._state = SolverState.DID_NOT_CONVERGE
            warnings.warn(
                f"Gauss-Seidel method did not converge within {max_iterations} iterations.",
                ConvergenceWarning, stacklevel=2)

        if verbose:
            print(f"  [Seidel] {self._state.value.upper()} after {sweeps} sweeps, "
                  f"error={error:.2e} [{elapsed:.3f}s]")
            sys.stdout.flush()

        self._solution = x.copy()
        return x

    def make_diagonally_dominant(self):
        """
        Reorder rows of the system to make it diagonally dominant.

        Re-stores the permuted matrix and vector on success. solve() never
        calls this.

        Returns
        -------
        bool
            True if a suitable permutation was found and applied.
        """
        if self.size == 0:
            return False
        found = make_diagonally_dominant(self.get_full_matrix(), self._vector)
        if found is None:
            return False
        A, b, _ = found
        self._storage = store_matrix(A)
        self._vector = b
        return True

    # ------------------------------------------------------------
    # Structured input
    # ------------------------------------------------------------

    @classmethod
    def from_json(cls, source, archive=True):
        """
        Build a solver from JSON with "matrix" and "vector" arrays.

        Parameters
        ----------
        source : str, os.PathLike, file object or Mapping
            A path to a JSON file, a JSON string, an open file, or an
            already-parsed mapping.
        archive : bool
            Passed to the constructor.

        Raises
        ------
        MalformedInputError
            Unreadable or invalid JSON, missing properties, non-array
            fields, or a system the constructor rejects.
        """
        try:
            data = _read_payload(source)
        except (OSError, ValueError, TypeError) as e:
            raise MalformedInputError(f"Failed to import from JSON: {e}") from e

        if not isinstance(data, Mapping):
            raise MalformedInputError(
                f"Failed to import from JSON: expected an object, got {type(data).__name__}")

        missing = [k for k in _REQUIRED_FIELDS if data.get(k) is None]
        if missing:
            raise MalformedInputError(
                'Failed to import from JSON: JSON data must contain "matrix" '
                'and "vector" properties.', missing=missing)

        matrix, vector = data["matrix"], data["vector"]
        if not all(isinstance(v, (list, tuple, np.ndarray)) for v in (matrix, vector)):
            raise MalformedInputError(
                'Failed to import from JSON: "matrix" and "vector" must be arrays.')

        try:
            return cls(matrix, vector, archive=archive)
        except ConstructionError as e:
            raise MalformedInputError(f"Failed to import from JSON: {e}") from e

    def __repr__(self):
        return (f"GaussSeidelSolver(n={self.size}, storage={self._storage.kind.value}, "
                f"property={self._storage.property.value}, state={self._state.value})")


def _read_payload(source):
    """Parse JSON from a mapping, path, file object or string."""
    if isinstance(source, Mapping):
        return source
    if isinstance(source, os.PathLike):
        with open(source, encoding="utf-8") as f:
            return json.load(f)
    if hasattr(source, "read"):
        return json.load(source)
    if isinstance(source, (bytes, bytearray)):
        return json.loads(source)
    if isinstance(source, str):
        if os.path.isfile(source):
            with open(source, encoding="utf-8") as f:
                return json.load(f)
        return json.loads(source)
    raise TypeError(f"unsupported input type {type(source).__name__}")


def solve(A, b, tolerance=DEFAULT_TOLERANCE, max_iterations=DEFAULT_MAX_ITERATIONS,
          initial_guess=None, verbose=False):
    """
    Solve Ax = b with Gauss-Seidel in one call.

    Parameters
    ----------
    A : array_like
        Square coefficient matrix.
    b : array_like
        Right-hand side vector.
    tolerance, max_iterations, initial_guess
        See GaussSeidelSolver.solve.
    verbose : bool
        Print storage choice and result.

    Returns
    -------
    numpy.ndarray
        Solution vector x (best effort if the iteration did not converge).
    """
    solver = GaussSeidelSolver(A, b, archive=False)
    return solver.solve(tolerance, max_iterations, initial_guess=initial_guess,
                        verbose=verbose)
