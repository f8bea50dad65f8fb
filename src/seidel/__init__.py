"""
Seidel - Structure-aware Gauss-Seidel linear solver
====================================================

Auto-detection of matrix structure + compact storage + Gauss-Seidel
iteration with per-sweep diagnostics.

Quick start:
    import seidel

    # Detect matrix structure
    report = seidel.detect_matrix(A)

    # Solve linear system
    x = seidel.solve(A, b)

    # Full control: state, history, reconstructed matrix
    solver = seidel.GaussSeidelSolver(A, b)
    x = solver.solve(tolerance=1e-8, max_iterations=1000)
    solver.get_solver_state()
    solver.get_iteration_history()

    # From a JSON file with "matrix" and "vector" arrays
    solver = seidel.GaussSeidelSolver.from_json("system.json")

License: MIT
"""

__version__ = "0.1.0"

from seidel.detector import classify_matrix, detect_matrix, store_matrix
from seidel.convergence import guarantees_convergence, make_diagonally_dominant
from seidel.exceptions import (
    SeidelError, ValidationError, ConstructionError, DimensionError,
    MalformedInputError, NumericalError, SingularPivotError,
    UnsupportedVariantError, ConvergenceWarning,
)
from seidel.generators import random_matrix, random_vector
from seidel.solver import GaussSeidelSolver, IterationRecord, SolverState, solve
from seidel.storage import MatrixProperty, MatrixStorage, StorageKind

__all__ = [
    "detect_matrix", "classify_matrix", "store_matrix", "solve",
    "GaussSeidelSolver", "IterationRecord", "SolverState",
    "StorageKind", "MatrixProperty", "MatrixStorage",
    "guarantees_convergence", "make_diagonally_dominant",
    "random_matrix", "random_vector",
    "SeidelError", "ValidationError", "ConstructionError", "DimensionError",
    "MalformedInputError", "NumericalError", "SingularPivotError",
    "UnsupportedVariantError", "ConvergenceWarning",
]
