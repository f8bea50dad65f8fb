"""
Gauss-Seidel on a random (or loaded) system
============================================

Generates a random system with the requested property, or loads one from
a JSON file with "matrix" and "vector" arrays, solves it and saves the
solution plus per-sweep errors to results/.

Usage:
  pip install -e .
  python examples/solve_random_system.py                 # random 50 x 50, DD
  python examples/solve_random_system.py system.json     # from file
"""

import json
import os
import sys
import time

import numpy as np

import seidel
from seidel import GaussSeidelSolver

# ── Config ──
SIZE = 50
MAX_VALUE = 15
PROPERTY = "diagonally-dominant"
TOLERANCE = 1e-10
MAX_ITERATIONS = 5000
SEED = 42
RESULTS_DIR = "results"
os.makedirs(RESULTS_DIR, exist_ok=True)

# ── Build system ──
if len(sys.argv) > 1:
    print(f"Loading {sys.argv[1]}...")
    solver = GaussSeidelSolver.from_json(sys.argv[1])
else:
    print(f"Random {SIZE} x {SIZE} system ({PROPERTY}, seed={SEED})...")
    A = GaussSeidelSolver.random_matrix(SIZE, MAX_VALUE, PROPERTY, seed=SEED)
    b = GaussSeidelSolver.random_vector(SIZE, MAX_VALUE, seed=SEED + 1)
    solver = GaussSeidelSolver(A, b)

report = seidel.detect_matrix(solver.get_full_matrix())
print(f"  Storage: {report['storage']} ({report['reason']})")
print(f"  Property: {report['property']}")
print(f"  Compression: {report['compression']}x")

# ── Solve ──
print(f"\n{'='*70}")
print(f"  Gauss-Seidel, tol={TOLERANCE:g}, max_iter={MAX_ITERATIONS}")
print(f"{'='*70}")

t0 = time.time()
x = solver.solve(TOLERANCE, MAX_ITERATIONS, verbose=True)
total_time = time.time() - t0
history = solver.get_iteration_history()

# ── Save results ──
result_save = {
    "state": solver.get_solver_state().value,
    "storage": report["storage"],
    "property": report["property"],
    "sweeps": len(history),
    "residual": solver.residual(),
    "errors": [rec.error for rec in history],
    "solution": x.tolist(),
    "time_seconds": total_time,
}

results_file = os.path.join(RESULTS_DIR, f"gauss_seidel_n{solver.size}.json")
with open(results_file, 'w') as f:
    json.dump(result_save, f, indent=2)
print(f"\nResults saved to {results_file}")

# ── Summary ──
print(f"\n{'='*70}")
print(f"  RESULT: {solver.get_solver_state().value.upper()}")
print(f"  Sweeps: {len(history)}")
print(f"  Residual: {solver.residual():.2e}")
print(f"  max|x|: {np.max(np.abs(x)):.4f}")
print(f"  Time: {total_time:.3f}s")
print(f"{'='*70}")
