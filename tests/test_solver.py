"""Tests for GaussSeidelSolver: construction, sweeps, state and input."""
import json
import warnings

import numpy as np
import pytest

from seidel import (
    GaussSeidelSolver, SolverState, StorageKind, MatrixProperty,
    ConstructionError, DimensionError, MalformedInputError,
    SingularPivotError, ValidationError, ConvergenceWarning,
)
from seidel.detector import is_symmetric, is_positive_definite, detect_property


A_DD = np.array([[4.0, 1.0], [1.0, 3.0]])
B_DD = np.array([1.0, 2.0])


# ============================================================
# Construction
# ============================================================

class TestConstruction:

    def test_stores_classified_matrix(self):
        solver = GaussSeidelSolver(np.eye(3), [1, 2, 3])
        assert solver.size == 3
        assert solver.storage.kind is StorageKind.DIAGONAL
        assert solver.matrix_property is MatrixProperty.DIAGONALLY_DOMINANT
        assert solver.get_solver_state() is SolverState.NOT_YET

    def test_incompatible_sizes(self):
        with pytest.raises(ConstructionError, match="Incompatible"):
            GaussSeidelSolver(A_DD, [1.0, 2.0, 3.0])

    def test_non_square(self):
        with pytest.raises(ConstructionError, match="not square"):
            GaussSeidelSolver([[1, 2, 3], [4, 5, 6]], [1, 2])

    def test_empty_matrix(self):
        with pytest.raises(ConstructionError):
            GaussSeidelSolver([], [])

    def test_ragged_matrix(self):
        with pytest.raises(ConstructionError):
            GaussSeidelSolver([[1, 2], [3]], [1, 2])

    def test_non_numeric(self):
        with pytest.raises(ConstructionError):
            GaussSeidelSolver([["a", "b"], ["c", "d"]], [1, 2])

    def test_non_finite(self):
        with pytest.raises(ConstructionError, match="non-finite"):
            GaussSeidelSolver([[1, np.nan], [0, 1]], [1, 2])

    def test_only_one_argument(self):
        with pytest.raises(ConstructionError, match="vector is missing"):
            GaussSeidelSolver(A_DD)

    def test_construction_error_is_value_error(self):
        with pytest.raises(ValueError):
            GaussSeidelSolver(A_DD, [1.0])

    def test_empty_solver(self):
        solver = GaussSeidelSolver()
        assert solver.size == 0
        assert solver.get_full_matrix().shape == (0, 0)
        assert solver.get_iteration_history() == ()

    def test_owns_copies(self):
        A = A_DD.copy()
        b = B_DD.copy()
        solver = GaussSeidelSolver(A, b)
        A[0, 0] = 100.0
        b[0] = 100.0
        assert solver.get_full_matrix()[0, 0] == 4.0
        assert solver.vector[0] == 1.0

    def test_classify_and_store(self):
        stored = GaussSeidelSolver.classify_and_store([[1, 0], [2, 3]])
        assert stored.kind is StorageKind.LOWER_TRIANGULAR

    @pytest.mark.parametrize("A", [
        np.diag([2.0, 3.0, 4.0]),
        [[2, 0, 0], [1, 4, 0], [3, 1, 5]],
        [[2, 1, 1], [0, 3, 1], [0, 0, 4]],
        [[4, 1, 0, 0], [1, 4, 1, 0], [0, 1, 4, 1], [0, 0, 1, 4]],
        [[4, 0, 0, 1], [0, 5, 0, 0], [0, 0, 6, 0], [1, 0, 0, 7]],
        [[1, 2], [3, 4]],
    ])
    def test_full_matrix_round_trip(self, A):
        A = np.asarray(A, dtype=float)
        solver = GaussSeidelSolver(A, np.ones(A.shape[0]))
        assert np.array_equal(solver.get_full_matrix(), A)

    def test_random_round_trip(self):
        A = GaussSeidelSolver.random_matrix(9, property="normal", seed=11)
        solver = GaussSeidelSolver(A, np.ones(9))
        assert np.allclose(solver.get_full_matrix(), A)


# ============================================================
# Solving
# ============================================================

class TestSolve:

    def test_identity_one_sweep(self):
        b = np.array([1.0, -2.0, 3.0, 0.5])
        solver = GaussSeidelSolver(np.eye(4), b)
        x = solver.solve()
        assert np.array_equal(x, b)
        assert solver.get_solver_state() is SolverState.SOLVED
        history = solver.get_iteration_history()
        assert len(history) == 1
        assert history[0].residual == 0.0
        assert solver.residual() == 0.0

    def test_small_scale_system_runs_to_step_criterion(self):
        """Residual gate scales with b, so tiny coefficients do not stop early."""
        A = 1e-10 * A_DD
        b = 1e-10 * B_DD
        solver = GaussSeidelSolver(A, b)
        x = solver.solve()
        assert solver.get_solver_state() is SolverState.SOLVED
        assert len(solver.get_iteration_history()) > 1
        assert np.allclose(x, np.linalg.solve(A_DD, B_DD))

    def test_scaling_system_keeps_sweep_count(self):
        # a power of two scales every floating point step exactly
        scale = 2.0 ** -34
        unit = GaussSeidelSolver(A_DD, B_DD)
        x_unit = unit.solve(1e-10, 100)
        scaled = GaussSeidelSolver(scale * A_DD, scale * B_DD)
        x_scaled = scaled.solve(1e-10, 100)
        assert len(scaled.get_iteration_history()) == len(unit.get_iteration_history())
        assert np.array_equal(x_scaled, x_unit)

    def test_diagonally_dominant_example(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        x = solver.solve(1e-6, 100)
        assert solver.get_solver_state() is SolverState.SOLVED
        assert np.max(np.abs(A_DD @ x - B_DD)) < 1e-5

    def test_zero_pivot_before_any_sweep(self):
        solver = GaussSeidelSolver([[0, 1], [1, 0]], [1, 1])
        with pytest.raises(SingularPivotError) as exc:
            solver.solve()
        assert exc.value.row == 0
        assert "row 0" in str(exc.value)
        assert solver.get_iteration_history() == ()
        assert solver.get_solver_state() is SolverState.NOT_YET

    def test_zero_pivot_names_first_row(self):
        A = np.array([[1.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        with pytest.raises(SingularPivotError) as exc:
            GaussSeidelSolver(A, np.ones(3)).solve()
        assert exc.value.row == 1

    def test_single_sweep_not_converged(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.warns(ConvergenceWarning, match="did not converge"):
            x = solver.solve(1e-8, 1)
        assert solver.get_solver_state() is SolverState.DID_NOT_CONVERGE
        assert len(solver.get_iteration_history()) == 1
        # x1 uses the already updated x0: (2 - 0.25) / 3, not 2 / 3
        assert np.allclose(x, [0.25, 1.75 / 3])

    def test_history_records(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        solver.solve(1e-10, 100)
        history = solver.get_iteration_history()
        assert 1 < len(history) <= 100
        assert np.array_equal(history[0].old, np.zeros(2))
        for prev, cur in zip(history, history[1:]):
            assert np.array_equal(prev.new, cur.old)
        for rec in history:
            assert rec.error == pytest.approx(np.max(np.abs(rec.new - rec.old)))
        # residual gate is relative to max|b| = 2
        for rec in history[:-1]:
            assert rec.error >= 1e-10 and rec.residual > 2e-10
        last = history[-1]
        assert last.error < 1e-10 or last.residual <= 2e-10

    def test_history_snapshots_are_read_only(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        solver.solve(1e-10, 100)
        rec = solver.get_iteration_history()[0]
        with pytest.raises(ValueError):
            rec.new[0] = 5.0
        with pytest.raises(ValueError):
            rec.old[0] = 5.0
        assert np.array_equal(rec.old, np.zeros(2))

    def test_archive_length_matches_sweeps_without_residual_gate(self):
        # count sweeps of a plain two-row Gauss-Seidel loop
        x = np.zeros(2)
        for expected in range(1, 101):
            x_old = x.copy()
            x[0] = (B_DD[0] - A_DD[0, 1] * x[1]) / A_DD[0, 0]
            x[1] = (B_DD[1] - A_DD[1, 0] * x[0]) / A_DD[1, 1]
            if np.max(np.abs(x - x_old)) < 1e-10:
                break

        solver = GaussSeidelSolver(A_DD, B_DD)
        solver.solve(1e-10, 100, residual_check=False)
        history = solver.get_iteration_history()
        assert len(history) == expected
        assert history[-1].error < 1e-10
        assert all(rec.error >= 1e-10 for rec in history[:-1])

    def test_resolve_resets_archive(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.warns(ConvergenceWarning):
            solver.solve(1e-12, 1)
        assert solver.get_solver_state() is SolverState.DID_NOT_CONVERGE

        solver.solve(1e-12, 200)
        history = solver.get_iteration_history()
        assert solver.get_solver_state() is SolverState.SOLVED
        assert np.array_equal(history[0].old, np.zeros(2))
        assert len(history) > 1

    def test_archive_disabled(self):
        solver = GaussSeidelSolver(A_DD, B_DD, archive=False)
        assert not solver.is_archiving
        solver.solve()
        assert solver.get_iteration_history() is None
        assert solver.get_solver_state() is SolverState.SOLVED

    def test_initial_guess_used_and_not_modified(self):
        exact = np.linalg.solve(A_DD, B_DD)
        guess = exact.copy()
        solver = GaussSeidelSolver(A_DD, B_DD)
        solver.solve(1e-8, 10, initial_guess=guess)
        assert np.array_equal(guess, exact)
        assert len(solver.get_iteration_history()) == 1

    def test_initial_guess_wrong_length(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.raises(DimensionError):
            solver.solve(initial_guess=[0.0, 0.0, 0.0])

    def test_invalid_options(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.raises(ValidationError):
            solver.solve(tolerance=0)
        with pytest.raises(ValidationError):
            solver.solve(max_iterations=0)

    @pytest.mark.parametrize("max_iterations", [float("inf"), None, 10.5, True, "10"])
    def test_invalid_max_iterations(self, max_iterations):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.raises(ValidationError, match="max_iterations"):
            solver.solve(max_iterations=max_iterations)
        assert solver.get_solver_state() is SolverState.NOT_YET

    @pytest.mark.parametrize("tolerance", [None, float("nan"), float("inf"), -1e-8, "1e-8"])
    def test_invalid_tolerance(self, tolerance):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with pytest.raises(ValidationError, match="tolerance"):
            solver.solve(tolerance=tolerance)

    def test_numpy_integer_iteration_limit(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        solver.solve(1e-10, np.int64(100))
        assert solver.get_solver_state() is SolverState.SOLVED

    def test_no_warning_when_convergence_guaranteed(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            solver.solve()

    def test_warning_when_not_guaranteed(self):
        solver = GaussSeidelSolver([[1, 2], [3, 4]], [1, 1])
        with pytest.warns(ConvergenceWarning, match="not guaranteed"):
            solver.solve(1e-8, 5)
        assert solver.get_solver_state() is SolverState.DID_NOT_CONVERGE
        assert len(solver.get_iteration_history()) == 5

    def test_spd_converges(self):
        A = np.array([[1.0, 2.0], [2.0, 5.0]])
        solver = GaussSeidelSolver(A, [1.0, 1.0])
        assert solver.matrix_property is MatrixProperty.SYMMETRIC_POSITIVE_DEFINITE
        x = solver.solve(1e-12, 1000)
        assert solver.get_solver_state() is SolverState.SOLVED
        assert np.allclose(x, [3.0, -1.0], atol=1e-8)

    def test_band_solve(self):
        A = np.array([[4, 1, 0, 0], [1, 4, 1, 0], [0, 1, 4, 1], [0, 0, 1, 4]], dtype=float)
        x_true = np.array([1.0, 2.0, 3.0, 4.0])
        solver = GaussSeidelSolver(A, A @ x_true)
        assert solver.storage.kind is StorageKind.BAND
        assert np.allclose(solver.solve(1e-12), x_true)

    def test_lower_triangular_is_one_sweep(self):
        """A sweep on a lower triangular system is forward substitution."""
        A = np.array([[2.0, 0, 0], [1, 4, 0], [3, 1, 5]])
        b = np.array([2.0, 9.0, 20.0])
        solver = GaussSeidelSolver(A, b)
        x = solver.solve()
        assert len(solver.get_iteration_history()) == 1
        assert np.allclose(x, np.linalg.solve(A, b))

    def test_upper_triangular(self):
        A = np.array([[2.0, 1, 1], [0, 3, 1], [0, 0, 4]])
        b = np.array([4.0, 4.0, 4.0])
        solver = GaussSeidelSolver(A, b)
        x = solver.solve(1e-12)
        assert solver.get_solver_state() is SolverState.SOLVED
        assert np.allclose(x, np.linalg.solve(A, b))

    def test_random_dd_system(self):
        A = GaussSeidelSolver.random_matrix(12, seed=5)
        b = GaussSeidelSolver.random_vector(12, seed=6)
        solver = GaussSeidelSolver(A, b)
        x = solver.solve(1e-12, 2000)
        assert solver.get_solver_state() is SolverState.SOLVED
        assert np.allclose(A @ x, b, atol=1e-8)

    def test_deterministic(self):
        A = GaussSeidelSolver.random_matrix(6, seed=1)
        b = GaussSeidelSolver.random_vector(6, seed=2)
        x1 = GaussSeidelSolver(A, b).solve(1e-10)
        x2 = GaussSeidelSolver(A, b).solve(1e-10)
        assert np.array_equal(x1, x2)

    def test_residual_of_candidate(self):
        solver = GaussSeidelSolver(A_DD, B_DD)
        assert solver.residual([0.0, 0.0]) == 2.0
        with pytest.raises(ValidationError):
            solver.residual()


# ============================================================
# Row permutation
# ============================================================

class TestDiagonalDominance:

    def test_permutes_rows(self):
        solver = GaussSeidelSolver([[1, 5], [4, 1]], [1, 2])
        assert solver.matrix_property is MatrixProperty.NORMAL
        assert solver.make_diagonally_dominant()
        assert np.array_equal(solver.get_full_matrix(), [[4, 1], [1, 5]])
        assert solver.vector.tolist() == [2.0, 1.0]
        assert solver.matrix_property is MatrixProperty.DIAGONALLY_DOMINANT

    def test_no_permutation_found(self):
        A = np.ones((3, 3))
        solver = GaussSeidelSolver(A, [1, 2, 3])
        assert not solver.make_diagonally_dominant()
        assert solver.vector.tolist() == [1.0, 2.0, 3.0]


# ============================================================
# Structured input
# ============================================================

class TestFromJson:

    PAYLOAD = {"matrix": [[4, 1], [1, 3]], "vector": [1, 2]}

    def _check(self, solver):
        assert np.array_equal(solver.get_full_matrix(), A_DD)
        assert solver.vector.tolist() == [1.0, 2.0]

    def test_from_mapping(self):
        self._check(GaussSeidelSolver.from_json(self.PAYLOAD))

    def test_from_string(self):
        self._check(GaussSeidelSolver.from_json(json.dumps(self.PAYLOAD)))

    def test_from_path(self, tmp_path):
        path = tmp_path / "system.json"
        path.write_text(json.dumps(self.PAYLOAD))
        self._check(GaussSeidelSolver.from_json(path))
        self._check(GaussSeidelSolver.from_json(str(path)))

    def test_from_file_object(self, tmp_path):
        path = tmp_path / "system.json"
        path.write_text(json.dumps(self.PAYLOAD))
        with open(path) as f:
            self._check(GaussSeidelSolver.from_json(f))

    def test_archive_flag(self):
        solver = GaussSeidelSolver.from_json(self.PAYLOAD, archive=False)
        assert not solver.is_archiving

    def test_missing_properties(self):
        with pytest.raises(MalformedInputError, match="must contain") as exc:
            GaussSeidelSolver.from_json({"matrix": [[1]]})
        assert exc.value.missing == ("vector",)

    def test_invalid_json(self):
        with pytest.raises(MalformedInputError, match="Failed to import") as exc:
            GaussSeidelSolver.from_json("not json")
        assert isinstance(exc.value.__cause__, ValueError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedInputError):
            GaussSeidelSolver.from_json(tmp_path / "nope.json")

    def test_not_an_object(self):
        with pytest.raises(MalformedInputError, match="expected an object"):
            GaussSeidelSolver.from_json("[1, 2, 3]")

    def test_fields_not_arrays(self):
        with pytest.raises(MalformedInputError, match="must be arrays"):
            GaussSeidelSolver.from_json({"matrix": 5, "vector": [1]})

    def test_construction_failure_is_wrapped(self):
        with pytest.raises(MalformedInputError, match="Incompatible") as exc:
            GaussSeidelSolver.from_json({"matrix": [[1, 2]], "vector": [1, 2]})
        assert isinstance(exc.value.__cause__, ConstructionError)

    def test_to_dict_round_trip(self):
        solver = GaussSeidelSolver([[4, 0, 0, 1], [0, 5, 0, 0], [0, 0, 6, 0], [1, 0, 0, 7]],
                                   [1, 2, 3, 4])
        again = GaussSeidelSolver.from_json(json.dumps(solver.to_dict()))
        assert np.array_equal(again.get_full_matrix(), solver.get_full_matrix())
        assert again.storage.kind is StorageKind.SPARSE


# ============================================================
# Generators
# ============================================================

class TestGenerators:

    def test_diagonally_dominant(self):
        A = GaussSeidelSolver.random_matrix(8, seed=3)
        assert A.shape == (8, 8)
        assert detect_property(A) is MatrixProperty.DIAGONALLY_DOMINANT

    def test_symmetric_positive_definite(self):
        A = GaussSeidelSolver.random_matrix(
            6, property=MatrixProperty.SYMMETRIC_POSITIVE_DEFINITE, seed=4)
        assert is_symmetric(A)
        assert is_positive_definite(A)

    def test_seed_reproducible(self):
        assert np.array_equal(GaussSeidelSolver.random_matrix(5, seed=9),
                              GaussSeidelSolver.random_matrix(5, seed=9))

    def test_vector(self):
        b = GaussSeidelSolver.random_vector(7, max_value=4, seed=0)
        assert b.shape == (7,)
        assert np.all((b >= 0) & (b < 4))

    def test_bad_size(self):
        with pytest.raises(ValueError):
            GaussSeidelSolver.random_matrix(0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
