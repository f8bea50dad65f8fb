"""
Seidel Exceptions: error taxonomy for the solver engine.

Everything raised by the package inherits from SeidelError. Validation
errors also inherit from ValueError so callers that only know about the
builtin still catch them.

Non-convergence is NOT an exception: it is reported through the solver
state plus a ConvergenceWarning.
"""


class SeidelError(Exception):
    """Base exception for all seidel errors."""
    pass


class ValidationError(SeidelError, ValueError):
    """User-provided input failed a check."""
    pass


class ConstructionError(ValidationError):
    """
    Matrix and vector cannot form a square linear system.

    Raised for size mismatches, empty or ragged matrices, non-square
    matrices and non-numeric entries. The solver instance is unusable.

    Attributes
    ----------
    expected : object or None
        What the check required (e.g. a row count).
    actual : object or None
        What was received.
    """

    def __init__(self, message, expected=None, actual=None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class DimensionError(ValidationError):
    """An auxiliary array (e.g. the initial guess) has the wrong length."""
    pass


class MalformedInputError(ValidationError):
    """
    Structured input (JSON file, string or mapping) could not be loaded.

    Attributes
    ----------
    missing : tuple of str
        Required properties absent from the input, empty if the problem
        was something else.
    """

    def __init__(self, message, missing=()):
        super().__init__(message)
        self.missing = tuple(missing)


class NumericalError(SeidelError):
    """Numerical precondition of the method does not hold."""
    pass


class SingularPivotError(NumericalError):
    """
    A diagonal entry is exactly zero, so the row update is undefined.

    Detected before the first sweep; no partial solution is produced.

    Attributes
    ----------
    row : int
        First row whose diagonal entry is zero.
    """

    def __init__(self, row):
        super().__init__(f"Zero diagonal element at row {row}. Cannot proceed.")
        self.row = row


class UnsupportedVariantError(SeidelError):
    """Storage kind outside the known set reached the row accessor."""

    def __init__(self, kind):
        super().__init__(f"Unsupported or unknown matrix storage: {kind!r}")
        self.kind = kind


class ConvergenceWarning(UserWarning):
    """Convergence is not guaranteed, or the iteration limit was hit."""
    pass
