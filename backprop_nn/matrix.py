"""
Dense two-dimensional matrix of floats.

Data shape conventions:
    Row vectors are (1, n) matrices; a layer's activation is a row vector and
    weights map it forward with activation.dot(W), W of shape (n_in, n_out).

Every operation returns a new Matrix; only set() writes into an existing one.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import EmptyMatrixError, OutOfRangeError, SerializationError, ShapeMismatchError
from .operations import EXP, INVERT, NEGATE, ONE_MINUS, ONE_PLUS, ScalarOperation


def _number_len(value: float) -> int:
    """Count of integer digits beyond the first, used to size printed columns."""
    n = 0
    while value >= 10:
        value /= 10
        n += 1
    return n


class Matrix:
    __slots__ = ("_values",)

    def __init__(self, values: np.ndarray):
        """Wrap a 2-D array. The array is copied so the matrix owns its storage."""
        values = np.array(values, dtype=np.float64)         # Always a fresh float64 copy
        if values.ndim != 2:
            raise ShapeMismatchError(f"matrix needs 2-D data, got {values.ndim}-D")
        self._values = values

    #  Constructors
    @classmethod
    def zeros(cls, rows: int, cols: int) -> "Matrix":
        return cls(np.zeros((rows, cols)))                       # Zero-filled (rows, cols)

    @classmethod
    def random(cls, rows: int, cols: int, rng: Optional[np.random.Generator] = None) -> "Matrix":
        """Entries drawn from the standard normal distribution."""
        rng = rng if rng is not None else np.random.default_rng()    # Fresh generator when none injected
        return cls(rng.standard_normal((rows, cols)))                # N(0, 1) entries

    @classmethod
    def random_normalized(cls, rows: int, cols: int, rng: Optional[np.random.Generator] = None) -> "Matrix":
        """
        Standard normal entries divided by sqrt(rows).
        Used for weights so pre-activation variance does not grow with fan-in.
        """
        rng = rng if rng is not None else np.random.default_rng()
        return cls(rng.standard_normal((rows, cols)) / math.sqrt(rows))   # N(0, 1/rows) entries

    @classmethod
    def from_values(cls, cols: int, values: Sequence[float]) -> "Matrix":
        """Build a matrix from a flat row-major value sequence."""
        flat = np.array(values, dtype=np.float64).ravel()         # Flatten whatever was passed
        if cols <= 0:
            if flat.size:
                raise ShapeMismatchError(f"cannot lay out {flat.size} values in {cols} columns")
            return cls(np.zeros((0, max(cols, 0))))             # Empty matrix
        if flat.size % cols:
            raise ShapeMismatchError(f"{flat.size} values do not fill rows of {cols} columns")
        return cls(flat.reshape(-1, cols))                        # rows = len(values) / cols

    @classmethod
    def one_hot(cls, rows: int, cols: int, row: int, col: int) -> "Matrix":
        """Zero matrix with a single 1.0 at (row, col)."""
        m = cls.zeros(rows, cols)                                 # All zeros
        m.set(row, col, 1.0)                                      # Bounds-checked hot position
        return m

    #  Shape and element access
    @property
    def rows(self) -> int:
        return self._values.shape[0]                              # Number of rows

    @property
    def cols(self) -> int:
        return self._values.shape[1]                              # Number of columns

    @property
    def shape(self) -> Tuple[int, int]:
        return self._values.shape

    def _check_index(self, row: int, col: int, verb: str):
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise OutOfRangeError(
                f"cannot {verb} ({row}, {col}) outside of {self.rows}x{self.cols} matrix"
            )

    def at(self, row: int, col: int) -> float:
        self._check_index(row, col, "get value at")
        return float(self._values[row, col])

    def set(self, row: int, col: int, value: float):
        self._check_index(row, col, "set value at")
        self._values[row, col] = value                            # Only in-place write

    def copy(self) -> "Matrix":
        return Matrix(self._values)                               # Constructor copies the array

    def flat(self) -> List[float]:
        """Values in row-major order."""
        return self._values.ravel().tolist()

    def to_numpy(self) -> np.ndarray:
        return self._values.copy()

    #  Elementwise arithmetic
    def _operate(self, other: "Matrix", op: Callable, name: str) -> "Matrix":
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"cannot {name} {self.rows}x{self.cols} and {other.rows}x{other.cols} matrices"
            )
        return Matrix(op(self._values, other._values))            # Elementwise numpy op

    def add(self, other: "Matrix") -> "Matrix":
        return self._operate(other, np.add, "add")

    def subtract(self, other: "Matrix") -> "Matrix":
        return self._operate(other, np.subtract, "subtract")

    def multiply(self, other: "Matrix") -> "Matrix":
        """Elementwise (Hadamard) product."""
        return self._operate(other, np.multiply, "multiply")

    def apply(self, op: Callable[[float], float]) -> "Matrix":
        """
        Map a scalar function over every element.
        ScalarOperation instances and numpy ufuncs run vectorised; any other
        callable is called once per element.
        """
        if isinstance(op, (ScalarOperation, np.ufunc)):
            return Matrix(op(self._values))                       # Vectorised over the array
        if self._values.size == 0:
            return self.copy()
        return Matrix(np.vectorize(op, otypes=[np.float64])(self._values))   # One call per element

    #  Linear algebra
    def dot(self, other: "Matrix") -> "Matrix":
        """Matrix product; result is (self.rows x other.cols)."""
        if self.cols != other.rows:
            raise ShapeMismatchError(
                "for matrix multiplication first matrix cols must equal second matrix rows, "
                f"got {self.rows}x{self.cols} . {other.rows}x{other.cols}"
            )
        return Matrix(np.dot(self._values, other._values))        # (rows x inner) . (inner x cols)

    def transpose(self) -> "Matrix":
        return Matrix(self._values.T)                             # Rows become columns

    def sum(self) -> float:
        return float(np.sum(self._values))

    #  Extremes (flat row-major index, first occurrence wins)
    def _check_not_empty(self, what: str):
        if self.rows == 0 or self.cols == 0:
            raise EmptyMatrixError(f"cannot return {what} value in empty matrix")

    def max_index(self) -> int:
        self._check_not_empty("max")
        return int(np.argmax(self._values))                       # Flat index of first maximum

    def max(self) -> float:
        return float(self._values.flat[self.max_index()])

    def min_index(self) -> int:
        self._check_not_empty("min")
        return int(np.argmin(self._values))                       # Flat index of first minimum

    def min(self) -> float:
        return float(self._values.flat[self.min_index()])

    #  Activations
    def sigmoid(self) -> "Matrix":
        """Elementwise logistic function 1 / (1 + e^-x)."""
        return self.apply(NEGATE).apply(EXP).apply(ONE_PLUS).apply(INVERT)

    def sigmoid_prime(self) -> "Matrix":
        """Elementwise s * (1 - s) with s = sigmoid(x)."""
        s = self.sigmoid()                                        # Evaluate sigmoid once
        return s.multiply(s.apply(ONE_MINUS))

    #  Serialization
    def to_dict(self) -> dict:
        return {"cols": self.cols, "values": self.flat()}

    @classmethod
    def from_dict(cls, data: dict) -> "Matrix":
        try:
            cols = data["cols"]
            values = data["values"]
        except (KeyError, TypeError) as exc:
            raise SerializationError(f"matrix record needs 'cols' and 'values': {exc}") from exc
        if isinstance(cols, bool) or not isinstance(cols, int):
            raise SerializationError(f"matrix 'cols' must be an integer, got {cols!r}")
        if not isinstance(values, list) or not all(
            isinstance(v, (int, float)) and not isinstance(v, bool) for v in values
        ):
            raise SerializationError("matrix 'values' must be a list of numbers")
        try:
            return cls.from_values(cols, values)
        except (ShapeMismatchError, OverflowError) as exc:              # ragged data, or ints beyond float64
            raise SerializationError(str(exc)) from exc

    #  Python protocol
    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._values, other._values))

    __hash__ = None

    def __repr__(self):
        return f"Matrix({self.rows}x{self.cols})"

    def __str__(self):
        if self.rows == 0 or self.cols == 0:
            return f"| {self.rows}x{self.cols} empty |"
        width = _number_len(self.max()) + 6
        return "\n".join(
            "| " + "".join(f"{v:{width}.2f}" for v in row) + " |" for row in self._values
        )
