"""Exception types raised by the matrix and network code."""


class NeuralNetError(Exception):
    """Base class for every error raised by backprop_nn."""


class ShapeMismatchError(NeuralNetError, ValueError):
    """Operand dimensions are incompatible for the requested operation."""


class OutOfRangeError(NeuralNetError, IndexError):
    """Indexed access outside of a matrix's bounds."""


class EmptyMatrixError(NeuralNetError, ValueError):
    """Max/min queried on a matrix with zero rows or columns."""


class SerializationError(NeuralNetError, ValueError):
    """Persisted matrix or network data is malformed."""
