"""Dense multi-layer perceptron trained by backpropagation."""

from .errors import (
    EmptyMatrixError,
    NeuralNetError,
    OutOfRangeError,
    SerializationError,
    ShapeMismatchError,
)
from .history import EpochReport, TrainingHistory
from .matrix import Matrix
from .network import Network, split_batches
from .train_item import TrainItem, make_items

__all__ = [
    "EmptyMatrixError",
    "EpochReport",
    "Matrix",
    "Network",
    "NeuralNetError",
    "OutOfRangeError",
    "SerializationError",
    "ShapeMismatchError",
    "TrainItem",
    "TrainingHistory",
    "make_items",
    "split_batches",
]
