from dataclasses import dataclass
from typing import List, Sequence

from .matrix import Matrix


@dataclass(frozen=True)
class TrainItem:
    """
    One labeled example.
        values:   input features as a (1, n_features) row vector
        label:    class id stored as a float (compared exactly against the argmax index)
        distinct: number of classes, i.e. the width of the one-hot target
    """
    values: Matrix                      # (1, n_features)
    label: float                        # Class id as float
    distinct: int                       # Number of classes

    @classmethod
    def from_values(cls, values: Sequence[float], label: float, distinct: int) -> "TrainItem":
        return cls(Matrix.from_values(len(values), values), float(label), distinct)   # One row of len(values) columns

    def target(self) -> Matrix:
        """One-hot row vector (1, distinct) with a 1 at the label index."""
        return Matrix.one_hot(1, self.distinct, 0, int(self.label))   # Raises OutOfRangeError for labels >= distinct


def make_items(features: Sequence[Sequence[float]], labels: Sequence[float], distinct: int) -> List[TrainItem]:
    """Pair up feature rows and labels into TrainItems."""
    if len(features) != len(labels):                                   # Every row needs a label
        raise ValueError(f"got {len(features)} feature rows but {len(labels)} labels")
    return [TrainItem.from_values(list(x), y, distinct) for x, y in zip(features, labels)]   # Keep input order
