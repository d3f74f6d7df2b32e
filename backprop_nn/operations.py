"""
Scalar operations used as map operations over a Matrix.

Each operation is a small value object: calling it on a float returns a float,
calling it on a numpy array applies it elementwise. Parameterised operations
(Scale, Shift) keep their constant as a field so they compare and print by value.
"""

from dataclasses import dataclass

import numpy as np


class ScalarOperation:
    """Marker base class for vectorisable float -> float operations."""

    def __call__(self, x):
        raise NotImplementedError


@dataclass(frozen=True)
class Negate(ScalarOperation):
    def __call__(self, x):
        return -x


@dataclass(frozen=True)
class OnePlus(ScalarOperation):
    def __call__(self, x):
        return 1.0 + x


@dataclass(frozen=True)
class OneMinus(ScalarOperation):
    def __call__(self, x):
        return 1.0 - x


@dataclass(frozen=True)
class Invert(ScalarOperation):
    def __call__(self, x):
        return 1.0 / x


@dataclass(frozen=True)
class Exp(ScalarOperation):
    def __call__(self, x):
        with np.errstate(over="ignore"):                   # exp(large) -> inf, sigmoid then gives 0
            return np.exp(x)


@dataclass(frozen=True)
class Log2(ScalarOperation):
    def __call__(self, x):
        with np.errstate(divide="ignore"):                 # log2(0) -> -inf
            return np.log2(x)


@dataclass(frozen=True)
class Scale(ScalarOperation):
    """Multiply by a constant factor."""
    factor: float

    def __call__(self, x):
        return self.factor * x


@dataclass(frozen=True)
class Shift(ScalarOperation):
    """Add a constant offset."""
    offset: float

    def __call__(self, x):
        return self.offset + x


NEGATE = Negate()
ONE_PLUS = OnePlus()
ONE_MINUS = OneMinus()
INVERT = Invert()
EXP = Exp()
LOG2 = Log2()


def sigmoid(z):
    """Sigmoid activation: f(x) = 1 / (1 + e^(-x)); range (0,1)"""
    return INVERT(ONE_PLUS(EXP(NEGATE(z))))


def sigmoid_prime(z):
    """Derivative of the sigmoid: f'(x) = f(x)(1-f(x))"""
    s = sigmoid(z)
    return s * ONE_MINUS(s)
