import math

import numpy as np
import pytest

from backprop_nn.operations import (
    EXP,
    INVERT,
    LOG2,
    NEGATE,
    ONE_MINUS,
    ONE_PLUS,
    Scale,
    Shift,
    sigmoid,
    sigmoid_prime,
)


def test_scalar_operations_on_floats():
    assert NEGATE(2.5) == -2.5
    assert ONE_PLUS(2.0) == 3.0
    assert ONE_MINUS(0.25) == 0.75
    assert INVERT(4.0) == 0.25
    assert EXP(0.0) == 1.0
    assert LOG2(8.0) == 3.0


def test_scalar_operations_on_arrays():
    x = np.array([1.0, -2.0, 4.0])
    np.testing.assert_array_equal(NEGATE(x), [-1.0, 2.0, -4.0])
    np.testing.assert_array_equal(INVERT(x), [1.0, -0.5, 0.25])


def test_parameterised_operations_compare_by_value():
    assert Scale(3.0)(2.0) == 6.0
    assert Shift(-1.0)(2.0) == 1.0
    assert Scale(0.5) == Scale(0.5)
    assert Scale(0.5) != Scale(0.25)
    assert repr(Scale(2.0)) == "Scale(factor=2.0)"


def test_log2_of_zero_is_negative_infinity():
    assert LOG2(np.array([0.0]))[0] == -math.inf


def test_sigmoid_helpers():
    assert sigmoid(0.0) == 0.5
    assert sigmoid_prime(0.0) == 0.25
    assert sigmoid(2.0) == pytest.approx(1 / (1 + math.exp(-2.0)))
