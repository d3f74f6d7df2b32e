import matplotlib

matplotlib.use("Agg")

import pytest

from backprop_nn import make_items


XOR_INPUTS = [[0, 0], [0, 1], [1, 0], [1, 1]]


@pytest.fixture
def xor_items():
    return make_items(XOR_INPUTS, [0, 1, 1, 0], distinct=2)


@pytest.fixture
def inverted_xor_items():
    """Same inputs with the opposite labels; cost on these rises once XOR is learned."""
    return make_items(XOR_INPUTS, [1, 0, 0, 1], distinct=2)
