import json

import pytest

from backprop_nn import Matrix, Network, SerializationError


def test_dict_layout():
    net = Network([2, 3, 1], seed=0)
    data = net.to_dict()
    assert data["layers"] == [2, 3, 1]
    assert [w["cols"] for w in data["weights"]] == [3, 1]
    assert [len(w["values"]) for w in data["weights"]] == [6, 3]
    assert [b["cols"] for b in data["biases"]] == [3, 1]


def test_json_round_trip_is_exact():
    net = Network([4, 5, 3], seed=1)
    restored = Network.from_dict(json.loads(json.dumps(net.to_dict())))
    assert restored.layers == net.layers
    assert restored.weights == net.weights
    assert restored.biases == net.biases


def test_save_and_load(tmp_path, xor_items):
    net = Network([2, 3, 2], seed=2)
    net.train(xor_items, epochs=3, mini_batch_size=2, eta=0.5)
    path = tmp_path / "network.json"
    net.save(str(path))

    loaded = Network.load(str(path))
    assert loaded.weights == net.weights
    assert loaded.biases == net.biases
    for item in xor_items:
        assert loaded.feed_forward(item.values) == net.feed_forward(item.values)


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(SerializationError):
        Network.load(str(path))


def test_load_invalid_utf8(tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"{\"layers\": [2, 2], \"weights\": \"\xff\xfe\"}")
    with pytest.raises(SerializationError):
        Network.load(str(path))


def test_load_oversized_integer(tmp_path):
    data = Network([1, 1], seed=0).to_dict()
    data["weights"][0]["values"] = [10 ** 400]
    path = tmp_path / "huge.json"
    path.write_text(json.dumps(data))
    with pytest.raises(SerializationError):
        Network.load(str(path))


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        Network.load(str(tmp_path / "missing.json"))


def _valid_dict():
    return Network([2, 3], seed=0).to_dict()


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("layers"),
        lambda d: d.pop("weights"),
        lambda d: d.update(layers="2,3"),
        lambda d: d.update(layers=[2, 4]),
        lambda d: d.update(weights=[]),
        lambda d: d.update(biases=[{"cols": 3}]),
        lambda d: d.update(weights=[Matrix.zeros(3, 2).to_dict()]),
        lambda d: d.update(weights=5),
    ],
)
def test_from_dict_rejects_malformed_networks(mutate):
    data = _valid_dict()
    mutate(data)
    with pytest.raises(SerializationError):
        Network.from_dict(data)


def test_str_lists_layers_and_parameters():
    net = Network.from_parameters([1, 2], [Matrix.from_values(2, [1.0, 2.0])], [Matrix.zeros(1, 2)])
    assert str(net).splitlines() == [
        "Neural network:",
        "layers: 1 2",
        "weights layer 1 to 0:",
        "|   1.00  2.00 |",
        "biases layer 1:",
        "|   0.00  0.00 |",
    ]
