"""
Fully-connected feedforward network trained by mini-batch gradient descent.

Features:
- Sigmoid activation on every layer
- Cross-entropy cost (log2) with the simplified output error a - y
- L2 regularization (weight decay scaled by the full training-set size)
- Fixed-epoch training, or best-of-N early stopping with learning-rate halving
- JSON persistence of layer sizes, weights and biases

Data shape conventions:
    input:      (1, layers[0])              row vector
    weights[i]: (layers[i], layers[i+1])
    biases[i]:  (1, layers[i+1])
"""

import json
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from .errors import SerializationError
from .history import EpochReport, TrainingHistory
from .matrix import Matrix
from .operations import LOG2, NEGATE, ONE_MINUS, Scale
from .train_item import TrainItem


def split_batches(items: Sequence[TrainItem], batch_size: int) -> List[Sequence[TrainItem]]:
    """
    Split items into contiguous mini-batches.
    Batch count is len(items) / batch_size rounded half up (at least one for a
    non-empty list); every batch holds batch_size items except the last, which
    takes whatever remains.
    """
    if batch_size < 1:
        raise ValueError(f"mini-batch size must be positive, got {batch_size}")
    n = len(items)
    if n == 0:
        return []
    count = max(1, int(n / batch_size + 0.5))
    batches = [items[i * batch_size:(i + 1) * batch_size] for i in range(count - 1)]
    batches.append(items[(count - 1) * batch_size:])             # Last batch absorbs the remainder
    return batches


def _check_layers(layers: List[int]):
    if len(layers) < 2:
        raise ValueError(f"network needs at least two layers, got {layers}")
    if any(isinstance(n, bool) or not isinstance(n, int) or n < 1 for n in layers):
        raise ValueError(f"layer sizes must be positive integers, got {layers}")


def _check_shapes(layers: List[int], weights: List[Matrix], biases: List[Matrix]):
    """Raise ValueError unless weights/biases match the layer sizes."""
    _check_layers(layers)
    if len(weights) != len(layers) - 1 or len(biases) != len(layers) - 1:
        raise ValueError(
            f"{len(layers)} layers need {len(layers) - 1} weight and bias matrices, "
            f"got {len(weights)} and {len(biases)}"
        )
    for i, (w, b) in enumerate(zip(weights, biases)):
        if w.shape != (layers[i], layers[i + 1]):
            raise ValueError(f"weights[{i}] is {w.shape}, expected {(layers[i], layers[i + 1])}")
        if b.shape != (1, layers[i + 1]):
            raise ValueError(f"biases[{i}] is {b.shape}, expected {(1, layers[i + 1])}")


class Network:
    def __init__(
        self,
        layers: Sequence[int],                     # neurons per layer, input first, e.g. [784, 30, 10]
        seed: Optional[int] = None,                # RNG seed for reproducibility
        rng: Optional[np.random.Generator] = None  # explicit generator; wins over seed
    ):
        """
        Create a network with random parameters.
        Biases are standard normal; weights are standard normal scaled by
        1/sqrt(fan_in). The same generator later shuffles training data.
        """
        self.layers = list(layers)
        _check_layers(self.layers)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.biases = [Matrix.random(1, n, self.rng) for n in self.layers[1:]]
        self.weights = [
            Matrix.random_normalized(n_in, n_out, self.rng)
            for n_in, n_out in zip(self.layers[:-1], self.layers[1:])
        ]

    @classmethod
    def from_parameters(
        cls,
        layers: Sequence[int],
        weights: Sequence[Matrix],
        biases: Sequence[Matrix],
        rng: Optional[np.random.Generator] = None,
    ) -> "Network":
        """Build a network around existing parameter matrices (copied)."""
        network = cls.__new__(cls)
        network.layers = list(layers)
        network.weights = [w.copy() for w in weights]
        network.biases = [b.copy() for b in biases]
        network.rng = rng if rng is not None else np.random.default_rng()
        _check_shapes(network.layers, network.weights, network.biases)
        return network

    def copy(self) -> "Network":
        """Deep copy of every parameter matrix; the generator is shared."""
        return Network.from_parameters(self.layers, self.weights, self.biases, rng=self.rng)

    #  Forward propagation
    def feed_forward(self, values: Matrix) -> Matrix:
        """Output activations (1, layers[-1]) for a (1, layers[0]) input."""
        activation = values
        for w, b in zip(self.weights, self.biases):
            activation = activation.dot(w).add(b).sigmoid()
        return activation

    #  Metrics
    def cost(self, items: Sequence[TrainItem]) -> float:
        """
        Mean cross-entropy over items:
            sum_j [ -y_j log2(a_j) - (1 - y_j) log2(1 - a_j) ]
        with y the one-hot target and a the network output.
        """
        if not items:
            raise ValueError("cannot compute cost of an empty item list")
        total = 0.0
        for item in items:
            output = self.feed_forward(item.values)
            y = item.target()
            first = y.apply(NEGATE).multiply(output.apply(LOG2))
            second = y.apply(ONE_MINUS).multiply(output.apply(ONE_MINUS).apply(LOG2))
            total += first.subtract(second).sum()
        return total / len(items)

    def evaluate(self, items: Sequence[TrainItem]) -> float:
        """Fraction of items whose strongest output index equals the label."""
        if not items:
            raise ValueError("cannot evaluate an empty item list")
        correct = sum(
            1 for item in items
            if float(self.feed_forward(item.values).max_index()) == item.label
        )
        return correct / len(items)

    #  Backpropagation
    def backprop(self, item: TrainItem) -> Tuple[List[Matrix], List[Matrix]]:
        """
        Gradients of the cost of a single item.
        Returns (nabla_w, nabla_b), shaped like self.weights and self.biases.
        """
        # Forward pass keeping every z and activation
        activation = item.values
        activations = [activation]                                 # a0 is the input
        zs = []
        for w, b in zip(self.weights, self.biases):
            z = activation.dot(w).add(b)
            zs.append(z)
            activation = z.sigmoid()
            activations.append(activation)

        nabla_w: List[Optional[Matrix]] = [None] * len(self.weights)
        nabla_b: List[Optional[Matrix]] = [None] * len(self.biases)

        # Output layer: cross-entropy with sigmoid cancels sigmoid', delta = a - y
        delta = activations[-1].subtract(item.target())
        nabla_b[-1] = delta
        nabla_w[-1] = activations[-2].transpose().dot(delta)

        # Hidden layers, walking backward
        for l in range(2, len(self.layers)):
            sp = zs[-l].sigmoid_prime()
            delta = delta.dot(self.weights[-l + 1].transpose()).multiply(sp)
            nabla_b[-l] = delta
            nabla_w[-l] = activations[-l - 1].transpose().dot(delta)

        return nabla_w, nabla_b

    #  Gradient step
    def update_mini_batch(self, batch: Sequence[TrainItem], eta: float, lmbda: float, train_size: int):
        """
        One gradient-descent step on a mini-batch.
            w <- w * (1 - eta*lmbda/train_size) - (eta/len(batch)) * sum(nabla_w)
            b <- b - (eta/len(batch)) * sum(nabla_b)
        train_size is the size of the whole training set; biases are not regularized.
        """
        if not batch:
            raise ValueError("cannot update on an empty mini-batch")
        if train_size < 1:
            raise ValueError(f"training-set size must be positive, got {train_size}")
        sum_w = [Matrix.zeros(w.rows, w.cols) for w in self.weights]
        sum_b = [Matrix.zeros(b.rows, b.cols) for b in self.biases]
        for item in batch:
            nabla_w, nabla_b = self.backprop(item)
            sum_w = [s.add(g) for s, g in zip(sum_w, nabla_w)]
            sum_b = [s.add(g) for s, g in zip(sum_b, nabla_b)]

        step = Scale(eta / len(batch))
        decay = Scale(1 - eta * lmbda / train_size)
        self.weights = [w.apply(decay).subtract(g.apply(step)) for w, g in zip(self.weights, sum_w)]
        self.biases = [b.subtract(g.apply(step)) for b, g in zip(self.biases, sum_b)]

    #  Training loop
    def train(
        self,
        items: Sequence[TrainItem],                   # training set
        epochs: int,                                  # > 0: fixed count; < 0: best-of-N with patience |epochs|
        mini_batch_size: int,                         # items per gradient step
        eta: float,                                   # learning rate
        eta_fraction: float = 0.0,                    # best-of-N: halve eta while eta*eta_fraction > initial eta
        lmbda: float = 0.0,                           # L2 regularization strength; 0 disables
        test_data: Optional[Sequence[TrainItem]] = None,
        print_cost: bool = False,                     # also compute/report test cost in fixed mode
        callback: Optional[Callable[[EpochReport], None]] = None,
        progress: bool = False                        # tqdm bar and per-epoch lines
    ) -> TrainingHistory:
        """
        Train with shuffled mini-batches.

        Fixed mode runs exactly `epochs` iterations. Best-of-N mode keeps the
        parameters with the lowest test cost; after |epochs| iterations without
        improvement it either halves eta (if eta * eta_fraction still exceeds the
        initial eta) or restores the best parameters and stops.
        """
        if mini_batch_size < 1:
            raise ValueError(f"mini-batch size must be positive, got {mini_batch_size}")
        items = list(items)
        test_data = list(test_data) if test_data else []
        best_of_n = epochs < 0
        patience = abs(epochs)
        if best_of_n and not test_data:
            raise ValueError("best-of-N training needs test data to measure cost")

        initial_eta = eta
        history = TrainingHistory()

        # Best-of-N bookkeeping: start from the untrained network
        best_network = None
        without_improvement = 0
        if best_of_n:
            history.best_cost = self.cost(test_data)
            best_network = self.copy()

        bar = tqdm(total=None if best_of_n else patience, desc="Training", disable=not progress)
        epoch = 0
        try:
            while True:
                if not best_of_n and epoch >= patience:
                    break
                if best_of_n and without_improvement >= patience:
                    if eta_fraction > 0 and eta * eta_fraction > initial_eta:
                        eta /= 2.0
                        without_improvement = 0
                        if progress:
                            tqdm.write(f"No improvement for {patience} epochs, eta halved to {eta:g}")
                    else:
                        if progress:
                            tqdm.write("Early stopping triggered. Restoring best parameters.")
                        self.weights = [w.copy() for w in best_network.weights]
                        self.biases = [b.copy() for b in best_network.biases]
                        history.stopped_early = True
                        break

                # Shuffle, batch, step
                if items:
                    order = self.rng.permutation(len(items))
                    shuffled = [items[i] for i in order]
                    for batch in split_batches(shuffled, mini_batch_size):
                        self.update_mini_batch(batch, eta, lmbda, len(items))

                report = EpochReport(epoch=epoch, eta=eta)
                if best_of_n or (print_cost and test_data):
                    report.cost = self.cost(test_data)

                if best_of_n:
                    if report.cost < history.best_cost:
                        history.best_cost = report.cost
                        history.best_epoch = epoch
                        best_network = self.copy()
                        without_improvement = 0
                    else:
                        without_improvement += 1

                if test_data:
                    report.accuracy = self.evaluate(test_data)
                    if progress:
                        tqdm.write(f"Epoch {epoch}: {report.accuracy:f}")
                        if print_cost:
                            tqdm.write(f"Cost: {report.cost:f}")
                elif progress:
                    tqdm.write(f"Epoch {epoch} finished.")

                history.reports.append(report)
                if callback is not None:
                    callback(report)
                bar.update(1)
                epoch += 1
        finally:
            bar.close()
        return history

    #  Persistence
    def to_dict(self) -> dict:
        return {
            "layers": list(self.layers),
            "weights": [w.to_dict() for w in self.weights],
            "biases": [b.to_dict() for b in self.biases],
        }

    @classmethod
    def from_dict(cls, data: dict, rng: Optional[np.random.Generator] = None) -> "Network":
        try:
            layers = data["layers"]
            weights = [Matrix.from_dict(w) for w in data["weights"]]
            biases = [Matrix.from_dict(b) for b in data["biases"]]
        except (KeyError, TypeError) as exc:
            raise SerializationError(f"network record needs 'layers', 'weights' and 'biases': {exc}") from exc
        if not isinstance(layers, list):
            raise SerializationError(f"network 'layers' must be a list, got {layers!r}")
        try:
            return cls.from_parameters(layers, weights, biases, rng=rng)
        except ValueError as exc:
            raise SerializationError(str(exc)) from exc

    def save(self, path: str):
        """Write the network to `path` as JSON."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f)

    @classmethod
    def load(cls, path: str, rng: Optional[np.random.Generator] = None) -> "Network":
        """Read a network written by save(). Raises SerializationError on bad content."""
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:                # bad syntax or bad bytes
                raise SerializationError(f"{path} is not valid JSON: {exc}") from exc
        return cls.from_dict(data, rng=rng)

    def __str__(self):
        result = "Neural network:\nlayers:" + "".join(f" {n}" for n in self.layers)
        for i, w in enumerate(self.weights):
            result += f"\nweights layer {i + 1} to {i}:\n{w}"
        for i, b in enumerate(self.biases):
            result += f"\nbiases layer {i + 1}:\n{b}"
        return result


# Example usage (XOR)

if __name__ == "__main__":
    from .train_item import make_items

    xor = make_items([[0, 0], [0, 1], [1, 0], [1, 1]], [0, 1, 1, 0], distinct=2)
    net = Network([2, 8, 2], seed=1)
    history = net.train(xor, epochs=500, mini_batch_size=1, eta=1.0, test_data=xor,
                        print_cost=True, progress=True)
    print(f"Accuracy: {net.evaluate(xor):.2f}")
    history.plot_cost(lr_used=1.0, show=True)
