"""Per-iteration training reports and learning-curve plots."""

from dataclasses import dataclass, field
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np


@dataclass
class EpochReport:
    epoch: int                          # Iteration index, starting at 0
    eta: float                          # Learning rate used for this iteration
    accuracy: Optional[float] = None    # Fraction correct on test data (None without test data)
    cost: Optional[float] = None        # Test cost, when it was computed


@dataclass
class TrainingHistory:
    reports: List[EpochReport] = field(default_factory=list)
    best_cost: Optional[float] = None   # Best test cost seen in best-of-N mode
    best_epoch: Optional[int] = None    # Iteration of the kept snapshot; None means the untrained network
    stopped_early: bool = False         # True when best-of-N restored its snapshot

    def __len__(self):
        return len(self.reports)

    @property
    def accuracies(self) -> List[Optional[float]]:
        return [r.accuracy for r in self.reports]

    @property
    def costs(self) -> List[Optional[float]]:
        return [r.cost for r in self.reports]

    #  Plotting helpers
    def plot_cost(self, lr_used: Optional[float] = None, show: bool = False):
        """
        Plot test cost per iteration. Iterations without a cost are skipped.
        Returns the matplotlib Figure.
        """
        points = [(r.epoch, r.cost) for r in self.reports if r.cost is not None]
        fig = plt.figure(figsize=(8, 4))
        if points:
            epochs, costs = zip(*points)
            plt.plot(np.asarray(epochs), np.asarray(costs), lw=1)
        title = "Test Cost"
        if lr_used is not None:
            title += f"\nLearning rate (base): {lr_used}"
        plt.title(title)
        plt.xlabel("Epoch")
        plt.ylabel("Cost (Cross-Entropy, log2)")
        plt.grid(True, alpha=0.3)
        plt.tight_layout()
        if show:
            plt.show()
        return fig

    def plot_accuracies(self, lr_used: Optional[float] = None, show: bool = False):
        """Plot test accuracy (%) per iteration and annotate the final value."""
        points = [(r.epoch, r.accuracy * 100.0) for r in self.reports if r.accuracy is not None]
        fig = plt.figure(figsize=(8, 4))
        if points:
            epochs, acc = zip(*points)
            plt.plot(epochs, acc, label="Test", linewidth=1.5)
            plt.annotate(f"{acc[-1]:.2f}%", (epochs[-1], acc[-1]))     # Final value
            plt.legend(loc="lower right")
        title = "Accuracy Curve"
        if lr_used is not None:
            title += f"\nLearning rate (base): {lr_used}"
        plt.title(title)
        plt.xlabel("Epoch")
        plt.ylabel("Accuracy (%)")
        plt.grid(True, alpha=0.3)
        plt.tight_layout()
        if show:
            plt.show()
        return fig
