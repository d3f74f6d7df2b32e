import matplotlib.pyplot as plt

from backprop_nn import EpochReport, Network, TrainingHistory


def make_history():
    return TrainingHistory(reports=[
        EpochReport(epoch=0, eta=1.0, accuracy=0.5, cost=1.8),
        EpochReport(epoch=1, eta=1.0, accuracy=0.75, cost=1.2),
        EpochReport(epoch=2, eta=0.5, accuracy=1.0, cost=None),
    ])


def test_history_lists():
    history = make_history()
    assert len(history) == 3
    assert history.accuracies == [0.5, 0.75, 1.0]
    assert history.costs == [1.8, 1.2, None]


def test_plot_cost_skips_missing_costs():
    fig = make_history().plot_cost(lr_used=1.0)
    try:
        line, = fig.axes[0].get_lines()
        assert list(line.get_xdata()) == [0, 1]
        assert list(line.get_ydata()) == [1.8, 1.2]
    finally:
        plt.close(fig)


def test_plot_accuracies_in_percent():
    fig = make_history().plot_accuracies()
    try:
        line, = fig.axes[0].get_lines()
        assert list(line.get_ydata()) == [50.0, 75.0, 100.0]
    finally:
        plt.close(fig)


def test_plot_empty_history():
    fig = TrainingHistory().plot_cost()
    try:
        assert len(fig.axes[0].get_lines()) == 0
    finally:
        plt.close(fig)


def test_plots_from_training(xor_items, inverted_xor_items):
    history = Network([2, 3, 2], seed=0).train(
        xor_items, epochs=-2, mini_batch_size=2, eta=0.5, test_data=inverted_xor_items
    )
    fig = history.plot_cost()
    try:
        line, = fig.axes[0].get_lines()
        assert len(line.get_xdata()) == len(history)
    finally:
        plt.close(fig)
