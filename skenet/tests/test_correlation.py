import pytest

import numpy as np

from skenet import PartitionedDataset, ActiveSetCorrelation
from skenet.correlation import x_correlation, populate_xx
from skenet.utils import Timer
from skenet.utils.data import make_linear_data


n_samples, n_features = 90, 20
X, y, _ = make_linear_data(n_samples, n_features, rho=0.5, random_state=0)
gram = X.T @ X / n_samples


@pytest.mark.parametrize("n_partitions", [1, 3, 7])
@pytest.mark.parametrize("new_indices", [[0], [5, 0, 3], [19, 2, 11, 7, 8]])
@pytest.mark.parametrize("n_jobs", [1, 2])
def test_x_correlation(n_partitions, new_indices, n_jobs):
    blocks = PartitionedDataset.from_arrays(
        X, y, n_partitions=n_partitions, n_jobs=n_jobs).to_blocks()
    xx = x_correlation(blocks, new_indices, n_features, n_samples)

    assert xx.shape == (n_features, len(new_indices))
    # columns follow the order of new_indices
    np.testing.assert_allclose(xx, gram[:, new_indices], rtol=1e-10, atol=1e-14)


def test_x_correlation_empty_request():
    blocks = PartitionedDataset.from_arrays(X, y).to_blocks()
    xx = x_correlation(blocks, np.array([], dtype=int), n_features, n_samples)

    assert xx.shape == (n_features, 0)


def test_update_and_dot():
    rng = np.random.RandomState(0)
    beta = rng.randn(n_features)
    xx = ActiveSetCorrelation(n_features)

    # nothing active: every dot product is zero
    assert xx.dot(4, beta) == 0.

    active = []
    for new_indices in ([3, 1], [10], [0, 19, 7, 12, 5], [2]):
        xx.update(new_indices, gram[:, new_indices])
        active.extend(new_indices)

        np.testing.assert_array_equal(xx.active, active)
        assert len(xx) == len(active)
        np.testing.assert_allclose(xx.values, gram[:, active])
        for j in range(n_features):
            np.testing.assert_allclose(
                xx.dot(j, beta), gram[j, active] @ beta[active], rtol=1e-12)
        assert all(xx.is_active(j) for j in active)


def test_update_invalid():
    xx = ActiveSetCorrelation(n_features)
    xx.update([1, 4], gram[:, [1, 4]])

    with pytest.raises(ValueError, match="already active"):
        xx.update([2, 4], gram[:, [2, 4]])
    with pytest.raises(ValueError, match="duplicates"):
        xx.update([2, 2], gram[:, [2, 2]])
    with pytest.raises(ValueError, match="must have shape"):
        xx.update([2, 3], gram[:, [2]])
    with pytest.raises(ValueError, match="must be in"):
        xx.update([n_features], np.zeros((n_features, 1)))

    # failed updates leave the matrix untouched
    np.testing.assert_array_equal(xx.active, [1, 4])
    np.testing.assert_allclose(xx.values, gram[:, [1, 4]])


def test_new_indices():
    xx = ActiveSetCorrelation(n_features)
    xx.update([0, 5], gram[:, [0, 5]])

    beta = np.zeros(n_features)
    np.testing.assert_array_equal(xx.new_indices(beta), [])

    beta[[0, 3, 5, 17]] = [1., -2., 0.5, 1e-12]
    np.testing.assert_array_equal(xx.new_indices(beta), [3, 17])


def test_populate_xx_observer():
    blocks = PartitionedDataset.from_arrays(X, y, n_partitions=4).to_blocks()
    xx = ActiveSetCorrelation(n_features)
    timer = Timer()

    populate_xx(blocks, [6, 2], xx, n_samples, observer=timer)
    populate_xx(blocks, [9], xx, n_samples, observer=timer)

    np.testing.assert_allclose(xx.values, gram[:, [6, 2, 9]], rtol=1e-10,
                               atol=1e-14)
    assert timer.counts["x_correlation"] == 2
    assert timer.counts["xx_update"] == 2
    assert timer.timings["x_correlation"] >= 0.


if __name__ == '__main__':
    pass
