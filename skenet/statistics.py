from functools import partial

import numpy as np
from numba import njit

from skenet.utils.validation import check_n_rows


def compute_xy(data, n_features, n_rows, depth=2):
    """Compute the correlation between every feature and the response.

    Every partition accumulates ``sum_i x_i[j] * y_i`` locally, partial sums
    are merged with a tree reduction and the total is divided by ``n_rows``.

    Parameters
    ----------
    data : PartitionedDataset
        Partitions of raw observations ``(y_part, X_part)``.

    n_features : int
        Number of features.

    n_rows : int
        Total number of observations, at least 1.

    depth : int, default 2
        Depth of the merge tree.

    Returns
    -------
    xy : array, shape (n_features,)
        ``X.T @ y / n_rows``.
    """
    n_rows = check_n_rows(n_rows)
    xy = data.tree_aggregate(
        partial(_partition_xy, n_features=n_features), np.add, depth=depth)
    return xy / n_rows


def _partition_xy(partition, n_features):
    y, X = partition
    if X.shape[1] != n_features:
        raise ValueError(
            f"Partition has {X.shape[1]} features, expected {n_features}.")
    xy = np.zeros(n_features)
    _accumulate_xy(np.ascontiguousarray(X, dtype=np.float64),
                   np.ascontiguousarray(y, dtype=np.float64), xy)
    return xy


@njit
def _accumulate_xy(X, y, xy):
    # inplace update of xy
    n_samples, n_features = X.shape
    for i in range(n_samples):
        y_i = y[i]
        for j in range(n_features):
            xy[j] += X[i, j] * y_i
