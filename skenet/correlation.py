from functools import partial

import numpy as np

from skenet.utils.timer import span
from skenet.utils.validation import check_n_rows


class ActiveSetCorrelation:
    r"""Correlations between all features and the active ones.

    Logically a ``(n_features, n_active)`` matrix whose column ``k`` holds

    .. math:: \frac{1}{n} X^T X_{:, active_k}

    It only ever grows: columns of newly active features are appended by
    :meth:`update` and existing columns are never recomputed. Storage is an
    over-allocated Fortran-ordered buffer whose capacity doubles when full.

    Parameters
    ----------
    n_features : int
        Number of features.

    Attributes
    ----------
    active : array, shape (n_active,)
        Active feature indices, in the order they entered.
    """

    def __init__(self, n_features):
        self.n_features = n_features
        self._buffer = np.zeros((n_features, 0), order='F')
        self._active = np.zeros(0, dtype=np.int64)
        self._mask = np.zeros(n_features, dtype=bool)

    @property
    def n_active(self):
        return self._active.shape[0]

    @property
    def active(self):
        return self._active

    @property
    def values(self):
        """View on the ``(n_features, n_active)`` correlation block."""
        return self._buffer[:, :self.n_active]

    def __len__(self):
        return self.n_active

    def is_active(self, j):
        return bool(self._mask[j])

    def dot(self, j, beta):
        """Compute ``sum_k xx[j, k] * beta[active[k]]`` over active columns.

        Defined for every feature ``j``, active or not; entries of ``beta``
        outside the active set are ignored.
        """
        return float(self.values[j] @ beta[self._active])

    def update(self, new_indices, correlation):
        """Append the correlation columns of newly active features.

        Parameters
        ----------
        new_indices : array, shape (n_new,)
            Indices entering the active set, disjoint from it.

        correlation : array, shape (n_features, n_new)
            Column ``k`` holds the correlations of every feature with
            ``new_indices[k]``.
        """
        new_indices = np.asarray(new_indices, dtype=np.int64).ravel()
        correlation = np.asarray(correlation, dtype=np.float64)
        n_new = new_indices.shape[0]

        if correlation.shape != (self.n_features, n_new):
            raise ValueError(
                f"`correlation` must have shape ({self.n_features}, {n_new}), "
                f"got {correlation.shape}.")
        if n_new == 0:
            return
        if new_indices.min() < 0 or new_indices.max() >= self.n_features:
            raise ValueError(
                f"Feature indices must be in [0, {self.n_features}).")
        if np.unique(new_indices).shape[0] != n_new:
            raise ValueError("`new_indices` contains duplicates.")
        if np.any(self._mask[new_indices]):
            overlap = new_indices[self._mask[new_indices]]
            raise ValueError(
                f"Features {overlap.tolist()} are already active.")

        n_active = self.n_active
        if n_active + n_new > self._buffer.shape[1]:
            capacity = max(2 * self._buffer.shape[1], n_active + n_new)
            buffer = np.zeros((self.n_features, capacity), order='F')
            buffer[:, :n_active] = self.values
            self._buffer = buffer

        self._buffer[:, n_active:n_active + n_new] = correlation
        self._active = np.concatenate([self._active, new_indices])
        self._mask[new_indices] = True

    def new_indices(self, beta):
        """Return inactive features with a nonzero coefficient, sorted.

        A coordinate update soft-thresholds ``xy[j] - dot(j, beta) + beta[j]``,
        so an inactive feature turns nonzero exactly when its residual
        correlation violates ``|xy[j] - dot(j, beta)| <= lambda * alpha``.
        """
        return np.flatnonzero((beta != 0) & ~self._mask)


def x_correlation(blocks, new_indices, n_features, n_rows, depth=2):
    """Compute the correlations of all features with ``new_indices``.

    Every partition contributes one ``block.T @ block[:, new_indices]`` GEMM,
    partials are summed with a tree reduction and normalized by ``n_rows``.

    Parameters
    ----------
    blocks : PartitionedDataset
        Dense feature blocks, shape (n_part, n_features) each.

    new_indices : array, shape (n_new,)
        Requested columns. Output columns follow this order.

    n_features : int
        Number of features.

    n_rows : int
        Total number of observations.

    depth : int, default 2
        Depth of the merge tree.

    Returns
    -------
    xx : array, shape (n_features, n_new)
        ``X.T @ X[:, new_indices] / n_rows``.
    """
    n_rows = check_n_rows(n_rows)
    new_indices = np.asarray(new_indices, dtype=np.int64)
    xx = blocks.tree_aggregate(
        partial(_partition_correlation, new_indices=new_indices,
                n_features=n_features),
        np.add, depth=depth)
    return np.asfortranarray(xx / n_rows)


def populate_xx(blocks, new_indices, xx, n_rows, observer=None, depth=2):
    """Compute the correlation columns of ``new_indices`` and add them to ``xx``."""
    with span(observer, "x_correlation"):
        correlation = x_correlation(blocks, new_indices, xx.n_features, n_rows,
                                    depth=depth)
    with span(observer, "xx_update"):
        xx.update(new_indices, correlation)


def _partition_correlation(block, new_indices, n_features):
    if block.shape[1] != n_features:
        raise ValueError(
            f"Partition has {block.shape[1]} features, expected {n_features}.")
    return block.T @ block[:, new_indices]
