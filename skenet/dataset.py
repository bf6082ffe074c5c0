from math import ceil

import numpy as np
from joblib import Parallel, delayed
from scipy.sparse import issparse
from sklearn.utils import check_array, check_consistent_length


class PartitionedDataset:
    """Horizontally partitioned collection with lazy per-partition maps.

    Each partition is processed independently. Per-partition work is
    dispatched through ``joblib.Parallel`` and partial results are merged with
    a tree reduction, see :meth:`tree_aggregate`.

    Parameters
    ----------
    partitions : list
        The partitions. For raw observations every partition is a pair
        ``(y_part, X_part)`` of shapes ``(n_part,)`` and ``(n_part, n_features)``.

    n_jobs : int, default None
        Number of joblib workers used for per-partition work. ``None`` means 1
        unless in a ``joblib.parallel_config`` context.

    Attributes
    ----------
    is_persisted : bool
        Whether materialized partitions are cached between accesses.
    """

    def __init__(self, partitions, n_jobs=None):
        self._partitions = list(partitions)
        self._parent = None
        self._func = None
        self._cache = None
        self.n_jobs = n_jobs
        self.is_persisted = False

    @classmethod
    def from_arrays(cls, X, y, n_partitions=2, n_jobs=None):
        """Split ``(X, y)`` into contiguous partitions of near-equal size.

        Parameters
        ----------
        X : array or sparse matrix, shape (n_samples, n_features)
            Design matrix. Sparse input is densified partition by partition.

        y : array, shape (n_samples,)
            Response vector.

        n_partitions : int, default 2
            Number of partitions, in ``[1, n_samples]``.

        n_jobs : int, default None
            Number of joblib workers.
        """
        X = check_array(X, accept_sparse="csr", dtype=np.float64)
        y = check_array(y, ensure_2d=False, dtype=np.float64)
        check_consistent_length(X, y)
        n_samples = X.shape[0]
        if not 1 <= n_partitions <= n_samples:
            raise ValueError(
                f"`n_partitions` must be in [1, {n_samples}], got {n_partitions}.")

        partitions = []
        for rows in np.array_split(np.arange(n_samples), n_partitions):
            start, stop = rows[0], rows[-1] + 1
            X_part = X[start:stop]
            if issparse(X_part):
                X_part = X_part.toarray()
            partitions.append((y[start:stop].copy(), np.array(X_part)))
        return cls(partitions, n_jobs=n_jobs)

    @classmethod
    def from_rows(cls, rows, n_partitions=2, n_jobs=None):
        """Build a dataset from an iterable of ``(response, features)`` rows."""
        rows = list(rows)
        if not rows:
            raise ValueError("Cannot build a dataset from zero rows.")
        y = np.array([row[0] for row in rows], dtype=np.float64)
        X = np.array([np.asarray(row[1], dtype=np.float64) for row in rows])
        if X.ndim != 2:
            raise ValueError("All feature vectors must have the same length.")
        return cls.from_arrays(X, y, n_partitions=n_partitions, n_jobs=n_jobs)

    @property
    def n_partitions(self):
        if self._parent is not None:
            return self._parent.n_partitions
        return len(self._partitions)

    @property
    def partitions(self):
        """The materialized partitions, computed if needed."""
        if self._parent is None:
            return self._partitions
        if self._cache is not None:
            return self._cache

        parts = Parallel(n_jobs=self.n_jobs)(
            delayed(self._func)(part) for part in self._parent.partitions)
        if self.is_persisted:
            self._cache = parts
        return parts

    def count(self):
        """Total number of rows, assuming ``(y_part, X_part)`` partitions."""
        return sum(len(part[0]) for part in self.partitions)

    def map_partitions(self, func):
        """Return a lazy dataset whose partitions are ``func(partition)``."""
        child = PartitionedDataset([], n_jobs=self.n_jobs)
        child._parent = self
        child._func = func
        return child

    def persist(self):
        """Keep materialized partitions in memory until :meth:`unpersist`."""
        self.is_persisted = True
        return self

    def unpersist(self):
        """Drop cached partitions."""
        self.is_persisted = False
        self._cache = None
        return self

    def to_blocks(self):
        """Lazy dataset of Fortran-ordered dense feature blocks, one per partition."""
        return self.map_partitions(_to_block)

    def tree_aggregate(self, map_func, comb_func, depth=2):
        """Map every partition to one partial result and merge them as a tree.

        Partials are merged level by level: consecutive groups of ``scale``
        partials are folded left to right, with
        ``scale = max(ceil(n_partitions ** (1 / depth)), 2)``. Merge order only
        depends on partition order, so the result is reproducible for a fixed
        partitioning.

        Parameters
        ----------
        map_func : callable
            Maps one partition to its partial result.

        comb_func : callable
            Associative merge of two partial results.

        depth : int, default 2
            Suggested depth of the merge tree.

        Returns
        -------
        result : object
            The merged partial results.
        """
        if depth < 1:
            raise ValueError(f"`depth` must be at least 1, got {depth}.")
        if self.n_partitions == 0:
            raise ValueError("Cannot aggregate a dataset with zero partitions.")

        partials = Parallel(n_jobs=self.n_jobs)(
            delayed(map_func)(part) for part in self.partitions)
        scale = max(int(ceil(len(partials) ** (1. / depth))), 2)

        with Parallel(n_jobs=self.n_jobs) as parallel:
            while len(partials) > scale:
                groups = [partials[i:i + scale]
                          for i in range(0, len(partials), scale)]
                partials = parallel(
                    delayed(_fold)(comb_func, group) for group in groups)
        return _fold(comb_func, partials)


def _fold(comb_func, partials):
    result = partials[0]
    for other in partials[1:]:
        result = comb_func(result, other)
    return result


def _to_block(partition):
    return np.asfortranarray(partition[1], dtype=np.float64)
