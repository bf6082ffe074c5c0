import pytest

import numpy as np
from scipy import sparse

from skenet.dataset import PartitionedDataset
from skenet.utils.data import make_linear_data


X, y, _ = make_linear_data(n_samples=53, n_features=7, random_state=0)


@pytest.mark.parametrize("n_partitions", [1, 2, 5, 53])
def test_from_arrays_partitioning(n_partitions):
    data = PartitionedDataset.from_arrays(X, y, n_partitions=n_partitions)

    assert data.n_partitions == n_partitions
    assert data.count() == len(y)
    sizes = [len(y_part) for y_part, _ in data.partitions]
    assert max(sizes) - min(sizes) <= 1

    np.testing.assert_array_equal(
        np.vstack([X_part for _, X_part in data.partitions]), X)
    np.testing.assert_array_equal(
        np.concatenate([y_part for y_part, _ in data.partitions]), y)


def test_from_arrays_sparse():
    X_sparse = sparse.csc_matrix(X * (np.abs(X) > 0.5))
    data = PartitionedDataset.from_arrays(X_sparse, y, n_partitions=3)

    np.testing.assert_array_equal(
        np.vstack([X_part for _, X_part in data.partitions]), X_sparse.toarray())


def test_from_rows():
    rows = [(y[i], X[i]) for i in range(len(y))]
    data = PartitionedDataset.from_rows(rows, n_partitions=4)

    np.testing.assert_array_equal(
        np.vstack([X_part for _, X_part in data.partitions]), X)


@pytest.mark.parametrize("n_partitions", [0, 54])
def test_invalid_n_partitions(n_partitions):
    with pytest.raises(ValueError, match="`n_partitions` must be in"):
        PartitionedDataset.from_arrays(X, y, n_partitions=n_partitions)


def test_inconsistent_lengths():
    with pytest.raises(ValueError):
        PartitionedDataset.from_arrays(X, y[:-1])


@pytest.mark.parametrize("n_partitions", [1, 2, 3, 10, 17])
@pytest.mark.parametrize("depth", [1, 2, 3])
def test_tree_aggregate_preserves_order(n_partitions, depth):
    data = PartitionedDataset([[i] for i in range(n_partitions)])

    # list concatenation is not commutative: checks merge order
    merged = data.tree_aggregate(list, lambda a, b: a + b, depth=depth)
    assert merged == list(range(n_partitions))

    total = data.tree_aggregate(lambda part: part[0], lambda a, b: a + b,
                                depth=depth)
    assert total == n_partitions * (n_partitions - 1) // 2


def test_tree_aggregate_errors():
    with pytest.raises(ValueError, match="zero partitions"):
        PartitionedDataset([]).tree_aggregate(list, lambda a, b: a + b)
    with pytest.raises(ValueError, match="`depth` must be at least 1"):
        PartitionedDataset([[0]]).tree_aggregate(list, lambda a, b: a + b, depth=0)


def test_persist_caches_partitions():
    n_calls = []

    def func(part):
        n_calls.append(1)
        return part[1].sum()

    data = PartitionedDataset.from_arrays(X, y, n_partitions=4)
    mapped = data.map_partitions(func)

    mapped.partitions
    mapped.partitions
    assert len(n_calls) == 8

    mapped.persist()
    assert mapped.is_persisted
    first = mapped.partitions
    second = mapped.partitions
    assert len(n_calls) == 12
    assert first is second

    mapped.unpersist()
    assert not mapped.is_persisted
    mapped.partitions
    assert len(n_calls) == 16


def test_to_blocks():
    data = PartitionedDataset.from_arrays(X, y, n_partitions=3)
    blocks = data.to_blocks()

    assert blocks.n_partitions == 3
    for block, (_, X_part) in zip(blocks.partitions, data.partitions):
        assert block.flags.f_contiguous
        np.testing.assert_array_equal(block, X_part)


if __name__ == '__main__':
    pass
