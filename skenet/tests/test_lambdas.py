import pytest
from itertools import product

import numpy as np

from skenet.lambdas import compute_lambdas
from skenet.utils.data import make_linear_data


X, y, _ = make_linear_data(n_samples=80, n_features=15, random_state=0)
xy = X.T @ y / len(y)


@pytest.mark.parametrize("alpha, lam_shrnk, lambda_range",
                         product([1., 0.5, 0.1], [1e-3, 1e-2, 0.5], [1, 10, 100]))
def test_lambda_path_formula(alpha, lam_shrnk, lambda_range):
    lambdas = compute_lambdas(xy, alpha, lam_shrnk, lambda_range, lambda_range,
                              len(y))

    lambda_max = np.max(np.abs(xy)) / alpha
    ratio = np.exp(np.log(lam_shrnk) / lambda_range)
    expected = lambda_max * ratio ** np.arange(1, lambda_range + 1)

    np.testing.assert_allclose(lambdas, expected, rtol=1e-12)
    assert np.all(lambdas > 0)
    assert np.all(np.diff(lambdas) < 0)
    # lambda_max itself is excluded
    assert lambdas[0] < lambda_max


def test_full_range_reaches_lam_shrnk():
    lambdas = compute_lambdas(xy, 1., 1e-3, 100, 100)
    np.testing.assert_allclose(lambdas[-1], 1e-3 * np.max(np.abs(xy)), rtol=1e-10)


@pytest.mark.parametrize("n_lambdas", [1, 7, 50])
def test_shorter_path_is_prefix(n_lambdas):
    full = compute_lambdas(xy, 0.7, 1e-3, 50, 50)
    short = compute_lambdas(xy, 0.7, 1e-3, 50, n_lambdas)

    np.testing.assert_array_equal(short, full[:n_lambdas])


@pytest.mark.parametrize("alpha, lam_shrnk, lambda_range, n_lambdas", [
    (0., 1e-3, 10, 10),
    (-1., 1e-3, 10, 10),
    (1.5, 1e-3, 10, 10),
    (1., 0., 10, 10),
    (1., 1., 10, 10),
    (1., 1e-3, 0, 10),
    (1., 1e-3, 10, 0),
])
def test_invalid_parameters(alpha, lam_shrnk, lambda_range, n_lambdas):
    with pytest.raises(ValueError):
        compute_lambdas(xy, alpha, lam_shrnk, lambda_range, n_lambdas)


def test_zero_xy():
    with pytest.raises(ValueError, match="identically zero"):
        compute_lambdas(np.zeros(5), 1., 1e-3, 10, 10)


def test_invalid_n_rows():
    with pytest.raises(ValueError, match="`n_rows` must be at least 1"):
        compute_lambdas(xy, 1., 1e-3, 10, 10, n_rows=0)


if __name__ == '__main__':
    pass
