from numbers import Integral

import numpy as np


def check_n_rows(n_rows):
    """Check that the number of rows is a strictly positive integer.

    Parameters
    ----------
    n_rows : int
        Total number of observations in the dataset.

    Returns
    -------
    n_rows : int
        The validated number of rows.

    Raises
    ------
    ValueError
        if ``n_rows`` is not an integer or is smaller than 1.
    """
    if isinstance(n_rows, (bool, np.bool_)) or not isinstance(n_rows, Integral):
        raise ValueError(
            f"`n_rows` must be an integer, got {n_rows!r}.")
    if n_rows < 1:
        raise ValueError(
            f"`n_rows` must be at least 1, got {n_rows}.")
    return int(n_rows)


def check_xy(xy, n_features):
    """Check the sufficient statistics vector against ``n_features``.

    Parameters
    ----------
    xy : array-like, shape (n_features,)
        Correlation between every feature and the response.

    n_features : int
        Number of features.

    Returns
    -------
    xy : array, shape (n_features,)
        ``xy`` as a contiguous float64 array.

    Raises
    ------
    ValueError
        if ``xy`` is not one-dimensional of length ``n_features``, or holds
        non-finite values.
    """
    xy = np.ascontiguousarray(xy, dtype=np.float64)
    if xy.ndim != 1 or xy.shape[0] != n_features:
        raise ValueError(
            f"`xy` must have shape ({n_features},), got {xy.shape}.")
    if not np.all(np.isfinite(xy)):
        raise ValueError("`xy` contains NaN or infinite values.")
    return xy


def check_w_init(w_init, n_features):
    """Return a float64 copy of ``w_init``, or zeros when it is None.

    The copy is the vector the solver mutates in place, so callers never see
    their array modified.
    """
    if w_init is None:
        return np.zeros(n_features)

    w = np.array(w_init, dtype=np.float64)
    if w.ndim != 1 or w.shape[0] != n_features:
        raise ValueError(
            f"`w_init` must have shape ({n_features},), got {w.shape}.")
    if not np.all(np.isfinite(w)):
        raise ValueError("`w_init` contains NaN or infinite values.")
    return w


def check_lambda_index(lambda_index, n_lambdas):
    """Check that ``lambda_index`` is a position of a ``n_lambdas`` long path.

    Raises
    ------
    ValueError
        if ``lambda_index`` is not an integer in ``[0, n_lambdas)``.
    """
    if (isinstance(lambda_index, (bool, np.bool_)) or
            not isinstance(lambda_index, Integral)):
        raise ValueError(
            f"`lambda_index` must be an integer, got {lambda_index!r}.")
    if not 0 <= lambda_index < n_lambdas:
        raise ValueError(
            f"`lambda_index` must be in [0, {n_lambdas}), got {lambda_index}.")
    return int(lambda_index)
