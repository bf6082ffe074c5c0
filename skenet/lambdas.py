import numpy as np

from skenet.utils.validation import check_n_rows


def compute_lambdas(xy, alpha, lam_shrnk, lambda_range, n_lambdas, n_rows=None):
    r"""Compute a geometrically decreasing regularization path.

    The path starts one step below

    .. math:: \lambda_{\max} = \max_j |xy_j| / \alpha

    and decays by :math:`r = \exp(\log(lam\_shrnk) / lambda\_range)` per step:

    .. math:: \lambda_i = \lambda_{\max} r^{i + 1}, \quad i = 0, \dots, n\_lambdas - 1

    Parameters
    ----------
    xy : array, shape (n_features,)
        Correlation between features and response, see ``compute_xy``.

    alpha : float
        Elastic-net mixing parameter, in ``(0, 1]``.

    lam_shrnk : float
        Ratio of the smallest to the largest lambda over ``lambda_range``
        steps, in ``(0, 1)``.

    lambda_range : int
        Length of the full path, which fixes the decay rate.

    n_lambdas : int
        Number of lambdas actually returned. Paths sharing ``lambda_range`` are
        prefixes of one another, bit for bit.

    n_rows : int, optional
        Number of observations. Only validated.

    Returns
    -------
    lambdas : array, shape (n_lambdas,)
        Strictly decreasing positive lambdas.
    """
    if not 0 < alpha <= 1:
        raise ValueError(
            f"`alpha` must be in (0, 1] to define lambda_max, got {alpha}.")
    if not 0 < lam_shrnk < 1:
        raise ValueError(f"`lam_shrnk` must be in (0, 1), got {lam_shrnk}.")
    if lambda_range < 1:
        raise ValueError(f"`lambda_range` must be at least 1, got {lambda_range}.")
    if n_lambdas < 1:
        raise ValueError(f"`n_lambdas` must be at least 1, got {n_lambdas}.")
    if n_rows is not None:
        check_n_rows(n_rows)

    max_xy = np.max(np.abs(xy))
    if max_xy == 0:
        raise ValueError(
            "`xy` is identically zero: every coefficient is zero for any lambda.")

    lambda_max = max_xy / alpha
    ratio = np.exp(np.log(lam_shrnk) / lambda_range)

    # cumulative product keeps shorter paths exact prefixes of longer ones
    return lambda_max * np.cumprod(np.full(n_lambdas, ratio))
