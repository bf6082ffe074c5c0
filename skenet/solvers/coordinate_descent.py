import warnings
from numbers import Integral, Real

import numpy as np
from numba import njit
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils._param_validation import HasMethods, Interval

from skenet.correlation import ActiveSetCorrelation, populate_xx
from skenet.lambdas import compute_lambdas
from skenet.solvers.base import BaseOptimizer
from skenet.statistics import compute_xy
from skenet.utils.prox_funcs import ST
from skenet.utils.timer import span
from skenet.utils.validation import (check_lambda_index, check_n_rows,
                                     check_w_init, check_xy)


class CoordinateDescent(BaseOptimizer):
    r"""Elastic-net coordinate descent along a warm-started lambda path.

    For standardized features, it minimizes at every lambda of the path:

    .. math:: \frac{1}{2 n} \|y - X\beta\|_2^2 + \lambda \alpha \|\beta\|_1
        + \frac{\lambda (1 - \alpha)}{2} \|\beta\|_2^2

    The Gram matrix is never formed: correlations are computed for the active
    features only, when they enter the active set.

    Parameters
    ----------
    alpha : float, default 1.0
        Elastic-net mixing parameter, in ``(0, 1]``. ``1`` is the Lasso.

    lam_shrnk : float, default 1e-3
        Ratio of the smallest to the largest lambda of the full path.

    n_lambdas : int, default 100
        Number of lambdas in the full path.

    tol : float, default 1e-3
        Tolerance on the relative L1 change of the coefficients between sweeps.

    max_sweeps : int, default 100
        Maximum number of coordinate sweeps per lambda.

    depth : int, default 2
        Depth of the tree reductions over partitions.

    verbose : bool or int, default 0
        Amount of verbosity. 0/False is silent.

    observer : object | None, default None
        Instrumentation sink exposing a ``span(name)`` context manager, e.g.
        ``skenet.utils.Timer``.

    Attributes
    ----------
    lambdas_ : array, shape (n_solved,)
        Lambdas solved by the last call to ``optimize``.

    n_sweeps_ : array, shape (n_solved,)
        Number of sweeps run for every lambda.

    stop_crits_ : array, shape (n_solved,)
        Relative change of the coefficients at the last sweep of every lambda.

    n_active_ : int
        Size of the active set at the end of the path.
    """

    _parameter_constraints: dict = {
        "alpha": [Interval(Real, 0, 1, closed="right")],
        "lam_shrnk": [Interval(Real, 0, 1, closed="neither")],
        "n_lambdas": [Interval(Integral, 1, None, closed="left")],
        "tol": [Interval(Real, 0, None, closed="left")],
        "max_sweeps": [Interval(Integral, 1, None, closed="left")],
        "depth": [Interval(Integral, 1, None, closed="left")],
        "verbose": ["boolean", Interval(Integral, 0, 2, closed="both")],
        "observer": [HasMethods(["span"]), None],
    }

    def __init__(self, alpha=1., lam_shrnk=1e-3, n_lambdas=100, tol=1e-3,
                 max_sweeps=100, depth=2, verbose=0, observer=None):
        self.alpha = alpha
        self.lam_shrnk = lam_shrnk
        self.n_lambdas = n_lambdas
        self.tol = tol
        self.max_sweeps = max_sweeps
        self.depth = depth
        self.verbose = verbose
        self.observer = observer

    def compute_xy(self, data, n_features, n_rows):
        return compute_xy(data, n_features, n_rows, depth=self.depth)

    def _optimize(self, data, w_init, xy, n_features, n_rows, lambda_index):
        if lambda_index is None:
            n_lambdas = self.n_lambdas
        else:
            n_lambdas = check_lambda_index(lambda_index, self.n_lambdas) + 1

        lambdas, coefs, n_sweeps, stop_crits, n_active = _cd_path(
            data, w_init, xy, self.alpha, self.lam_shrnk, self.n_lambdas,
            n_lambdas, n_features, n_rows, tol=self.tol,
            max_sweeps=self.max_sweeps, depth=self.depth, verbose=self.verbose,
            observer=self.observer)

        self.lambdas_ = lambdas
        self.n_sweeps_ = n_sweeps
        self.stop_crits_ = stop_crits
        self.n_active_ = n_active

        if lambda_index is not None:
            return coefs[:, -1]
        return [(lambdas[t], coefs[:, t]) for t in range(len(lambdas))]


def run_cd(data, w_init, xy, alpha, lam_shrnk, n_lambdas, n_features, n_rows,
           tol=1e-3, max_sweeps=100, depth=2, verbose=0, observer=None):
    """Compute the full elastic-net path with coordinate descent.

    Parameters
    ----------
    data : PartitionedDataset
        Partitions of raw observations ``(y_part, X_part)``.

    w_init : array, shape (n_features,) | None
        Warm start for the first lambda. ``None`` means zeros.

    xy : array, shape (n_features,)
        Output of ``compute_xy``.

    alpha : float
        Elastic-net mixing parameter, in ``(0, 1]``.

    lam_shrnk : float
        Ratio of the smallest to the largest lambda.

    n_lambdas : int
        Number of lambdas in the path.

    n_features : int
        Number of features.

    n_rows : int
        Total number of observations.

    tol : float, optional
        Tolerance on the relative L1 change of the coefficients.

    max_sweeps : int, optional
        Maximum number of coordinate sweeps per lambda.

    depth : int, optional
        Depth of the tree reductions over partitions.

    verbose : bool or int, optional
        Amount of verbosity. 0/False is silent.

    observer : object | None, optional
        Instrumentation sink exposing ``span(name)``.

    Returns
    -------
    path : list of (float, array) tuples
        ``(lambda, coef)`` pairs in decreasing lambda order.
    """
    lambdas, coefs = _cd_path(
        data, w_init, xy, alpha, lam_shrnk, n_lambdas, n_lambdas, n_features,
        n_rows, tol=tol, max_sweeps=max_sweeps, depth=depth, verbose=verbose,
        observer=observer)[:2]
    return [(lambdas[t], coefs[:, t]) for t in range(len(lambdas))]


def run_cd_at_index(data, w_init, xy, alpha, lam_shrnk, n_lambdas, lambda_index,
                    n_features, n_rows, tol=1e-3, max_sweeps=100, depth=2,
                    verbose=0, observer=None):
    """Compute the coefficients at position ``lambda_index`` of the path.

    The path decays at the rate of a ``n_lambdas`` long path but stops at
    ``lambda_index``. The result equals ``run_cd(...)[lambda_index][1]``.

    Returns
    -------
    coef : array, shape (n_features,)
        Coefficients at ``lambda_index``.
    """
    lambda_index = check_lambda_index(lambda_index, n_lambdas)
    coefs = _cd_path(
        data, w_init, xy, alpha, lam_shrnk, n_lambdas, lambda_index + 1,
        n_features, n_rows, tol=tol, max_sweeps=max_sweeps, depth=depth,
        verbose=verbose, observer=observer)[1]
    return coefs[:, -1]


def _cd_path(data, w_init, xy, alpha, lam_shrnk, lambda_range, n_lambdas,
             n_features, n_rows, tol=1e-3, max_sweeps=100, depth=2, verbose=0,
             observer=None):
    if max_sweeps < 1:
        raise ValueError(f"`max_sweeps` must be at least 1, got {max_sweeps}.")
    n_rows = check_n_rows(n_rows)
    xy = check_xy(xy, n_features)
    beta = check_w_init(w_init, n_features)
    lambdas = compute_lambdas(xy, alpha, lam_shrnk, lambda_range, n_lambdas,
                              n_rows)

    coefs = np.zeros((n_features, n_lambdas), order='F')
    n_sweeps = np.zeros(n_lambdas, dtype=int)
    stop_crits = np.zeros(n_lambdas)

    blocks = data.to_blocks().persist()
    try:
        xx = ActiveSetCorrelation(n_features)
        seed = np.flatnonzero((np.abs(xy) > lambdas[0] * alpha) | (beta != 0))
        if seed.size:
            populate_xx(blocks, seed, xx, n_rows, observer=observer, depth=depth)
        if verbose:
            print(f"Initial active set size: {seed.size}")

        for t in range(n_lambdas):
            if verbose:
                to_print = "##### Computing lambda %d/%d" % (t + 1, n_lambdas)
                print("#" * len(to_print))
                print(to_print)
                print("#" * len(to_print))

            beta, n_new, n_sweeps[t], stop_crits[t] = cd_iter(
                blocks, beta, lambdas[t], alpha, xy, xx, n_rows, tol=tol,
                max_sweeps=max_sweeps, depth=depth, verbose=verbose,
                observer=observer)
            coefs[:, t] = beta

            if verbose and n_new:
                print(f"{n_new} new active features, {xx.n_active} in total")
            if stop_crits[t] > tol:
                warnings.warn(
                    f"Coordinate descent did not converge for lambda {t + 1}/"
                    f"{n_lambdas} ({lambdas[t]:.3e}). Relative change of the "
                    f"coefficients: {stop_crits[t]:.2e}, tolerance: {tol:.2e}. "
                    "Consider increasing `max_sweeps`.",
                    ConvergenceWarning)
    finally:
        blocks.unpersist()

    return lambdas, coefs, n_sweeps, stop_crits, xx.n_active


def cd_iter(blocks, beta, lmbda, alpha, xy, xx, n_rows, tol=1e-3, max_sweeps=100,
            depth=2, verbose=0, observer=None):
    """Run coordinate sweeps for a single lambda, growing ``xx`` if needed.

    The active set is checked for new features after every sweep, so that a
    nonzero coefficient always has its correlations in ``xx`` before it is
    updated again. A sweep that adds features never ends the loop, unless the
    sweep budget is exhausted.

    Parameters
    ----------
    blocks : PartitionedDataset
        Dense feature blocks, used to compute correlations of new features.

    beta : array, shape (n_features,)
        Warm start, updated inplace.

    lmbda : float
        Regularization strength.

    alpha : float
        Elastic-net mixing parameter.

    xy : array, shape (n_features,)
        Feature/response correlations.

    xx : ActiveSetCorrelation
        Correlations with the active features, updated inplace.

    n_rows : int
        Total number of observations.

    tol : float, optional
        Tolerance on the relative L1 change of the coefficients.

    max_sweeps : int, optional
        Maximum number of sweeps.

    Returns
    -------
    beta : array, shape (n_features,)
        The input array, holding the solution.

    n_new_active : int
        Number of features added to the active set.

    n_sweeps : int
        Number of sweeps run.

    delta_beta : float
        Relative L1 change of the coefficients at the last sweep.
    """
    ridge_shrink = 1. + lmbda * (1. - alpha)
    gamma = lmbda * alpha
    n_new_active = 0
    delta_beta = np.inf
    n_sweeps = 0

    for n_sweeps in range(1, max_sweeps + 1):
        beta_old = beta.copy()
        with span(observer, "coordinate_sweep"):
            _cd_sweep(xy, xx.values, xx.active, beta, gamma, ridge_shrink)
        delta_beta = _relative_change(beta, beta_old)

        if max(verbose - 1, 0):
            print(f"Sweep {n_sweeps}: delta beta {delta_beta:.2e}")

        # a nonzero inactive coefficient is only correct for the sweep that
        # moved it away from 0: its column must be in xx before the next one
        new_indices = xx.new_indices(beta)
        if new_indices.size:
            n_new_active += new_indices.size
            populate_xx(blocks, new_indices, xx, n_rows, observer=observer,
                        depth=depth)
            delta_beta = np.inf

        if delta_beta <= tol:
            break

    return beta, n_new_active, n_sweeps, delta_beta


def _relative_change(beta, beta_old):
    sum_diff = np.sum(np.abs(beta - beta_old))
    sum_beta = np.sum(np.abs(beta))
    if sum_beta == 0.:
        return 0. if sum_diff == 0. else np.inf
    return sum_diff / sum_beta


@njit
def _cd_sweep(xy, xx, active, beta, gamma, ridge_shrink):
    # inplace update of beta, cyclic over all features
    n_active = active.shape[0]
    for j in range(xy.shape[0]):
        xx_beta = 0.
        for k in range(n_active):
            xx_beta += xx[j, k] * beta[active[k]]
        beta[j] = ST(xy[j] - xx_beta + beta[j], gamma) / ridge_shrink
