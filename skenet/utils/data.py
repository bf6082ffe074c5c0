import numpy as np
from sklearn.utils import check_random_state
from sklearn.preprocessing import StandardScaler


def make_linear_data(
        n_samples=100, n_features=50, rho=0., w_true=None, density=0.2,
        noise=0.1, random_state=None):
    r"""Generate a linear regression with standardized, correlated design.

    The data are generated according to:

    .. math ::
        y = X w^* + \sigma \epsilon

    where :math:`\epsilon` is standard Gaussian noise. The columns of ``X`` are
    standardized (mean 0, :math:`\frac{1}{n} \sum_i x_{ij}^2 = 1`) and ``y`` is
    centered, which is the scaling the coordinate descent updates assume.

    Parameters
    ----------
    n_samples : int
        Number of samples in the design matrix.

    n_features : int
        Number of features in the design matrix.

    rho : float
        Correlation :math:`\rho` between successive features, the expected
        cross correlation between features i and j being :math:`\rho^{|i-j|}`.
        Must be in :math:`[0, 1[`.

    w_true : np.array, shape (n_features,) | None
        True regression coefficients. If None, a sparse array with standard
        Gaussian non zero entries is simulated.

    density : float
        Proportion of non zero elements in w_true if the latter is simulated.

    noise : float
        Standard deviation :math:`\sigma` of the additive noise.

    random_state : int | RandomState instance | None (default)
        Determines random number generation for data generation.

    Returns
    -------
    X : ndarray, shape (n_samples, n_features)
        Standardized design matrix.

    y : ndarray, shape (n_samples,)
        Centered observation vector.

    w_true : ndarray, shape (n_features,)
        True regression vector of the model.
    """
    if not 0 <= rho < 1:
        raise ValueError("The correlation `rho` should be chosen in [0, 1[.")
    if not 0 < density <= 1:
        raise ValueError("The density should be chosen in ]0, 1].")
    if noise < 0:
        raise ValueError("The noise level should be non negative.")
    rng = check_random_state(random_state)

    if rho != 0:
        # AR(1) columns: X[:, j+1] = rho X[:, j] + sigma * eps_j
        sigma = np.sqrt(1 - rho * rho)
        U = rng.randn(n_samples)

        X = np.empty([n_samples, n_features], order='F')
        X[:, 0] = U
        for j in range(1, n_features):
            U *= rho
            U += sigma * rng.randn(n_samples)
            X[:, j] = U
    else:
        X = rng.randn(n_samples, n_features)

    X = np.asfortranarray(StandardScaler().fit_transform(X))

    if w_true is None:
        nnz = max(int(density * n_features), 1)
        w_true = np.zeros(n_features)
        support = rng.choice(n_features, nnz, replace=False)
        w_true[support] = rng.randn(nnz)
    else:
        w_true = np.asarray(w_true, dtype=np.float64)
        if w_true.shape != (n_features,):
            raise ValueError(
                f"`w_true` must have shape ({n_features},), got {w_true.shape}.")

    y = X @ w_true + noise * rng.randn(n_samples)
    y -= y.mean()
    return X, y, w_true
