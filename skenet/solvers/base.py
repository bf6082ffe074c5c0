from abc import abstractmethod, ABC

from sklearn.base import BaseEstimator


class BaseOptimizer(BaseEstimator, ABC):
    """Base class for regularization path optimizers.

    Hyperparameters are constructor arguments. ``get_params`` and
    ``set_params`` are inherited from scikit-learn's ``BaseEstimator`` and
    parameters are checked against ``_parameter_constraints`` at every call
    of :meth:`optimize`.

    Attributes
    ----------
    _parameter_constraints : dict
        scikit-learn constraints for every constructor parameter.
    """

    _parameter_constraints: dict

    @abstractmethod
    def compute_xy(self, data, n_features, n_rows):
        """Compute the feature/response correlation vector.

        Parameters
        ----------
        data : PartitionedDataset
            Partitions of raw observations ``(y_part, X_part)``.

        n_features : int
            Number of features.

        n_rows : int
            Total number of observations.

        Returns
        -------
        xy : array, shape (n_features,)
            ``X.T @ y / n_rows``.
        """

    @abstractmethod
    def _optimize(self, data, w_init, xy, n_features, n_rows, lambda_index):
        """Solve along the regularization path.

        Parameters
        ----------
        data : PartitionedDataset
            Partitions of raw observations ``(y_part, X_part)``.

        w_init : array, shape (n_features,) | None
            Warm start for the first lambda.

        xy : array, shape (n_features,)
            Output of :meth:`compute_xy`.

        n_features : int
            Number of features.

        n_rows : int
            Total number of observations.

        lambda_index : int | None
            If given, only the solution at this position of the path is
            returned.

        Returns
        -------
        path : list of (float, array) tuples | array, shape (n_features,)
            ``(lambda, coef)`` pairs in decreasing lambda order, or the
            coefficients at ``lambda_index``.
        """

    def optimize(self, data, w_init, xy, n_features, n_rows, lambda_index=None):
        """Validate the hyperparameters, then run ``_optimize``.

        Examples
        --------
        >>> ...
        >>> path = optimizer.optimize(data, None, xy, n_features, n_rows)
        >>> coef = optimizer.optimize(data, None, xy, n_features, n_rows,
        ...                           lambda_index=10)
        """
        self._validate_params()
        return self._optimize(data, w_init, xy, n_features, n_rows, lambda_index)
