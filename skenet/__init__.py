__version__ = '0.1dev'

from skenet.dataset import PartitionedDataset  # noqa F401
from skenet.statistics import compute_xy  # noqa F401
from skenet.lambdas import compute_lambdas  # noqa F401
from skenet.correlation import (  # noqa F401
    ActiveSetCorrelation, x_correlation, populate_xx,
)
from skenet.solvers import (  # noqa F401
    CoordinateDescent, cd_iter, run_cd, run_cd_at_index,
)
