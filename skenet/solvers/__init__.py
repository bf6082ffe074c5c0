from .base import BaseOptimizer
from .coordinate_descent import CoordinateDescent, cd_iter, run_cd, run_cd_at_index


__all__ = [BaseOptimizer, CoordinateDescent, cd_iter, run_cd, run_cd_at_index]
