from .prox_funcs import ST  # noqa F401
from .data import make_linear_data  # noqa F401
from .timer import Timer, span  # noqa F401
