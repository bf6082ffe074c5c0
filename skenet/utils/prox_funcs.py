from numba import njit


@njit
def ST(x, u):
    """Soft-thresholding of scalar x at level u.

    Returns ``0`` whenever ``|x| <= u``, and ``sign(x) * (|x| - u)`` otherwise.
    """
    if x > u:
        return x - u
    elif x < - u:
        return x + u
    else:
        return 0.
