import time
from collections import defaultdict
from contextlib import contextmanager, nullcontext


class Timer:
    """Accumulate wall-clock time spent in named operations.

    Instances are passed to the solver as ``observer``. The solver only ever
    calls ``observer.span(name)``, so any object exposing such a context
    manager can be used instead.

    Attributes
    ----------
    timings : dict
        Total elapsed seconds per operation name.

    counts : dict
        Number of completed spans per operation name.
    """

    def __init__(self):
        self.timings = defaultdict(float)
        self.counts = defaultdict(int)

    @contextmanager
    def span(self, name):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[name] += time.perf_counter() - start
            self.counts[name] += 1

    def __repr__(self):
        lines = [f"{name}: {self.timings[name]:.4f}s ({self.counts[name]} calls)"
                 for name in sorted(self.timings)]
        return "Timer(" + ", ".join(lines) + ")"


def span(observer, name):
    """Return ``observer.span(name)``, or a no-op context if observer is None."""
    if observer is None:
        return nullcontext()
    return observer.span(name)
