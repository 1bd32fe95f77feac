"""Progress reporting for tile generation.

The tiler reports to a ``ProgressSink`` and never prints on its own.
``TqdmProgress`` draws a progress bar per zoom level, ``NullProgress``
keeps quiet (library use, tests).
"""
from threading import Lock

from tqdm import tqdm


class ProgressSink:
    """Receiver for progress updates of one unit of work (a zoom level)."""

    def start(self, total, desc=None):
        pass

    def advance(self, n=1):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class NullProgress(ProgressSink):
    """Sink that discards all updates."""


class TqdmProgress(ProgressSink):
    """Sink rendering a tqdm progress bar.

    Parameters
    ----------
    unit : str, optional
        Unit label shown by tqdm, by default "tile".
    **tqdm_kwargs
        Passed on to ``tqdm.tqdm``.
    """

    def __init__(self, unit="tile", **tqdm_kwargs):
        self.unit = unit
        self.tqdm_kwargs = tqdm_kwargs
        self.bar = None
        # advance() is called from worker threads
        self._lock = Lock()

    def start(self, total, desc=None):
        self.bar = tqdm(total=total, desc=desc, unit=self.unit, **self.tqdm_kwargs)

    def advance(self, n=1):
        with self._lock:
            if self.bar is not None:
                self.bar.update(n)

    def close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None


def progress_factory(verbose=True):
    """Return a callable producing one fresh sink per zoom level."""
    if verbose:
        return TqdmProgress
    return NullProgress
