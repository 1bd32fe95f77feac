"""Error kinds raised while building a tile pyramid."""


class TilerError(Exception):
    """Base class for all imagetiler errors."""


class InvalidDimension(TilerError, ValueError):
    """Tile size or source dimension is not a positive integer."""


class SourceReadError(TilerError):
    """Source image is missing, unreadable or cannot be decoded."""


class TileWriteError(TilerError, OSError):
    """A tile, canvas or output directory could not be written.

    Parameters
    ----------
    path : pathlib.Path or str
        Location that failed.
    reason : Exception, optional
        The underlying ``OSError``.
    """

    def __init__(self, path, reason=None):
        self.path = path
        self.reason = reason
        message = f"Could not write {path}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
