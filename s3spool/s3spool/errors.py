"""
Error taxonomy for the spooler.

Every steady-state error is raised where it happens and handled by the
event loop, which logs it and waits for the next trigger. Only
ConfigError is fatal, and only at startup.
"""


class SpoolError(Exception):
    """Base class for all s3spool errors."""


class ConfigError(SpoolError):
    """Invalid configuration (bad region, half-set credentials, ...)."""


class SpoolWriteError(SpoolError):
    """A local staging operation failed (mkdir, create, append, read, remove)."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class EncodingError(SpoolError):
    """A record could not be encoded into a byte payload."""


class UploadError(SpoolError):
    """The remote store rejected or failed the write."""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class NothingToUploadError(SpoolError):
    """
    Raised when a trigger fires with an empty buffer and no spool file.

    Not a real failure: it tells the caller there was nothing to do.
    """


class SpoolCleanupError(SpoolWriteError):
    """The upload succeeded but the spool file could not be removed.

    The retained file is re-sent on the next trigger (at-least-once).
    """

    def __init__(self, message: str, path=None, key: str = ""):
        super().__init__(message, path)
        self.key = key
