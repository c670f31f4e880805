"""Error taxonomy shared by the draw store, engine and services."""


class RollTheWorldError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(RollTheWorldError):
    """Store endpoint or credential is missing or unusable. Not retryable."""


class ConnectivityError(RollTheWorldError):
    """The store could not be reached or timed out. Callers may retry.

    Read paths may fall back to the local cache on this error; the roll
    (write) path never does.
    """


class IntegrityError(RollTheWorldError):
    """Store state contradicts an invariant of the draw model.

    Never retried automatically, since a retry could insert twice.
    """


class NotFoundError(RollTheWorldError):
    """The requested draw does not exist (for example, nothing rolled yet today)."""


__all__ = [
    "RollTheWorldError",
    "ConfigurationError",
    "ConnectivityError",
    "IntegrityError",
    "NotFoundError",
]
