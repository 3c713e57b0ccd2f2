"""Error taxonomy shared by every vector index backend.

Callers can tell contract violations (``ConfigurationError``) apart from
failures that originate in the backend or its environment
(``IndexInternalError`` and subclasses) without importing backend libraries.
"""


class VectorIndexError(Exception):
    """Base class for all vector index errors."""


class ConfigurationError(VectorIndexError, ValueError):
    """The caller passed something the backend cannot accept (e.g. wrong filter type)."""


class IndexInternalError(VectorIndexError):
    """A backend call failed. The original exception is chained as ``__cause__``."""


class BackendUnavailableError(IndexInternalError):
    """Connection or transport failure talking to the backend."""


class IndexStateError(IndexInternalError):
    """The index lifecycle check failed for a reason other than a missing index."""


class IndexNotFoundError(IndexInternalError):
    """The operation touched an index that does not exist."""


class EncodingError(IndexInternalError):
    """Stored vector bytes could not be decoded."""
