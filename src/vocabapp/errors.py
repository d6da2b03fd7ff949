"""Error kinds raised by the progress and quiz services."""


class VocabAppError(Exception):
    """Base class for all service errors."""


class NotFoundError(VocabAppError, ValueError):
    """A progress record, word, lesson or quiz does not exist."""


class ForbiddenError(VocabAppError):
    """The record exists but belongs to another learner."""


class ValidationError(VocabAppError, ValueError):
    """Malformed or out-of-range input."""


class InvalidArgumentError(VocabAppError, ValueError):
    """The arguments cannot produce a result, e.g. an empty word set for a quiz."""


class StoreUnavailableError(VocabAppError):
    """The backing store failed (connection loss, timeout, ...)."""


class ConcurrentUpdateError(VocabAppError):
    """A record was changed by someone else between read and write."""
