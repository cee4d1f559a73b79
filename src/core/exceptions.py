class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class SeedNotFoundError(DomainError):
    """Exception raised when a seed is not in the caller's catalog."""

    pass


class CloneNotFoundError(DomainError):
    """Exception raised when a clone is not in the caller's catalog."""

    pass


class CatalogWriteError(DomainError):
    """Exception raised when the catalog store rejects a write.

    Kept apart from the AI extraction taxonomy so a failed commit can be
    retried without re-running the extraction.
    """

    pass


class ConversationNotFoundError(DomainError):
    """Exception raised when an assistant conversation expired or never existed."""

    pass
