"""Custom exception classes for the SafetyHub records service.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class SafetyHubError(Exception):
    """Base exception for all SafetyHub errors."""

    pass


class RecordNotFoundError(SafetyHubError):
    """Raised when a record id is not present in the entity store."""

    def __init__(self, kind: str, record_id: str):
        """Initialize the exception.

        Args:
            kind: Entity kind, e.g. "assessment".
            record_id: The id that was not found.
        """
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} '{record_id}' not found")


class DuplicateRecordError(SafetyHubError):
    """Raised when a unique key (e.g. username) is already taken."""

    pass


class StorageOperationError(SafetyHubError):
    """Raised when a backing store fails (connectivity loss, constraint violation)."""

    pass


class UploadRejectedError(SafetyHubError):
    """Raised when an uploaded file is refused before it is stored."""

    pass


class ConfigurationError(SafetyHubError):
    """Raised when there is a configuration error."""

    pass
