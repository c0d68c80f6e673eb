class SyncException(Exception):
    """Base exception for asset synchronization operations."""

    def __init__(self, message: str, details: str = None):
        """
        Initialize synchronization exception with message and optional details.

        Args:
            message: Error message describing the exception
            details: Optional additional error details
        """
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigurationException(SyncException):
    """Exception raised when a handler is invoked without its required context."""

    def __init__(self, message: str):
        super().__init__(message)


class FormatException(SyncException):
    """Exception raised when a type metadata token cannot be decoded."""

    def __init__(self, token: str, reason: str):
        """
        Initialize format exception.

        Args:
            token: Raw token that failed to decode
            reason: Why the token was rejected
        """
        message = f"Malformed type metadata '{token}': {reason}"
        super().__init__(message)
        self.token = token
        self.reason = reason


class UnsupportedTypeException(SyncException):
    """Exception raised when no asset handler exists for a type metadata token."""

    def __init__(self, type_metadata: str, details: str = None):
        message = f"No asset handler registered for type '{type_metadata}'"
        super().__init__(message, details)
        self.type_metadata = type_metadata


class UnsupportedFormatException(SyncException):
    """Exception raised for PIM video formats the catalog cannot link to."""

    def __init__(self, video_format: str):
        message = f"Unsupported video format '{video_format}', only youtube and vimeo are supported"
        super().__init__(message)
        self.video_format = video_format


class EntityNotFoundException(SyncException):
    """Exception raised when a catalog entity cannot be resolved."""

    def __init__(self, entity_type: str, identifier: str):
        """
        Initialize entity not found exception.

        Args:
            entity_type: Kind of entity that was looked up
            identifier: Identifier used for the lookup
        """
        message = f"{entity_type} with ID '{identifier}' not found"
        super().__init__(message)
        self.entity_type = entity_type
        self.identifier = identifier


class NotYetPublishedException(SyncException):
    """Exception raised when an asset targets a product that is not in the catalog yet."""

    def __init__(self, target_entity_id: str):
        message = (
            f"Unable to import video. Related product with ID '{target_entity_id}' is not published yet"
        )
        super().__init__(message)
        self.target_entity_id = target_entity_id


class VideoApiException(SyncException):
    """Exception raised when a video provider API call cannot be completed."""

    def __init__(self, provider: str, reason: str, details: str = None):
        """
        Initialize video API exception.

        Args:
            provider: Video provider name (youtube, vimeo)
            reason: Short failure cause (network, timeout, malformed_json, http_status)
            details: Detailed error information
        """
        message = f"Video API call to '{provider}' failed: {reason}"
        super().__init__(message, details)
        self.provider = provider
        self.reason = reason


class ThumbnailFetchException(SyncException):
    """Exception raised when a video preview image cannot be downloaded."""

    def __init__(self, url: str, details: str = None):
        message = "Could not get preview image information. Please check your connection and try again."
        super().__init__(message, details)
        self.url = url


class InputException(SyncException):
    """Exception raised for invalid media gallery input."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message, details)


class StateException(SyncException):
    """Exception raised when the catalog ends up in an unexpected state."""

    def __init__(self, message: str, details: str = None):
        super().__init__(message, details)


class QueueException(SyncException):
    """Exception raised for queue store operations."""

    def __init__(self, operation: str, details: str):
        """
        Initialize queue exception.

        Args:
            operation: Queue operation that failed
            details: Detailed error information
        """
        message = f"Queue operation '{operation}' failed"
        super().__init__(message, details)
        self.operation = operation


class DuplicateQueueEntryException(QueueException):
    """Exception raised when an equivalent entry is already pending or processing."""

    def __init__(self, target_entity_id: str, type_metadata: str, action: str):
        super().__init__(
            "save",
            f"Entry for target '{target_entity_id}' type '{type_metadata}' action '{action}' is already queued"
        )
        self.target_entity_id = target_entity_id
        self.type_metadata = type_metadata
        self.action = action
