"""Custom exceptions for the chunked transcriber."""


class AudioDecodeError(Exception):
    """Raised when an audio byte stream cannot be decoded into samples."""

    def __init__(self, file_name: str, cause: Exception | None = None):
        self.file_name = file_name
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to decode audio file '{file_name}'{detail}")


class TranscriptionServiceError(Exception):
    """Raised when the remote transcription call fails or returns garbage."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class KeyValueStoreError(Exception):
    """Raised when a key-value store operation fails."""

    def __init__(self, key: str, operation: str, cause: Exception | None = None):
        self.key = key
        self.operation = operation
        self.cause = cause
        super().__init__(f"Key-value {operation} failed for key '{key}'")


class InvalidStateTransitionError(Exception):
    """Raised when a pipeline run is asked to move to an unreachable state."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition pipeline from {current} to {requested}")


class PipelineInterruptedError(Exception):
    """Raised when a run ends without a complete transcript."""

    def __init__(
        self,
        file_name: str,
        status: str,
        reason: str | None = None,
        processed_chunks: int = 0,
        total_chunks: int = 0,
    ):
        self.file_name = file_name
        self.status = status
        self.reason = reason
        self.processed_chunks = processed_chunks
        self.total_chunks = total_chunks
        suffix = f": {reason}" if reason else ""
        super().__init__(
            f"Transcription of '{file_name}' ended in state {status} after "
            f"{processed_chunks}/{total_chunks} chunks{suffix}"
        )


class StorageDownloadError(Exception):
    """Raised when downloading a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to download '{object_name}' from storage")


class StorageUploadError(Exception):
    """Raised when uploading a file to storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(f"Failed to upload '{object_name}' to storage")


class EventPublishError(Exception):
    """Raised when publishing an event to the message broker fails."""

    def __init__(self, routing_key: str, cause: Exception | None = None):
        self.routing_key = routing_key
        self.cause = cause
        super().__init__(f"Failed to publish event with routing key '{routing_key}'")
