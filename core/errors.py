"""Custom exceptions for generation and summarization."""


class GenerationError(Exception):
    """Base class for classified text-generation failures."""

    retryable: bool = True
    user_message: str = "Summarization failed. Please try again."

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RateLimitedError(GenerationError):
    """Backend rate limit or quota exhausted."""

    user_message = "AI service is currently busy. Please try again in a few moments."

    def __init__(self, message: str, status_code: int | None = None, quota: bool = False):
        super().__init__(message, status_code)
        self.quota = quota
        if quota:
            self.user_message = "AI service quota exceeded. Please try again later."


class AuthInvalidError(GenerationError):
    """Backend rejected the credentials."""

    retryable = False
    user_message = "AI service credentials are invalid. Contact the administrator."


class RequestTooLargeError(GenerationError):
    """Prompt exceeds the backend's token or context-length limit."""

    retryable = False
    user_message = (
        "Document content is too large for processing. "
        "Please use a smaller document or contact support."
    )


class GenerationTimeoutError(GenerationError):
    """Backend did not answer in time."""

    user_message = (
        "AI service timeout. The document may be too complex. "
        "Please try with a simpler document."
    )


class UnknownGenerationError(GenerationError):
    """Any backend failure that matched no known category."""


class SummarizationFailed(Exception):
    """No usable summary could be produced for the document."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class RecordNotFoundError(Exception):
    """Summary record does not exist in the record store."""

    def __init__(self, summary_id: str):
        self.summary_id = summary_id
        super().__init__(f"Summary record not found: {summary_id}")
