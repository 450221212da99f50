class AppBuilderError(Exception):
    """Base exception for the App Builder backend.

    Subclasses that reach the HTTP layer carry a machine-readable ``code``
    and the ``status_code`` the global handler responds with.
    """

    code = "internal"
    status_code = 500


class InvalidArgumentError(AppBuilderError):
    """Raised when request input fails validation."""

    code = "invalid_argument"
    status_code = 400


class NotFoundError(AppBuilderError):
    """Raised when a requested resource does not exist."""

    code = "not_found"
    status_code = 404


class JobNotFoundError(NotFoundError):
    """Raised when a job id is unknown to the job store."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__("Job not found")


class ResourceExhaustedError(AppBuilderError):
    """Raised when a client is over its admission rate limit."""

    code = "resource_exhausted"
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        self.retry_after = retry_after
        super().__init__(message)


class DeadlineExceededError(AppBuilderError):
    """Raised when a generation job does not finish within the wait window."""

    code = "deadline_exceeded"
    status_code = 504


class InternalError(AppBuilderError):
    """Raised when a job failed inside the worker."""

    pass


class LLMServiceError(AppBuilderError):
    """Raised when an LLM backend call fails."""

    pass


class InvalidTransitionError(AppBuilderError):
    """Raised when a job state change would move backwards or leave a terminal state."""

    def __init__(self, job_id: str, current: str, requested: str):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid transition for job '{job_id}': {current} -> {requested}")
