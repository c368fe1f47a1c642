"""Exception hierarchy.

Nothing here is fatal: callers turn each of these into a visible message.
"""


class CatCircleError(Exception):
    """Base class for all CatCircle errors."""


class ApiError(CatCircleError):
    """Backend or storage request failed (network error or non-2xx status)."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AssistantResponseError(CatCircleError):
    """The generative API returned output that does not match the declared schema."""


class ValidationFailed(CatCircleError):
    """User input was rejected; no state was mutated."""


class AuthError(ValidationFailed):
    pass


class PurchaseError(ValidationFailed):
    pass
