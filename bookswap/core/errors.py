"""Domain errors raised by the services and mapped to HTTP responses in main."""


class BookSwapError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def name(self) -> str:
        return type(self).__name__.replace("Error", "")


class ValidationError(BookSwapError):
    status_code = 400


class AuthError(BookSwapError):
    """Missing token (401), bad token or bad credentials (401/403)."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


class AuthorizationError(BookSwapError):
    status_code = 403


class NotFoundError(BookSwapError):
    status_code = 404


class ConflictError(BookSwapError):
    status_code = 409
