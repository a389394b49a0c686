"""Error taxonomy shared by services and routers.

Every error carries the HTTP status it is rendered with and a message that
is safe to show to the client.
"""


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized request"


class TokenReused(Unauthorized):
    default_message = "Refresh token is expired or used"


class IdentityNotFound(Unauthorized):
    default_message = "Invalid access token"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class TargetNotFound(NotFound):
    default_message = "Target does not exist"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflicting concurrent update"


class Unavailable(AppError):
    status_code = 503
    default_message = "Storage is temporarily unavailable"


class Internal(AppError):
    status_code = 500
    default_message = "Internal server error"
