"""
Client-visible error taxonomy.

Every error carries the HTTP status it maps to and the message shown to the
caller. The exception handlers in `devconnector.main` render them as
`{"msg": ...}`; anything outside this hierarchy becomes a generic 500.
"""


class ApiError(Exception):
    status_code = 500
    msg = "Server error"

    def __init__(self, msg: str | None = None):
        if msg is not None:
            self.msg = msg
        super().__init__(self.msg)


class Unauthenticated(ApiError):
    status_code = 401
    msg = "Token is not valid"


class Unauthorized(ApiError):
    status_code = 401
    msg = "Unauthorized"


# ── Not found ─────────────────────────────────────────────────────────────

class NotFound(ApiError):
    status_code = 404
    msg = "Not found"


class PostNotFound(NotFound):
    msg = "Post not found"


class CommentNotFound(NotFound):
    msg = "Comment not found"


class ProfileNotFound(NotFound):
    msg = "Profile not found"


class UserNotFound(NotFound):
    msg = "User not found"


# ── Business-rule rejections ──────────────────────────────────────────────

class BusinessRuleError(ApiError):
    status_code = 400
    msg = "Request rejected"


class AlreadyLiked(BusinessRuleError):
    msg = "Post already liked"


class NotLiked(BusinessRuleError):
    msg = "Post has not yet been liked"


class UserAlreadyExists(BusinessRuleError):
    msg = "User already exists"


class InvalidCredentials(BusinessRuleError):
    msg = "Invalid Credentials"


class InternalError(ApiError):
    status_code = 500
    msg = "Server error"
