from __future__ import annotations


class AccessError(Exception):
    """Base for request-scoped authentication/authorization failures.

    ``detail`` is the client-facing message; it never carries the reason a
    token or credential was rejected.
    """

    status_code = 401
    detail = "Not authenticated"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class AuthenticationError(AccessError):
    status_code = 401


class MalformedRequest(AuthenticationError):
    detail = "Malformed authorization header"


class MissingAuthorizationHeader(MalformedRequest):
    detail = "Authorization header required"


class MissingBearerPrefix(MalformedRequest):
    detail = "Bearer token required"


class InvalidCredentials(AuthenticationError):
    detail = "Invalid credentials"


class InvalidToken(AuthenticationError):
    detail = "Invalid token"


class AuthorizationError(AccessError):
    status_code = 403
    detail = "Forbidden"


class RoleMismatch(AuthorizationError):
    detail = "Insufficient role"


class ScopeMismatch(AuthorizationError):
    detail = "Shop is outside the resolved tenant"
