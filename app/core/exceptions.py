"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class InvalidCredentialsException(UnauthorizedException):
    """Unknown account or wrong password.

    The message is the same for both cases so callers cannot probe for
    existing usernames.
    """

    def __init__(self, message: str = "Invalid username or password."):
        """Initialize with 401 status code."""
        super().__init__(message)


class IncorrectPasswordException(InvalidCredentialsException):
    """Current password mismatch on an authenticated password change."""

    def __init__(self, message: str = "Current password is incorrect."):
        """Initialize with 400 status code."""
        super().__init__(message)
        self.status_code = 400


class AccountLockedException(UnauthorizedException):
    """Account temporarily locked after repeated failed logins."""

    def __init__(
        self,
        message: str = (
            "Account is temporarily locked due to too many failed login attempts. "
            "Please try again later."
        ),
    ):
        """Initialize with 401 status code."""
        super().__init__(message)


class AccountInactiveException(UnauthorizedException):
    """Account status is inactive or suspended."""

    def __init__(
        self,
        message: str = "Account is inactive or suspended. Please contact the system administrator.",
    ):
        """Initialize with 401 status code."""
        super().__init__(message)


class InvalidTokenException(UnauthorizedException):
    """Bearer token is missing, malformed, mis-signed, expired or orphaned."""

    def __init__(self, message: str = "Invalid token."):
        """Initialize with 401 status code."""
        super().__init__(message)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(BadRequestException):
    """Duplicate username or email."""

    def __init__(self, message: str = "Username or email already exists."):
        """Initialize with 400 status code."""
        super().__init__(message)


class ValidationException(BadRequestException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 400 status code."""
        super().__init__(message)


class HashingException(AppException):
    """Password hashing backend failure."""

    def __init__(self, message: str = "Password hashing failed"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)
