class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class UserNotFound(DomainError):
    """No user matches the lookup criteria (e.g., email)."""

    pass


class UserAlreadyExists(DomainError):
    """User with the given email already exists."""

    pass


class AlreadyVerified(DomainError):
    """The account's email address is already verified."""

    pass


class InvalidOrExpiredCode(DomainError):
    """
    The one-time code is wrong, expired, missing or locked out.
    These cases are deliberately not told apart.
    """

    pass


class InvalidCredentials(DomainError):
    """Email/password pair did not match."""

    pass


class EmailNotVerified(DomainError):
    """Password login attempted before the email was verified."""

    pass


class DevModeDisabled(DomainError):
    """A development-only operation was called outside development mode."""

    pass
