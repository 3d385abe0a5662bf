"""
Domain-specific exceptions for the accounts app.

Views translate them into `{"error": ...}` responses: credential problems
become 401/403, everything else 400 (or 404 for unknown users).
"""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Sign-up or team-member creation with an email that is already taken."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    pass


class InactiveAccountError(AccountsServiceError):
    """Sign-in to a deactivated team member or portal account."""
    pass


class InvalidTokenError(AccountsServiceError):
    """Verification or password-reset token is unknown or already used."""
    pass


class UserNotFoundError(AccountsServiceError):
    pass


class PasswordConfirmationError(AccountsServiceError):
    """Account deletion with a wrong current password."""
    pass


class CannotDeactivateSelfError(AccountsServiceError):
    """An admin tried to deactivate their own account."""
    pass
