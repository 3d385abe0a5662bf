"""Account services: authentication and team-member administration."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
    PasswordConfirmationError,
    CannotDeactivateSelfError,
)
from .authentication import (
    landing_area,
    register_user,
    authenticate_user,
    verify_user_email,
    request_password_reset,
    confirm_password_reset,
)
from .account_management import (
    delete_user_account,
    create_team_member,
    update_team_member,
    deactivate_team_member,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'InvalidTokenError',
    'UserNotFoundError',
    'PasswordConfirmationError',
    'CannotDeactivateSelfError',
    # Authentication
    'landing_area',
    'register_user',
    'authenticate_user',
    'verify_user_email',
    'request_password_reset',
    'confirm_password_reset',
    # Team members
    'delete_user_account',
    'create_team_member',
    'update_team_member',
    'deactivate_team_member',
]
