"""
Domain-specific exceptions for organizations app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class OrganizationsServiceError(Exception):
    """Base exception for all organizations service errors."""
    pass


class OrganizationNotFoundError(OrganizationsServiceError):
    """Raised when an organization does not exist."""
    pass


class TeamNotFoundError(OrganizationsServiceError):
    """Raised when a team does not exist."""
    pass


class InactiveOrganizationError(OrganizationsServiceError):
    """Raised when creating a team in a deactivated organization."""
    pass


class InvalidTeamMemberError(OrganizationsServiceError):
    """Raised when a user cannot be a team member (e.g. merchant role)."""
    pass


class AlreadyTeamMemberError(OrganizationsServiceError):
    """Raised when a user is already in the team."""
    pass


class NotTeamMemberError(OrganizationsServiceError):
    """Raised when a user is not in the team."""
    pass
