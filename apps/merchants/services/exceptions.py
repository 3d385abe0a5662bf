"""
Domain-specific exceptions for merchants app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class MerchantsServiceError(Exception):
    """Base exception for all merchants service errors."""
    pass


class MerchantNotFoundError(MerchantsServiceError):
    """Raised when a merchant does not exist."""
    pass


class DuplicateMerchantError(MerchantsServiceError):
    """Raised when a merchant with the same company name and ICO exists."""

    def __init__(self, message, existing=None):
        super().__init__(message)
        self.existing = existing


class MerchantAccountExistsError(MerchantsServiceError):
    """Raised when the merchant already has a portal account or the email is taken."""
    pass


class MerchantNotLinkedError(MerchantsServiceError):
    """Raised when a contract has no merchant to create an account for."""
    pass
