"""
Domain-specific exceptions for contracts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ContractsServiceError(Exception):
    """Base exception for all contracts service errors."""
    pass


class ContractNotFoundError(ContractsServiceError):
    """Raised when a contract does not exist or is not visible."""
    pass


class ContractLockedError(ContractsServiceError):
    """Raised when editing a signed or lost contract."""
    pass


class IncompleteContractError(ContractsServiceError):
    """Raised when submitting a contract with missing sections."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Contract is incomplete: {', '.join(self.missing)}")


class InvalidStatusError(ContractsServiceError):
    """Raised for an unknown status value."""
    pass


class InvalidStatusTransitionError(ContractsServiceError):
    """Raised when an operation is not allowed in the current status."""
    pass


class MissingLostReasonError(ContractsServiceError):
    """Raised when marking a contract lost without a reason."""
    pass


class InvalidSegmentError(ContractsServiceError):
    """Raised when copying an unknown contract segment."""
    pass


class ContractNumberError(ContractsServiceError):
    """Raised when no free contract number could be allocated."""
    pass


class DocumentNotFoundError(ContractsServiceError):
    """Raised when a contract document does not exist."""
    pass


class InvalidAssigneeError(ContractsServiceError):
    """Raised when assigning contracts to an unknown or non-staff user."""
    pass
