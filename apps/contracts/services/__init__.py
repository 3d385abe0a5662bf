"""Services for contracts: wizard drafts, workflow, calculation, board."""

from .exceptions import (
    ContractsServiceError,
    ContractNotFoundError,
    ContractLockedError,
    IncompleteContractError,
    InvalidStatusError,
    InvalidStatusTransitionError,
    MissingLostReasonError,
    InvalidSegmentError,
    ContractNumberError,
    DocumentNotFoundError,
    InvalidAssigneeError,
)
from .calculation import (
    contract_line_items,
    contract_monthly_turnover,
    recalculate_contract,
    preview_calculation,
)
from .workflow import (
    change_status,
    sign_contract,
    get_client_ip,
)
from .contract_management import (
    SEGMENTS,
    next_contract_number,
    create_contract,
    get_contract,
    get_visible_contracts,
    get_contract_for_user,
    filter_contracts,
    missing_sections,
    submit_contract,
    copy_contract,
)
from .onboarding import save_onboarding_draft
from .bulk import (
    EXPORT_COLUMNS,
    bulk_update_status,
    bulk_assign,
    bulk_delete,
    export_contracts_csv,
)
from .kanban import (
    DEFAULT_COLUMNS,
    get_columns,
    build_kanban_board,
    visible_columns,
)
from .documents import (
    upload_document,
    get_document,
    delete_document,
)

__all__ = [
    # Exceptions
    'ContractsServiceError',
    'ContractNotFoundError',
    'ContractLockedError',
    'IncompleteContractError',
    'InvalidStatusError',
    'InvalidStatusTransitionError',
    'MissingLostReasonError',
    'InvalidSegmentError',
    'ContractNumberError',
    'DocumentNotFoundError',
    'InvalidAssigneeError',
    # Calculation
    'contract_line_items',
    'contract_monthly_turnover',
    'recalculate_contract',
    'preview_calculation',
    # Workflow
    'change_status',
    'sign_contract',
    'get_client_ip',
    # Contracts
    'SEGMENTS',
    'next_contract_number',
    'create_contract',
    'get_contract',
    'get_visible_contracts',
    'get_contract_for_user',
    'filter_contracts',
    'missing_sections',
    'submit_contract',
    'copy_contract',
    # Wizard
    'save_onboarding_draft',
    # Bulk
    'EXPORT_COLUMNS',
    'bulk_update_status',
    'bulk_assign',
    'bulk_delete',
    'export_contracts_csv',
    # Kanban
    'DEFAULT_COLUMNS',
    'get_columns',
    'build_kanban_board',
    'visible_columns',
    # Documents
    'upload_document',
    'get_document',
    'delete_document',
]
