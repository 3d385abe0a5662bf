"""Services for merchants and their portal accounts."""

from .exceptions import (
    MerchantsServiceError,
    MerchantNotFoundError,
    DuplicateMerchantError,
    MerchantAccountExistsError,
    MerchantNotLinkedError,
)
from .merchant_search import (
    normalize_text,
    find_similar_merchants,
)
from .merchant_management import (
    get_merchant,
    create_merchant,
    update_merchant,
    delete_merchant,
    find_or_create_merchant_for_contract,
    get_merchant_overview,
)
from .merchant_accounts import create_merchant_account

__all__ = [
    # Exceptions
    'MerchantsServiceError',
    'MerchantNotFoundError',
    'DuplicateMerchantError',
    'MerchantAccountExistsError',
    'MerchantNotLinkedError',
    # Search
    'normalize_text',
    'find_similar_merchants',
    # Management
    'get_merchant',
    'create_merchant',
    'update_merchant',
    'delete_merchant',
    'find_or_create_merchant_for_contract',
    'get_merchant_overview',
    # Portal accounts
    'create_merchant_account',
]
