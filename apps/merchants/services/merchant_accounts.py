"""Merchant portal accounts created after a contract is signed."""

import logging
import secrets
from typing import Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction

from apps.accounts.models import UserRole
from apps.contracts.models import Contract

from ..models import Merchant
from .exceptions import MerchantAccountExistsError, MerchantNotLinkedError

logger = logging.getLogger(__name__)

User = get_user_model()


def _send_welcome_email(email: str, company_name: str, password: str) -> None:
    try:
        send_mail(
            subject='Your merchant portal account',
            message=(
                f'An account for {company_name} has been created.\n\n'
                f'Login: {email}\n'
                f'Temporary password: {password}\n\n'
                f'Sign in at {settings.PORTAL_LOGIN_URL} and change your password.'
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
        )
    except Exception:
        logger.exception("Failed to send welcome email to %s", email)


@transaction.atomic
def create_merchant_account(*, contract: Contract) -> Tuple[User, str]:
    """
    Create the portal user for the contract's merchant.

    The login is the merchant's contact email, falling back to the contract's
    contact info. A temporary password is generated and mailed after commit.

    Returns:
        (user, temporary_password)

    Raises:
        MerchantNotLinkedError: If the contract has no merchant or no email
        MerchantAccountExistsError: If the merchant has an account or the
            email is taken
    """
    if not contract.merchant_id:
        raise MerchantNotLinkedError(
            f"Contract {contract.contract_number} is not linked to a merchant"
        )

    merchant = Merchant.objects.select_for_update().get(id=contract.merchant_id)
    if merchant.user_id:
        raise MerchantAccountExistsError(
            f"Merchant '{merchant.company_name}' already has a portal account"
        )

    email = merchant.contact_person_email
    contact = getattr(contract, 'contact_info', None)
    if not email and contact is not None:
        email = contact.email
    if not email:
        raise MerchantNotLinkedError(
            f"No contact email for merchant '{merchant.company_name}'"
        )

    if User.objects.filter(email__iexact=email).exists():
        raise MerchantAccountExistsError(f"User with email {email} already exists")

    first_name, last_name = '', ''
    if contact is not None:
        first_name, last_name = contact.first_name, contact.last_name

    password = secrets.token_urlsafe(9)
    user = User.objects.create_user(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        role=UserRole.MERCHANT,
        email_verified=True,
    )
    merchant.user = user
    merchant.save(update_fields=['user', 'updated_at'])

    company_name = merchant.company_name
    transaction.on_commit(lambda: _send_welcome_email(email, company_name, password))

    logger.info("Created portal account %s for merchant %s", user.id, merchant.id)
    return user, password
