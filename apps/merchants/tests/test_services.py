from decimal import Decimal

import pytest
from django.core import mail
from django.core.cache import cache

from apps.accounts.models import User, UserRole
from apps.contracts.models import (
    Contract,
    ContractStatus,
    ContactInfo,
    CompanyInfo,
    BusinessLocation,
    ContractCalculation,
)
from apps.dashboard.analytics import ADMIN_STATS_CACHE_KEY
from apps.merchants.models import Merchant
from apps.merchants.services import (
    normalize_text,
    find_similar_merchants,
    create_merchant,
    update_merchant,
    delete_merchant,
    find_or_create_merchant_for_contract,
    get_merchant_overview,
    create_merchant_account,
    DuplicateMerchantError,
    MerchantNotFoundError,
    MerchantAccountExistsError,
    MerchantNotLinkedError,
)


# =============================================================================
# Search
# =============================================================================

class TestNormalizeText:

    def test_lowercases_and_strips_punctuation(self):
        assert normalize_text('  Kavárna   Na Rohu, s.r.o. ') == 'kavárna na rohu sro'

    def test_none(self):
        assert normalize_text(None) == ''


@pytest.mark.django_db
class TestFindSimilarMerchants:
    """Tests for ICO and fuzzy name matching."""

    def test_ico_match_scores_100(self, merchant):
        matches = find_similar_merchants(company_name='Something else', ico='12345678')

        assert matches == [(merchant, 100, 'ico')]

    def test_exact_normalized_name(self, merchant):
        matches = find_similar_merchants(company_name='KAVÁRNA NA ROHU S.R.O.')

        assert matches == [(merchant, 100, 'exact')]

    def test_fuzzy_name(self, merchant):
        matches = find_similar_merchants(company_name='Kavarna Na Rohu sro', threshold=80)

        assert len(matches) == 1
        assert matches[0][0] == merchant
        assert matches[0][2] == 'fuzzy_name'
        assert 80 <= matches[0][1] < 100

    def test_unrelated_name(self, merchant):
        assert find_similar_merchants(company_name='Pekárna U Mostu') == []

    def test_exclude_self(self, merchant):
        assert find_similar_merchants(
            company_name=merchant.company_name, ico=merchant.ico, exclude_id=merchant.id
        ) == []

    def test_sorted_by_score(self, merchant):
        close = Merchant.objects.create(company_name='Kavárna Na Rohu', ico='87654321')

        matches = find_similar_merchants(company_name='Kavárna Na Rohu', threshold=50)

        assert [m for m, _, _ in matches] == [close, merchant]


# =============================================================================
# Management
# =============================================================================

@pytest.mark.django_db
class TestCreateMerchant:

    def test_create(self, admin_user):
        merchant = create_merchant(company_name='Pekárna U Mostu', ico='11112222', created_by=admin_user)

        assert merchant.company_name_normalized == 'pekárna u mostu'
        assert merchant.created_by == admin_user

    def test_duplicate_name_and_ico(self, merchant):
        with pytest.raises(DuplicateMerchantError) as exc_info:
            create_merchant(company_name='kavárna na rohu s.r.o.', ico='12345678')

        assert exc_info.value.existing == merchant

    def test_same_name_other_ico_is_allowed(self, merchant):
        create_merchant(company_name=merchant.company_name, ico='99999999')
        assert Merchant.objects.count() == 2

    def test_non_editable_fields_are_ignored(self):
        merchant = create_merchant(company_name='Pekárna', user='not-a-field')
        assert merchant.user is None


@pytest.mark.django_db
class TestUpdateDeleteMerchant:

    def test_update(self, merchant):
        merchant = update_merchant(merchant_id=merchant.id, address_city='Brno')
        assert merchant.address_city == 'Brno'

    def test_update_into_duplicate(self, merchant):
        other = Merchant.objects.create(company_name='Pekárna', ico='11112222')

        with pytest.raises(DuplicateMerchantError):
            update_merchant(merchant_id=other.id, company_name=merchant.company_name, ico=merchant.ico)

    def test_update_missing(self):
        with pytest.raises(MerchantNotFoundError):
            update_merchant(merchant_id='00000000-0000-0000-0000-000000000000', ico='1')

    def test_delete_keeps_contracts(self, merchant, contract):
        Contract.objects.filter(id=contract.id).update(merchant=merchant)

        delete_merchant(merchant_id=merchant.id)

        contract.refresh_from_db()
        assert contract.merchant is None
        assert not Merchant.objects.exists()


@pytest.mark.django_db
class TestFindOrCreateForContract:

    def test_without_company_info(self, contract):
        assert find_or_create_merchant_for_contract(contract=contract) is None

    def test_without_ico(self, contract):
        CompanyInfo.objects.create(contract=contract, company_name='Kavárna')
        assert find_or_create_merchant_for_contract(contract=contract) is None

    def test_creates_from_sections(self, complete_contract, partner_user):
        merchant = find_or_create_merchant_for_contract(contract=complete_contract)

        assert merchant.ico == '12345678'
        assert merchant.contact_person_name == 'Jana Nováková'
        assert merchant.contact_person_email == 'jana@narohu.cz'
        assert merchant.contact_person_phone == '+420 777123456'
        assert merchant.address_city == 'Praha'
        assert merchant.created_by == partner_user
        complete_contract.refresh_from_db()
        assert complete_contract.merchant == merchant

    def test_reuses_matching_merchant(self, complete_contract, merchant):
        assert find_or_create_merchant_for_contract(contract=complete_contract) == merchant
        assert Merchant.objects.count() == 1

    def test_link_is_saved_through_the_model(self, complete_contract, merchant):
        cache.set(ADMIN_STATS_CACHE_KEY, {'total_contracts': 1})
        before = complete_contract.updated_at

        find_or_create_merchant_for_contract(contract=complete_contract)

        complete_contract.refresh_from_db()
        assert complete_contract.merchant == merchant
        assert complete_contract.updated_at > before
        assert cache.get(ADMIN_STATS_CACHE_KEY) is None

    def test_keeps_existing_link(self, complete_contract):
        other = Merchant.objects.create(company_name='Other', ico='1')
        Contract.objects.filter(id=complete_contract.id).update(merchant=other)
        complete_contract.refresh_from_db()

        assert find_or_create_merchant_for_contract(contract=complete_contract) == other


@pytest.mark.django_db
class TestMerchantOverview:

    def test_overview(self, merchant, complete_contract, partner_user):
        Contract.objects.filter(id=complete_contract.id).update(merchant=merchant)
        signed = Contract.objects.create(
            contract_number='100001',
            created_by=partner_user,
            merchant=merchant,
            status=ContractStatus.SIGNED,
        )
        BusinessLocation.objects.create(contract=signed, location_id='loc-9')
        ContractCalculation.objects.create(contract=signed, total_customer_payments=Decimal('120.00'))
        ContractCalculation.objects.create(contract=complete_contract, total_customer_payments=Decimal('62.00'))

        overview = get_merchant_overview(merchant_id=merchant.id)

        assert overview['merchant'] == merchant
        assert overview['contract_count'] == 2
        assert overview['signed_count'] == 1
        assert overview['location_count'] == 2
        assert overview['total_monthly_value'] == Decimal('182.00')
        assert overview['latest_contract_status'] == ContractStatus.SIGNED

    def test_overview_without_contracts(self, merchant):
        overview = get_merchant_overview(merchant_id=merchant.id)

        assert overview['contract_count'] == 0
        assert overview['total_monthly_value'] == 0
        assert overview['latest_contract_status'] is None


# =============================================================================
# Portal accounts
# =============================================================================

@pytest.mark.django_db
class TestCreateMerchantAccount:

    def test_requires_linked_merchant(self, contract):
        with pytest.raises(MerchantNotLinkedError):
            create_merchant_account(contract=contract)

    def test_creates_user_and_sends_email(self, contract, merchant, django_capture_on_commit_callbacks):
        contract.merchant = merchant
        contract.save()

        with django_capture_on_commit_callbacks(execute=True):
            user, password = create_merchant_account(contract=contract)

        assert user.role == UserRole.MERCHANT
        assert user.email == 'jana@narohu.cz'
        assert user.check_password(password)
        merchant.refresh_from_db()
        assert merchant.user == user

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['jana@narohu.cz']
        assert password in mail.outbox[0].body

    def test_falls_back_to_contact_email(self, contract):
        merchant = Merchant.objects.create(company_name='Pekárna', ico='1')
        contract.merchant = merchant
        contract.save()
        ContactInfo.objects.create(contract=contract, first_name='Eva', email='eva@pekarna.cz')

        user, _ = create_merchant_account(contract=contract)

        assert user.email == 'eva@pekarna.cz'
        assert user.first_name == 'Eva'

    def test_no_email_at_all(self, contract):
        contract.merchant = Merchant.objects.create(company_name='Pekárna', ico='1')
        contract.save()

        with pytest.raises(MerchantNotLinkedError):
            create_merchant_account(contract=contract)

    def test_existing_account(self, contract, merchant, merchant_user):
        merchant.user = merchant_user
        merchant.save()
        contract.merchant = merchant
        contract.save()

        with pytest.raises(MerchantAccountExistsError):
            create_merchant_account(contract=contract)

    def test_email_taken(self, contract, merchant):
        User.objects.create_user(email='jana@narohu.cz', password='x')
        contract.merchant = merchant
        contract.save()

        with pytest.raises(MerchantAccountExistsError):
            create_merchant_account(contract=contract)
