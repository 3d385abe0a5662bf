import pytest
from django.urls import reverse
from rest_framework import status

from apps.contracts.models import Contract, BusinessLocation
from apps.merchants.models import Merchant


# =============================================================================
# Back-office merchant API
# =============================================================================

@pytest.mark.django_db
class TestMerchantList:
    """Tests for GET/POST /api/merchants/"""

    def test_staff_only(self, merchant_client):
        response = merchant_client.get(reverse('merchants:merchant-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_and_search(self, partner_client, merchant):
        Merchant.objects.create(company_name='Pekárna U Mostu', ico='11112222')

        response = partner_client.get(reverse('merchants:merchant-list'), {'search': '1234'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(merchant.id)
        assert response.data['results'][0]['has_portal_account'] is False

    def test_create(self, partner_client, partner_user):
        response = partner_client.post(
            reverse('merchants:merchant-list'),
            {'company_name': 'Pekárna U Mostu', 'ico': '11112222', 'address_city': 'Brno'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Merchant.objects.get(id=response.data['id']).created_by == partner_user

    def test_create_duplicate_returns_existing(self, partner_client, merchant):
        response = partner_client.post(
            reverse('merchants:merchant-list'),
            {'company_name': 'KAVÁRNA NA ROHU s.r.o.', 'ico': '12345678'},
            format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['existing_id'] == str(merchant.id)


@pytest.mark.django_db
class TestMerchantDetail:

    def test_partial_update(self, partner_client, merchant):
        response = partner_client.patch(
            reverse('merchants:merchant-detail', kwargs={'pk': merchant.id}),
            {'contact_person_phone': '+420 777000111'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        merchant.refresh_from_db()
        assert merchant.contact_person_phone == '+420 777000111'
        assert merchant.company_name == 'Kavárna Na Rohu s.r.o.'

    def test_delete_requires_admin(self, partner_client, admin_client, merchant, contract):
        Contract.objects.filter(id=contract.id).update(merchant=merchant)
        url = reverse('merchants:merchant-detail', kwargs={'pk': merchant.id})

        assert partner_client.delete(url).status_code == status.HTTP_403_FORBIDDEN
        assert admin_client.delete(url).status_code == status.HTTP_204_NO_CONTENT
        assert Contract.objects.filter(merchant__isnull=True).count() == 1

    def test_overview(self, admin_client, merchant, contract):
        Contract.objects.filter(id=contract.id).update(merchant=merchant)

        response = admin_client.get(reverse('merchants:merchant-overview', kwargs={'pk': merchant.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['contract_count'] == 1
        assert response.data['latest_contract_status'] == 'draft'
        assert response.data['merchant']['ico'] == '12345678'

    def test_contracts_respect_visibility(self, client_for, other_partner, merchant, contract):
        Contract.objects.filter(id=contract.id).update(merchant=merchant)

        response = client_for(other_partner).get(
            reverse('merchants:merchant-contracts', kwargs={'pk': merchant.id})
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []

    def test_similar(self, partner_client, merchant):
        response = partner_client.get(
            reverse('merchants:merchant-similar'),
            {'company_name': 'Kavárna na rohu'}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['merchant']['id'] == str(merchant.id)
        assert response.data[0]['match_type'] == 'fuzzy_name'

    def test_similar_needs_query(self, partner_client):
        response = partner_client.get(reverse('merchants:merchant-similar'))
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Merchant portal
# =============================================================================

@pytest.mark.django_db
class TestMerchantPortal:
    """Tests for /api/merchants/me/"""

    @pytest.fixture
    def linked(self, merchant, merchant_user, complete_contract):
        merchant.user = merchant_user
        merchant.save()
        Contract.objects.filter(id=complete_contract.id).update(merchant=merchant)
        return merchant

    def test_staff_cannot_use_portal(self, partner_client):
        response = partner_client.get(reverse('merchants:me'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unlinked_account(self, merchant_client):
        response = merchant_client.get(reverse('merchants:me'))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_profile(self, merchant_client, linked):
        response = merchant_client.get(reverse('merchants:me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['company_name'] == linked.company_name
        assert response.data['has_portal_account'] is True

    def test_contracts(self, merchant_client, linked, partner_user):
        Contract.objects.create(contract_number='100001', created_by=partner_user)

        response = merchant_client.get(reverse('merchants:my-contracts'))

        assert [c['contract_number'] for c in response.data] == ['100000']

    def test_locations(self, merchant_client, linked, contract):
        BusinessLocation.objects.create(contract=contract, location_id='loc-2', name='Krátká')

        response = merchant_client.get(reverse('merchants:my-locations'))

        assert {loc['location_id'] for loc in response.data} == {'loc-1', 'loc-2'}
