import pytest
from django.urls import reverse
from rest_framework import status

from apps.catalog.models import WarehouseItem


@pytest.mark.django_db
class TestWarehouseItemAPI:
    """Tests for /api/catalog/items/"""

    def test_admin_creates_item(self, admin_client, admin_user, category):
        response = admin_client.post(reverse('catalog:item-list'), {
            'name': 'Ingenico Move',
            'kind': 'device',
            'category': str(category.id),
            'monthly_fee': '25.00',
            'company_cost': '10.00',
            'specifications': {'connectivity': '4G'},
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        item = WarehouseItem.objects.get(name='Ingenico Move')
        assert item.created_by == admin_user
        assert response.data['category_name'] == 'POS Terminals'

    def test_negative_fee_rejected(self, admin_client):
        response = admin_client.post(reverse('catalog:item-list'), {
            'name': 'Broken',
            'monthly_fee': '-1.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_filters(self, partner_client, terminal, service_item):
        response = partner_client.get(reverse('catalog:item-list'), {'kind': 'service'})

        assert response.status_code == status.HTTP_200_OK
        assert [i['name'] for i in response.data['results']] == ['Cloud POS']

    def test_list_without_is_active_returns_all(self, partner_client, terminal, service_item):
        WarehouseItem.objects.filter(id=terminal.id).update(is_active=False)

        response = partner_client.get(reverse('catalog:item-list'))
        active_only = partner_client.get(reverse('catalog:item-list'), {'is_active': 'true'})

        assert response.data['count'] == 2
        assert active_only.data['count'] == 1

    def test_search(self, partner_client, terminal, service_item):
        response = partner_client.get(reverse('catalog:item-list'), {'search': 'pax'})
        assert [i['name'] for i in response.data['results']] == ['PAX A920']

    def test_partner_cannot_create(self, partner_client):
        response = partner_client.post(reverse('catalog:item-list'), {'name': 'X'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bulk_activate(self, admin_client, terminal, stand):
        WarehouseItem.objects.update(is_active=False)

        response = admin_client.post(reverse('catalog:item-bulk'), {
            'ids': [str(terminal.id), str(stand.id)],
            'action': 'activate',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['updated'] == 2

    def test_adjust_stock_insufficient(self, admin_client, terminal):
        url = reverse('catalog:item-adjust-stock', args=[terminal.id])
        response = admin_client.post(url, {'delta': -50}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_low_stock(self, admin_client, terminal):
        WarehouseItem.objects.filter(id=terminal.id).update(current_stock=1)

        response = admin_client.get(reverse('catalog:item-low-stock'))

        assert [i['name'] for i in response.data] == ['PAX A920']
        assert response.data[0]['is_low_stock'] is True

    def test_addons_flow(self, admin_client, terminal, stand):
        url = reverse('catalog:item-addons', args=[terminal.id])
        response = admin_client.post(url, {'addon_id': str(stand.id), 'is_required': True}, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = admin_client.get(url)
        assert response.data[0]['addon_product']['name'] == 'Terminal Stand'

        response = admin_client.post(url, {'addon_id': str(terminal.id)}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCategoryAPI:

    def test_reorder(self, admin_client, category, other_category):
        response = admin_client.post(reverse('catalog:category-reorder'), {
            'ids': [str(other_category.id), str(category.id)],
        }, format='json')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        listing = admin_client.get(reverse('catalog:category-list'))
        assert [c['name'] for c in listing.data] == ['Software', 'POS Terminals']

    def test_reorder_rejects_repeated_id(self, admin_client, category):
        response = admin_client.post(reverse('catalog:category-reorder'), {
            'ids': [str(category.id), str(category.id)],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'once' in response.data['error']

    def test_create_generates_slug(self, admin_client):
        response = admin_client.post(reverse('catalog:category-list'), {'name': 'Card Readers'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['slug'] == 'card-readers'

    def test_merchant_forbidden(self, merchant_client, category):
        response = merchant_client.get(reverse('catalog:category-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN
