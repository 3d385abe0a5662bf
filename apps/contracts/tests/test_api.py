from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status

from apps.contracts.models import (
    Contract,
    ContractStatus,
    ContractDocument,
    KanbanColumn,
)
from apps.merchants.models import Merchant


def detail_url(name, contract, **kwargs):
    return reverse(f'contracts:contract-{name}', kwargs={'pk': contract.id, **kwargs})


@pytest.mark.django_db
class TestContractListCreate:

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('contracts:contract-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_merchant_cannot_use_back_office(self, merchant_client):
        response = merchant_client.get(reverse('contracts:contract-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_contract(self, partner_client, partner_user):
        response = partner_client.post(
            reverse('contracts:contract-list'),
            {'source': 'telesales', 'notes': 'Call back on Monday'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['contract_number'] == '100000'
        assert response.data['status'] == 'draft'
        assert response.data['created_by']['id'] == str(partner_user.id)

    def test_create_with_unknown_merchant(self, partner_client):
        response = partner_client.post(
            reverse('contracts:contract-list'),
            {'merchant_id': '00000000-0000-0000-0000-000000000000'},
            format='json'
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_list_is_scoped_and_paginated(self, partner_client, contract, other_partner):
        Contract.objects.create(contract_number='100001', created_by=other_partner)

        response = partner_client.get(reverse('contracts:contract-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['contract_number'] == '100000'

    def test_list_filters_by_repeated_status(self, admin_client, contract, partner_user):
        Contract.objects.create(contract_number='100001', created_by=partner_user, status=ContractStatus.SIGNED)
        Contract.objects.create(contract_number='100002', created_by=partner_user, status=ContractStatus.LOST)

        response = admin_client.get(reverse('contracts:contract-list') + '?status=signed&status=lost')

        numbers = {row['contract_number'] for row in response.data['results']}
        assert numbers == {'100001', '100002'}

    def test_list_rejects_unknown_status(self, admin_client):
        response = admin_client.get(reverse('contracts:contract-list'), {'status': 'archived'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestContractDetail:

    def test_retrieve_nested_sections(self, partner_client, complete_contract):
        response = partner_client.get(reverse('contracts:contract-detail', kwargs={'pk': complete_contract.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['contact_info']['email'] == 'jana@narohu.cz'
        assert response.data['business_locations'][0]['location_id'] == 'loc-1'
        assert response.data['items'][0]['addons'][0]['addon_id'] == 'addon-1'
        assert response.data['calculation'] is None

    def test_other_partner_gets_404(self, client_for, other_partner, contract):
        response = client_for(other_partner).get(reverse('contracts:contract-detail', kwargs={'pk': contract.id}))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_notes(self, partner_client, contract):
        response = partner_client.patch(
            reverse('contracts:contract-detail', kwargs={'pk': contract.id}),
            {'notes': 'Prefers email'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        contract.refresh_from_db()
        assert contract.notes == 'Prefers email'

    def test_signed_contract_cannot_be_updated(self, partner_client, contract):
        Contract.objects.filter(id=contract.id).update(status=ContractStatus.SIGNED)

        response = partner_client.patch(
            reverse('contracts:contract-detail', kwargs={'pk': contract.id}),
            {'notes': 'Too late'},
            format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_only_admin_deletes(self, partner_client, admin_client, contract):
        url = reverse('contracts:contract-detail', kwargs={'pk': contract.id})

        assert partner_client.delete(url).status_code == status.HTTP_403_FORBIDDEN
        assert admin_client.delete(url).status_code == status.HTTP_204_NO_CONTENT
        assert not Contract.objects.exists()


@pytest.mark.django_db
class TestDraftAutosave:

    payload = {
        'current_step': 1,
        'visited_steps': [0, 1],
        'contact_info': {'first_name': 'Jana', 'last_name': 'Nováková', 'email': 'jana@narohu.cz'},
        'business_locations': [{'location_id': 'loc-1', 'name': 'Dlouhá', 'estimated_turnover': '50000.00'}],
        'device_selection': [{'item_id': 'item-1', 'name': 'PAX A920', 'count': 1, 'monthly_fee': '29.00'}],
    }

    def test_saves_and_reports(self, partner_client, contract):
        response = partner_client.put(detail_url('draft', contract), self.payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['saved'] is True
        assert response.data['saved_at'] is not None
        assert response.data['contract']['current_step'] == 1
        assert response.data['contract']['calculation']['total_customer_payments'] == '29.00'

    def test_repeated_payload_is_not_saved(self, partner_client, contract):
        partner_client.put(detail_url('draft', contract), self.payload, format='json')
        response = partner_client.put(detail_url('draft', contract), self.payload, format='json')

        assert response.data['saved'] is False
        assert response.data['saved_at'] is None

    def test_duplicate_location_ids(self, partner_client, contract):
        payload = {'business_locations': [{'location_id': 'a'}, {'location_id': 'a'}]}

        response = partner_client.put(detail_url('draft', contract), payload, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_locked_contract(self, partner_client, contract):
        Contract.objects.filter(id=contract.id).update(status=ContractStatus.LOST, lost_reason='other')

        response = partner_client.put(detail_url('draft', contract), self.payload, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestWorkflowActions:

    def test_submit_incomplete(self, partner_client, contract):
        response = partner_client.post(detail_url('submit', contract))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'contact email' in response.data['missing']

    def test_submit_complete(self, partner_client, complete_contract):
        response = partner_client.post(detail_url('submit', complete_contract))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'submitted'
        assert response.data['merchant'] is not None

    def test_set_status_lost_needs_reason(self, admin_client, contract):
        response = admin_client.post(detail_url('set-status', contract), {'status': 'lost'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_set_status(self, admin_client, admin_user, contract):
        response = admin_client.post(detail_url('set-status', contract), {'status': 'approved'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'approved'
        assert response.data['admin_approved_by']['id'] == str(admin_user.id)

    def test_sign_records_ip(self, partner_client, contract):
        Contract.objects.filter(id=contract.id).update(status=ContractStatus.SENT_TO_CLIENT)

        response = partner_client.post(
            detail_url('sign', contract),
            {'signer_name': 'Jana Nováková'},
            format='json',
            HTTP_X_FORWARDED_FOR='203.0.113.7'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'signed'
        assert response.data['signature_ip'] == '203.0.113.7'

    def test_sign_draft_is_rejected(self, partner_client, contract):
        response = partner_client.post(detail_url('sign', contract), {'signer_name': 'Jana'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_copy(self, partner_client, complete_contract):
        response = partner_client.post(
            detail_url('copy', complete_contract),
            {'segments': ['business_locations']},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['contract_number'] == '100001'
        assert len(response.data['business_locations']) == 1
        assert response.data['items'] == []

    def test_copy_unknown_segment(self, partner_client, complete_contract):
        response = partner_client.post(
            detail_url('copy', complete_contract),
            {'segments': ['nope']},
            format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_calculate(self, partner_client, complete_contract):
        response = partner_client.post(detail_url('calculate', complete_contract))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_customer_payments'] == '62.00'
        assert response.data['service_margin'] == '36.00'


@pytest.mark.django_db
class TestMerchantAccountAction:

    def test_requires_merchant(self, admin_client, contract):
        response = admin_client.post(detail_url('merchant-account', contract))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_creates_account(self, admin_client, contract, merchant, django_capture_on_commit_callbacks):
        Contract.objects.filter(id=contract.id).update(merchant=merchant)

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(detail_url('merchant-account', contract))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'jana@narohu.cz'
        merchant.refresh_from_db()
        assert merchant.has_portal_account

    def test_second_account_conflicts(self, admin_client, contract, merchant, merchant_user):
        merchant.user = merchant_user
        merchant.save()
        Contract.objects.filter(id=contract.id).update(merchant=merchant)

        response = admin_client.post(detail_url('merchant-account', contract))
        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
class TestDocuments:

    @pytest.fixture(autouse=True)
    def media_root(self, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path

    def test_upload_list_download_delete(self, partner_client, contract):
        upload = SimpleUploadedFile('id-card.pdf', b'%PDF-1.4 test', content_type='application/pdf')

        response = partner_client.post(
            detail_url('documents', contract),
            {'file': upload, 'document_type': 'identity'},
            format='multipart'
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['document_name'] == 'id-card.pdf'
        document_id = response.data['id']

        listing = partner_client.get(detail_url('documents', contract))
        assert [d['id'] for d in listing.data] == [document_id]

        download = partner_client.get(detail_url('document', contract, document_id=document_id))
        assert download.status_code == status.HTTP_200_OK
        assert b''.join(download.streaming_content) == b'%PDF-1.4 test'

        deleted = partner_client.delete(detail_url('document', contract, document_id=document_id))
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert not ContractDocument.objects.exists()

    def test_unknown_document(self, partner_client, contract):
        response = partner_client.get(detail_url('document', contract, document_id='not-a-uuid'))
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestBulkActions:

    def test_bulk_status(self, admin_client, contract, partner_user):
        other = Contract.objects.create(contract_number='100001', created_by=partner_user)

        response = admin_client.post(
            reverse('contracts:contract-bulk-status'),
            {'ids': [str(contract.id), str(other.id)], 'status': 'in_progress'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'updated': 2}

    def test_bulk_status_only_touches_visible(self, client_for, other_partner, contract):
        response = client_for(other_partner).post(
            reverse('contracts:contract-bulk-status'),
            {'ids': [str(contract.id)], 'status': 'in_progress'},
            format='json'
        )

        assert response.data == {'updated': 0}
        contract.refresh_from_db()
        assert contract.status == ContractStatus.DRAFT

    def test_bulk_assign(self, admin_client, contract, other_partner):
        response = admin_client.post(
            reverse('contracts:contract-bulk-assign'),
            {'ids': [str(contract.id)], 'assigned_to': str(other_partner.id)},
            format='json'
        )

        assert response.data == {'updated': 1}

    def test_bulk_assign_to_merchant_fails(self, admin_client, contract, merchant_user):
        response = admin_client.post(
            reverse('contracts:contract-bulk-assign'),
            {'ids': [str(contract.id)], 'assigned_to': str(merchant_user.id)},
            format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_bulk_delete_admin_only(self, partner_client, admin_client, contract):
        payload = {'ids': [str(contract.id)]}
        url = reverse('contracts:contract-bulk-delete')

        assert partner_client.post(url, payload, format='json').status_code == status.HTTP_403_FORBIDDEN
        response = admin_client.post(url, payload, format='json')
        assert response.data == {'deleted': 1}

    def test_export_csv(self, partner_client, complete_contract):
        response = partner_client.get(reverse('contracts:contract-export'))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment; filename="contracts-' in response['Content-Disposition']
        body = response.content.decode('utf-8')
        assert body.splitlines()[0] == 'Contract Number,Status,Created,Client,Email,Company,ICO'
        assert 'jana@narohu.cz' in body


@pytest.mark.django_db
class TestKanban:

    def test_board_with_default_columns(self, partner_client, contract):
        response = partner_client.get(reverse('contracts:contract-kanban'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 6
        drafts = response.data[0]
        assert drafts['title'] == 'Drafts'
        assert drafts['count'] == 1
        assert drafts['contracts'][0]['contract_number'] == '100000'

    def test_create_personal_column(self, partner_client, partner_user):
        response = partner_client.post(
            reverse('contracts:kanban-column-list'),
            {'title': 'Hot', 'statuses': ['submitted'], 'color': '#FF0000', 'shared': True},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        # Partners cannot share columns
        assert KanbanColumn.objects.get().user == partner_user

    def test_admin_creates_shared_column(self, admin_client, client_for, partner_user):
        admin_client.post(
            reverse('contracts:kanban-column-list'),
            {'title': 'Everyone', 'statuses': ['signed'], 'shared': True},
            format='json'
        )

        assert KanbanColumn.objects.get().user is None
        board = client_for(partner_user).get(reverse('contracts:contract-kanban'))
        assert [column['title'] for column in board.data] == ['Everyone']

    def test_invalid_status_in_column(self, partner_client):
        response = partner_client.post(
            reverse('contracts:kanban-column-list'),
            {'title': 'Broken', 'statuses': ['archived']},
            format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCalculatorPreview:

    def test_preview(self, partner_client, settings):
        settings.CALCULATOR_RATE_DEDUCTION = '0.2'

        response = partner_client.post(
            reverse('contracts:calculator-preview'),
            {
                'items': [{
                    'item_id': 'x',
                    'name': 'PAX A920',
                    'count': 2,
                    'monthly_fee': '29.00',
                    'company_cost': '12.50',
                    'addons': [{
                        'addon_id': 'a',
                        'addon_name': 'Stand',
                        'monthly_fee': '2.00',
                        'company_cost': '0.50',
                        'is_per_device': True,
                    }],
                }],
                'monthly_turnover': '100000',
                'regulated_rate': '1.5',
                'unregulated_rate': '2.0',
            },
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['total_monthly_profit']) == Decimal('3136.00')
        assert response.data['lines'][0]['name'] == 'PAX A920'
        assert not Merchant.objects.exists()
