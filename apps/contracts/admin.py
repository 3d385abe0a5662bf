from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Contract,
    ContractStatus,
    ContactInfo,
    CompanyInfo,
    BusinessLocation,
    AuthorizedPerson,
    ActualOwner,
    ContractItem,
    ContractItemAddon,
    ContractCalculation,
    ContractDocument,
    KanbanColumn,
)

STATUS_COLORS = {
    ContractStatus.DRAFT: '#6B7280',
    ContractStatus.SUBMITTED: '#F59E0B',
    ContractStatus.APPROVED: '#3B82F6',
    ContractStatus.SIGNED: '#10B981',
    ContractStatus.REJECTED: '#EF4444',
    ContractStatus.LOST: '#B91C1C',
}


class ContactInfoInline(admin.StackedInline):
    model = ContactInfo
    extra = 0


class CompanyInfoInline(admin.StackedInline):
    model = CompanyInfo
    extra = 0


class BusinessLocationInline(admin.TabularInline):
    model = BusinessLocation
    extra = 0
    fields = ['location_id', 'name', 'address_city', 'iban', 'estimated_turnover', 'has_pos']


class AuthorizedPersonInline(admin.TabularInline):
    model = AuthorizedPerson
    extra = 0
    fields = ['person_id', 'first_name', 'last_name', 'position', 'email', 'is_politically_exposed']


class ActualOwnerInline(admin.TabularInline):
    model = ActualOwner
    extra = 0
    fields = ['owner_id', 'first_name', 'last_name', 'citizenship', 'is_politically_exposed']


class ContractItemInline(admin.TabularInline):
    model = ContractItem
    extra = 0
    fields = ['item_id', 'name', 'item_type', 'count', 'monthly_fee', 'company_cost']
    show_change_link = True


class ContractCalculationInline(admin.StackedInline):
    model = ContractCalculation
    extra = 0
    readonly_fields = [
        'monthly_turnover',
        'total_customer_payments',
        'total_company_costs',
        'transaction_margin',
        'service_margin',
        'total_monthly_profit',
    ]
    exclude = ['calculation_data']


class ContractDocumentInline(admin.TabularInline):
    model = ContractDocument
    extra = 0
    fields = ['document_name', 'document_type', 'file', 'status', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = [
        'contract_number',
        'status_badge',
        'source',
        'merchant',
        'created_by',
        'assigned_to',
        'created_at',
    ]
    list_filter = ['status', 'source', 'lost_reason', 'created_at']
    search_fields = [
        'contract_number',
        'company_info__company_name',
        'company_info__ico',
        'contact_info__email',
    ]
    raw_id_fields = ['merchant', 'created_by', 'assigned_to', 'admin_approved_by']
    readonly_fields = [
        'contract_number',
        'draft_fingerprint',
        'submitted_at',
        'admin_approved_at',
        'contract_generated_at',
        'email_viewed_at',
        'signed_at',
        'signature_ip',
        'created_at',
        'updated_at',
    ]
    list_select_related = ['merchant', 'created_by', 'assigned_to']
    date_hierarchy = 'created_at'
    inlines = [
        ContactInfoInline,
        CompanyInfoInline,
        BusinessLocationInline,
        AuthorizedPersonInline,
        ActualOwnerInline,
        ContractItemInline,
        ContractCalculationInline,
        ContractDocumentInline,
    ]

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#8B5CF6'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


class ContractItemAddonInline(admin.TabularInline):
    model = ContractItemAddon
    extra = 0


@admin.register(ContractItem)
class ContractItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'contract', 'count', 'monthly_fee', 'company_cost']
    search_fields = ['name', 'contract__contract_number']
    raw_id_fields = ['contract', 'warehouse_item']
    inlines = [ContractItemAddonInline]


@admin.register(KanbanColumn)
class KanbanColumnAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'position', 'is_active']
    list_filter = ['is_active']
    raw_id_fields = ['user']
