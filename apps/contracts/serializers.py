from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import (
    Contract,
    ContractStatus,
    ContractSource,
    LostReason,
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
from .services import SEGMENTS

SECTION_EXCLUDE = ['id', 'contract', 'created_at', 'updated_at']


# =============================================================================
# Onboarding sections (used for both input and output)
# =============================================================================

class ContactInfoSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContactInfo
        exclude = SECTION_EXCLUDE


class CompanyInfoSerializer(serializers.ModelSerializer):

    class Meta:
        model = CompanyInfo
        exclude = SECTION_EXCLUDE


class BusinessLocationSerializer(serializers.ModelSerializer):

    class Meta:
        model = BusinessLocation
        exclude = SECTION_EXCLUDE


class AuthorizedPersonSerializer(serializers.ModelSerializer):

    class Meta:
        model = AuthorizedPerson
        exclude = SECTION_EXCLUDE


class ActualOwnerSerializer(serializers.ModelSerializer):

    class Meta:
        model = ActualOwner
        exclude = SECTION_EXCLUDE


class ContractItemAddonSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContractItemAddon
        fields = [
            'addon_id',
            'addon_name',
            'monthly_fee',
            'company_cost',
            'is_per_device',
            'custom_quantity',
        ]


class ContractItemSerializer(serializers.ModelSerializer):
    warehouse_item_id = serializers.UUIDField(required=False, allow_null=True)
    addons = ContractItemAddonSerializer(many=True, required=False)

    class Meta:
        model = ContractItem
        fields = [
            'item_id',
            'warehouse_item_id',
            'item_type',
            'category',
            'name',
            'description',
            'count',
            'monthly_fee',
            'company_cost',
            'custom_value',
            'addons',
        ]


class FeesSerializer(serializers.Serializer):
    regulated_rate = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, required=False)
    unregulated_rate = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, required=False)


def _unique_keys(rows, key, label):
    keys = [row[key] for row in rows]
    if len(keys) != len(set(keys)):
        raise serializers.ValidationError(f'Duplicate {label} in payload')
    return rows


class OnboardingDraftSerializer(serializers.Serializer):
    """Wizard state; every section is optional."""

    current_step = serializers.IntegerField(min_value=0, required=False)
    visited_steps = serializers.ListField(child=serializers.IntegerField(min_value=0), required=False)
    contact_info = ContactInfoSerializer(required=False)
    company_info = CompanyInfoSerializer(required=False)
    business_locations = BusinessLocationSerializer(many=True, required=False)
    authorized_persons = AuthorizedPersonSerializer(many=True, required=False)
    actual_owners = ActualOwnerSerializer(many=True, required=False)
    device_selection = ContractItemSerializer(many=True, required=False)
    fees = FeesSerializer(required=False)

    def validate_business_locations(self, value):
        return _unique_keys(value, 'location_id', 'location_id')

    def validate_authorized_persons(self, value):
        return _unique_keys(value, 'person_id', 'person_id')

    def validate_actual_owners(self, value):
        return _unique_keys(value, 'owner_id', 'owner_id')

    def validate_device_selection(self, value):
        return _unique_keys(value, 'item_id', 'item_id')


# =============================================================================
# Contract read models
# =============================================================================

class ContractCalculationSerializer(serializers.ModelSerializer):

    class Meta:
        model = ContractCalculation
        exclude = ['id', 'contract']


class ContractDocumentSerializer(serializers.ModelSerializer):
    uploaded_by = UserPublicSerializer(read_only=True)

    class Meta:
        model = ContractDocument
        fields = [
            'id',
            'document_name',
            'document_type',
            'file',
            'status',
            'uploaded_by',
            'signed_at',
            'created_at',
        ]
        read_only_fields = ['id', 'file', 'status', 'uploaded_by', 'signed_at', 'created_at']


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    document_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    document_type = serializers.CharField(max_length=50, required=False, default='other')


class ContractListSerializer(serializers.ModelSerializer):
    company_name = serializers.SerializerMethodField()
    contact_email = serializers.SerializerMethodField()
    merchant_name = serializers.CharField(source='merchant.company_name', read_only=True, default=None)
    created_by = UserPublicSerializer(read_only=True)
    assigned_to = UserPublicSerializer(read_only=True)
    total_monthly_profit = serializers.SerializerMethodField()

    class Meta:
        model = Contract
        fields = [
            'id',
            'contract_number',
            'status',
            'source',
            'merchant',
            'merchant_name',
            'company_name',
            'contact_email',
            'created_by',
            'assigned_to',
            'current_step',
            'total_monthly_profit',
            'submitted_at',
            'signed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_company_name(self, obj):
        company = getattr(obj, 'company_info', None)
        return company.company_name if company else None

    def get_contact_email(self, obj):
        contact = getattr(obj, 'contact_info', None)
        return contact.email if contact else None

    def get_total_monthly_profit(self, obj):
        calculation = getattr(obj, 'calculation', None)
        return str(calculation.total_monthly_profit) if calculation else None


class ContractDetailSerializer(serializers.ModelSerializer):
    created_by = UserPublicSerializer(read_only=True)
    assigned_to = UserPublicSerializer(read_only=True)
    admin_approved_by = UserPublicSerializer(read_only=True)
    contact_info = serializers.SerializerMethodField()
    company_info = serializers.SerializerMethodField()
    business_locations = BusinessLocationSerializer(many=True, read_only=True)
    authorized_persons = AuthorizedPersonSerializer(many=True, read_only=True)
    actual_owners = ActualOwnerSerializer(many=True, read_only=True)
    items = ContractItemSerializer(many=True, read_only=True)
    calculation = serializers.SerializerMethodField()
    documents = ContractDocumentSerializer(many=True, read_only=True)

    class Meta:
        model = Contract
        fields = [
            'id',
            'contract_number',
            'merchant',
            'status',
            'source',
            'notes',
            'lost_reason',
            'lost_notes',
            'current_step',
            'visited_steps',
            'created_by',
            'assigned_to',
            'submitted_at',
            'admin_approved_at',
            'admin_approved_by',
            'contract_generated_at',
            'email_viewed_at',
            'signed_at',
            'signed_by_name',
            'signature_ip',
            'contact_info',
            'company_info',
            'business_locations',
            'authorized_persons',
            'actual_owners',
            'items',
            'calculation',
            'documents',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_contact_info(self, obj):
        contact = getattr(obj, 'contact_info', None)
        return ContactInfoSerializer(contact).data if contact else None

    def get_company_info(self, obj):
        company = getattr(obj, 'company_info', None)
        return CompanyInfoSerializer(company).data if company else None

    def get_calculation(self, obj):
        calculation = getattr(obj, 'calculation', None)
        return ContractCalculationSerializer(calculation).data if calculation else None


# =============================================================================
# Contract write / action inputs
# =============================================================================

class ContractCreateSerializer(serializers.Serializer):
    source = serializers.ChoiceField(choices=ContractSource.choices, default=ContractSource.OTHER)
    merchant_id = serializers.UUIDField(required=False, allow_null=True)
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ContractUpdateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Contract
        fields = ['source', 'notes']


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ContractStatus.choices)
    lost_reason = serializers.ChoiceField(choices=LostReason.choices, required=False, allow_blank=True, default='')
    lost_notes = serializers.CharField(required=False, allow_blank=True, default='')


class SignContractSerializer(serializers.Serializer):
    signer_name = serializers.CharField(max_length=200)


class CopyContractSerializer(serializers.Serializer):
    segments = serializers.ListField(
        child=serializers.CharField(),
        allow_empty=True,
        default=list(SEGMENTS),
    )


class BulkIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class BulkStatusSerializer(BulkIdsSerializer):
    status = serializers.ChoiceField(choices=ContractStatus.choices)
    lost_reason = serializers.ChoiceField(choices=LostReason.choices, required=False, allow_blank=True, default='')
    lost_notes = serializers.CharField(required=False, allow_blank=True, default='')


class BulkAssignSerializer(BulkIdsSerializer):
    assigned_to = serializers.UUIDField(allow_null=True)


class ContractFilterSerializer(serializers.Serializer):
    status = serializers.ListField(
        child=serializers.ChoiceField(choices=ContractStatus.choices),
        required=False,
    )
    source = serializers.ChoiceField(choices=ContractSource.choices, required=False)
    merchant = serializers.UUIDField(required=False)
    assigned_to = serializers.UUIDField(required=False)
    created_from = serializers.DateField(required=False)
    created_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class CalculatorPreviewSerializer(serializers.Serializer):
    items = ContractItemSerializer(many=True)
    monthly_turnover = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    regulated_rate = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, default=0)
    unregulated_rate = serializers.DecimalField(max_digits=6, decimal_places=3, min_value=0, default=0)


class CalculationResultSerializer(serializers.Serializer):
    monthly_turnover = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_customer_payments = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_company_costs = serializers.DecimalField(max_digits=14, decimal_places=2)
    effective_regulated = serializers.DecimalField(max_digits=6, decimal_places=3)
    effective_unregulated = serializers.DecimalField(max_digits=6, decimal_places=3)
    regulated_fee = serializers.DecimalField(max_digits=14, decimal_places=2)
    unregulated_fee = serializers.DecimalField(max_digits=14, decimal_places=2)
    transaction_margin = serializers.DecimalField(max_digits=14, decimal_places=2)
    service_margin = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_monthly_profit = serializers.DecimalField(max_digits=14, decimal_places=2)
    lines = serializers.ListField(child=serializers.DictField(), read_only=True)


# =============================================================================
# Kanban
# =============================================================================

class KanbanColumnSerializer(serializers.ModelSerializer):
    statuses = serializers.ListField(
        child=serializers.ChoiceField(choices=ContractStatus.choices),
        allow_empty=False,
    )
    shared = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta:
        model = KanbanColumn
        fields = ['id', 'title', 'statuses', 'color', 'position', 'is_active', 'user', 'shared']
        read_only_fields = ['id', 'user']


class KanbanBoardColumnSerializer(serializers.Serializer):
    id = serializers.UUIDField(allow_null=True)
    title = serializers.CharField()
    statuses = serializers.ListField(child=serializers.CharField())
    color = serializers.CharField()
    position = serializers.IntegerField()
    count = serializers.IntegerField()
    contracts = ContractListSerializer(many=True)
