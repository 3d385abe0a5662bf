from decimal import Decimal

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models
import uuid


class ContractStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    SUBMITTED = 'submitted', 'Submitted'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
    IN_PROGRESS = 'in_progress', 'In progress'
    SENT_TO_CLIENT = 'sent_to_client', 'Sent to client'
    EMAIL_VIEWED = 'email_viewed', 'Email viewed'
    STEP_COMPLETED = 'step_completed', 'Step completed'
    CONTRACT_GENERATED = 'contract_generated', 'Contract generated'
    SIGNED = 'signed', 'Signed'
    WAITING_FOR_SIGNATURE = 'waiting_for_signature', 'Waiting for signature'
    LOST = 'lost', 'Lost'
    PENDING_APPROVAL = 'pending_approval', 'Pending approval'
    REQUEST_DRAFT = 'request_draft', 'Request draft'


class ContractSource(models.TextChoices):
    TELESALES = 'telesales', 'Telesales'
    FACEBOOK = 'facebook', 'Facebook'
    WEB = 'web', 'Web'
    EMAIL = 'email', 'Email'
    REFERRAL = 'referral', 'Referral'
    OTHER = 'other', 'Other'


class LostReason(models.TextChoices):
    NO_RESPONSE = 'no_response', 'No response'
    PRICE_TOO_HIGH = 'price_too_high', 'Price too high'
    COMPETITOR_CHOSEN = 'competitor_chosen', 'Competitor chosen'
    NOT_INTERESTED = 'not_interested', 'Not interested'
    TECHNICAL_ISSUES = 'technical_issues', 'Technical issues'
    OTHER = 'other', 'Other'


class Salutation(models.TextChoices):
    MR = 'mr', 'Mr'
    MS = 'ms', 'Ms'


class RegistryType(models.TextChoices):
    PUBLIC = 'public', 'Public registry'
    BUSINESS = 'business', 'Trade registry'
    OTHER = 'other', 'Other'


class Seasonality(models.TextChoices):
    YEAR_ROUND = 'year-round', 'Year-round'
    SEASONAL = 'seasonal', 'Seasonal'


class IdentityDocumentType(models.TextChoices):
    ID_CARD = 'id_card', 'ID card'
    PASSPORT = 'passport', 'Passport'


class ContractItemType(models.TextChoices):
    DEVICE = 'device', 'Device'
    SERVICE = 'service', 'Service'


def money_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        **kwargs
    )


class Contract(models.Model):
    """Merchant contract moving through the onboarding pipeline."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract_number = models.CharField(max_length=20, unique=True, db_index=True)
    merchant = models.ForeignKey(
        'merchants.Merchant',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_contracts'
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_contracts'
    )

    status = models.CharField(max_length=30, choices=ContractStatus.choices, default=ContractStatus.DRAFT)
    source = models.CharField(max_length=20, choices=ContractSource.choices, default=ContractSource.OTHER)

    # Wizard progress
    current_step = models.PositiveSmallIntegerField(default=0)
    visited_steps = models.JSONField(default=list, blank=True)
    draft_fingerprint = models.CharField(max_length=64, blank=True, editable=False)

    notes = models.TextField(blank=True)
    lost_reason = models.CharField(max_length=30, choices=LostReason.choices, blank=True)
    lost_notes = models.TextField(blank=True)

    # Workflow timestamps
    submitted_at = models.DateTimeField(null=True, blank=True)
    admin_approved_at = models.DateTimeField(null=True, blank=True)
    admin_approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_contracts'
    )
    contract_generated_at = models.DateTimeField(null=True, blank=True)
    email_viewed_at = models.DateTimeField(null=True, blank=True)

    # Signature
    signed_at = models.DateTimeField(null=True, blank=True)
    signed_by_name = models.CharField(max_length=200, blank=True)
    signature_ip = models.GenericIPAddressField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contracts'
        indexes = [
            models.Index(fields=['status', 'created_at']),
            models.Index(fields=['created_by', 'status']),
            models.Index(fields=['assigned_to', 'status']),
            models.Index(fields=['merchant', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Contract {self.contract_number} ({self.status})"

    @property
    def is_locked(self):
        """Signed and lost contracts no longer accept wizard edits."""
        return self.status in (ContractStatus.SIGNED, ContractStatus.LOST)


class ContactInfo(models.Model):
    """Wizard step: who we talk to."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.OneToOneField(Contract, on_delete=models.CASCADE, related_name='contact_info')
    salutation = models.CharField(max_length=5, choices=Salutation.choices, blank=True)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    phone_prefix = models.CharField(max_length=6, default='+420')
    phone = models.CharField(max_length=32, blank=True)
    user_role = models.CharField(max_length=100, blank=True)
    sales_note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contact_info'

    def __str__(self):
        return f"{self.first_name} {self.last_name} <{self.email}>"


class CompanyInfo(models.Model):
    """Wizard step: the legal entity signing the contract."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.OneToOneField(Contract, on_delete=models.CASCADE, related_name='company_info')
    company_name = models.CharField(max_length=255, blank=True)
    ico = models.CharField(max_length=20, blank=True, db_index=True)
    dic = models.CharField(max_length=20, blank=True)
    vat_number = models.CharField(max_length=20, blank=True)
    is_vat_payer = models.BooleanField(default=False)

    registry_type = models.CharField(max_length=10, choices=RegistryType.choices, default=RegistryType.PUBLIC)
    court = models.CharField(max_length=200, blank=True)
    section = models.CharField(max_length=20, blank=True)
    insert_number = models.CharField(max_length=20, blank=True)

    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_zip_code = models.CharField(max_length=20, blank=True)

    contact_address_same_as_main = models.BooleanField(default=True)
    contact_address_street = models.CharField(max_length=255, blank=True)
    contact_address_city = models.CharField(max_length=100, blank=True)
    contact_address_zip_code = models.CharField(max_length=20, blank=True)

    contact_person_first_name = models.CharField(max_length=100, blank=True)
    contact_person_last_name = models.CharField(max_length=100, blank=True)
    contact_person_email = models.EmailField(blank=True)
    contact_person_phone = models.CharField(max_length=32, blank=True)
    contact_person_is_technical = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'company_info'
        verbose_name_plural = 'company info'

    def __str__(self):
        return f"{self.company_name} ({self.ico})"

    @property
    def contact_person_name(self):
        return f"{self.contact_person_first_name} {self.contact_person_last_name}".strip()


class BusinessLocation(models.Model):
    """Point of sale where devices are installed. Keyed by the client's location_id."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='business_locations')
    location_id = models.CharField(max_length=64)
    name = models.CharField(max_length=200, blank=True)
    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_zip_code = models.CharField(max_length=20, blank=True)
    iban = models.CharField(max_length=34, blank=True)
    business_sector = models.CharField(max_length=100, blank=True)
    estimated_turnover = money_field()
    average_transaction = money_field()
    has_pos = models.BooleanField(default=False)
    opening_hours = models.CharField(max_length=255, blank=True)
    seasonality = models.CharField(max_length=12, choices=Seasonality.choices, default=Seasonality.YEAR_ROUND)
    seasonal_weeks = models.PositiveSmallIntegerField(null=True, blank=True)
    contact_person_name = models.CharField(max_length=200, blank=True)
    contact_person_email = models.EmailField(blank=True)
    contact_person_phone = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'business_locations'
        constraints = [
            models.UniqueConstraint(fields=['contract', 'location_id'], name='unique_contract_location'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return self.name or self.location_id


class PersonFields(models.Model):
    """Identity fields shared by authorized persons and actual owners."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    maiden_name = models.CharField(max_length=100, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    birth_number = models.CharField(max_length=20, blank=True)
    birth_place = models.CharField(max_length=100, blank=True)
    citizenship = models.CharField(max_length=100, blank=True)
    permanent_address = models.CharField(max_length=255, blank=True)
    is_politically_exposed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['created_at']

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip()


class AuthorizedPerson(PersonFields):
    """Person allowed to sign for the company. Keyed by the client's person_id."""

    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='authorized_persons')
    person_id = models.CharField(max_length=64)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    position = models.CharField(max_length=100, blank=True)
    document_type = models.CharField(
        max_length=10,
        choices=IdentityDocumentType.choices,
        default=IdentityDocumentType.ID_CARD
    )
    document_number = models.CharField(max_length=50, blank=True)
    document_validity = models.DateField(null=True, blank=True)
    document_issuer = models.CharField(max_length=100, blank=True)
    document_country = models.CharField(max_length=100, blank=True)
    is_us_citizen = models.BooleanField(default=False)

    class Meta(PersonFields.Meta):
        db_table = 'authorized_persons'
        constraints = [
            models.UniqueConstraint(fields=['contract', 'person_id'], name='unique_contract_person'),
        ]


class ActualOwner(PersonFields):
    """Ultimate beneficial owner. Keyed by the client's owner_id."""

    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='actual_owners')
    owner_id = models.CharField(max_length=64)

    class Meta(PersonFields.Meta):
        db_table = 'actual_owners'
        constraints = [
            models.UniqueConstraint(fields=['contract', 'owner_id'], name='unique_contract_owner'),
        ]


class ContractItem(models.Model):
    """Device or service line on a contract, priced at the time of selection."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='items')
    item_id = models.CharField(max_length=64)
    warehouse_item = models.ForeignKey(
        'catalog.WarehouseItem',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contract_items'
    )
    item_type = models.CharField(max_length=10, choices=ContractItemType.choices, default=ContractItemType.DEVICE)
    category = models.CharField(max_length=100, blank=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    count = models.PositiveIntegerField(default=1)
    monthly_fee = money_field()
    company_cost = money_field()
    custom_value = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_items'
        constraints = [
            models.UniqueConstraint(fields=['contract', 'item_id'], name='unique_contract_item'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.count}x {self.name}"


class ContractItemAddon(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract_item = models.ForeignKey(ContractItem, on_delete=models.CASCADE, related_name='addons')
    addon_id = models.CharField(max_length=64)
    addon_name = models.CharField(max_length=200)
    monthly_fee = money_field()
    company_cost = money_field()
    is_per_device = models.BooleanField(default=False)
    custom_quantity = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_item_addons'
        ordering = ['created_at']

    def __str__(self):
        return self.addon_name


class ContractCalculation(models.Model):
    """Stored result of the fee calculator plus its card-rate inputs."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.OneToOneField(Contract, on_delete=models.CASCADE, related_name='calculation')

    # Inputs (percent)
    regulated_rate = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal('0'))
    unregulated_rate = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal('0'))

    # Results
    monthly_turnover = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_customer_payments = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_company_costs = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    effective_regulated = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal('0'))
    effective_unregulated = models.DecimalField(max_digits=6, decimal_places=3, default=Decimal('0'))
    regulated_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    unregulated_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    transaction_margin = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    service_margin = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_monthly_profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    calculation_data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_calculations'

    def __str__(self):
        return f"Calculation for {self.contract_id}"


def contract_document_path(instance, filename):
    return f"contracts/{instance.contract_id}/{filename}"


class DocumentStatus(models.TextChoices):
    UPLOADED = 'uploaded', 'Uploaded'
    GENERATED = 'generated', 'Generated'
    SIGNED = 'signed', 'Signed'


class ContractDocument(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='documents')
    document_name = models.CharField(max_length=255)
    document_type = models.CharField(max_length=50, default='other')
    file = models.FileField(upload_to=contract_document_path)
    status = models.CharField(max_length=20, choices=DocumentStatus.choices, default=DocumentStatus.UPLOADED)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='uploaded_documents'
    )
    signed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contract_documents'
        ordering = ['-created_at']

    def __str__(self):
        return self.document_name


class KanbanColumn(models.Model):
    """Board column grouping one or more contract statuses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=100)
    statuses = models.JSONField(default=list)
    color = models.CharField(max_length=7, default='#6B7280')
    position = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='kanban_columns'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'kanban_columns'
        ordering = ['position']

    def __str__(self):
        return self.title
