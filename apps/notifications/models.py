from django.conf import settings
from django.db import models
import uuid


class NotificationType(models.TextChoices):
    CONTRACT_CREATED = 'contract_created', 'Contract created'
    CONTRACT_STATUS_CHANGED = 'contract_status_changed', 'Contract status changed'
    MERCHANT_REGISTERED = 'merchant_registered', 'Merchant registered'
    ERROR_OCCURRED = 'error_occurred', 'Error occurred'
    SYSTEM_ALERT = 'system_alert', 'System alert'


class NotificationPriority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class EntityType(models.TextChoices):
    CONTRACTS = 'contracts', 'Contracts'
    MERCHANTS = 'merchants', 'Merchants'
    ORGANIZATIONS = 'organizations', 'Organizations'
    USERS = 'users', 'Users'
    TEAMS = 'teams', 'Teams'


class Notification(models.Model):
    """In-app message for one user, optionally pointing at an entity."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=30, choices=NotificationType.choices)
    priority = models.CharField(
        max_length=10,
        choices=NotificationPriority.choices,
        default=NotificationPriority.MEDIUM
    )
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    entity_type = models.CharField(max_length=20, choices=EntityType.choices, blank=True)
    related_entity_id = models.UUIDField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'is_read']),
            models.Index(fields=['user', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_type_display()}: {self.title}"
