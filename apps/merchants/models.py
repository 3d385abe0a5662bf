import re
import uuid

from django.conf import settings
from django.db import models


class Merchant(models.Model):
    """
    Company that signs contracts.

    Created automatically from a contract's company info, or by staff.
    A merchant may have one portal account (`user`) once a contract is signed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company_name = models.CharField(max_length=255, db_index=True)
    company_name_normalized = models.CharField(max_length=255, db_index=True, editable=False)
    ico = models.CharField(max_length=20, blank=True, db_index=True)
    dic = models.CharField(max_length=20, blank=True)
    vat_number = models.CharField(max_length=20, blank=True)

    contact_person_name = models.CharField(max_length=200, blank=True)
    contact_person_email = models.EmailField(blank=True)
    contact_person_phone = models.CharField(max_length=32, blank=True)

    address_street = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=100, blank=True)
    address_zip_code = models.CharField(max_length=20, blank=True)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='merchant_profile'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_merchants'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'merchants'
        constraints = [
            models.UniqueConstraint(
                fields=['company_name_normalized', 'ico'],
                name='unique_merchant_company'
            ),
        ]
        indexes = [
            models.Index(fields=['company_name_normalized', 'ico']),
        ]
        ordering = ['company_name']

    def __str__(self):
        if self.ico:
            return f"{self.company_name} ({self.ico})"
        return self.company_name

    def save(self, *args, **kwargs):
        self.company_name_normalized = self._normalize_string(self.company_name)
        self.ico = (self.ico or '').strip()
        super().save(*args, **kwargs)

    @staticmethod
    def _normalize_string(text):
        text = text.lower().strip()
        text = re.sub(r'\s+', ' ', text)
        text = re.sub(r'[^\w\s-]', '', text)
        return text

    @property
    def has_portal_account(self):
        return self.user_id is not None
