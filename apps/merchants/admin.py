from django.contrib import admin

from .models import Merchant


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'ico', 'contact_person_email', 'user', 'created_at']
    search_fields = ['company_name', 'ico', 'dic', 'contact_person_email']
    readonly_fields = ['company_name_normalized', 'created_by', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    list_select_related = ['user']
