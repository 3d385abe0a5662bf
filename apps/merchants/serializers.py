from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Merchant


class MerchantSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)
    has_portal_account = serializers.BooleanField(read_only=True)

    class Meta:
        model = Merchant
        fields = [
            'id',
            'company_name',
            'ico',
            'dic',
            'vat_number',
            'contact_person_name',
            'contact_person_email',
            'contact_person_phone',
            'address_street',
            'address_city',
            'address_zip_code',
            'user',
            'has_portal_account',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'user', 'created_at', 'updated_at']
        # Duplicates are reported by the service with the existing merchant
        validators = []


class MerchantOverviewSerializer(serializers.Serializer):
    merchant = MerchantSerializer()
    contract_count = serializers.IntegerField()
    signed_count = serializers.IntegerField()
    location_count = serializers.IntegerField()
    total_monthly_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    latest_contract_status = serializers.CharField(allow_null=True)


class SimilarMerchantQuerySerializer(serializers.Serializer):
    company_name = serializers.CharField(required=False, allow_blank=True, default='')
    ico = serializers.CharField(required=False, allow_blank=True, default='')
    threshold = serializers.IntegerField(required=False, min_value=0, max_value=100)

    def validate(self, attrs):
        if not attrs['company_name'].strip() and not attrs['ico'].strip():
            raise serializers.ValidationError('Provide company_name or ico')
        return attrs


class SimilarMerchantSerializer(serializers.Serializer):
    merchant = MerchantSerializer()
    score = serializers.IntegerField()
    match_type = serializers.CharField()
