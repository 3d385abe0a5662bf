"""Response serializers for dashboard endpoints."""

from rest_framework import serializers


class AdminStatsSerializer(serializers.Serializer):
    total_contracts = serializers.IntegerField()
    signed_contracts = serializers.IntegerField()
    pending_contracts = serializers.IntegerField()
    total_merchants = serializers.IntegerField()
    monthly_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    contract_growth = serializers.FloatField()


class ContractsStatsSerializer(serializers.Serializer):
    by_status = serializers.DictField(child=serializers.IntegerField())
    total_contracts = serializers.IntegerField()
    active_contracts = serializers.IntegerField()
    total_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    conversion_rate = serializers.FloatField()
    average_deal_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    expiring_contracts = serializers.IntegerField()


class TeamPerformanceSerializer(serializers.Serializer):
    team_id = serializers.UUIDField()
    team_name = serializers.CharField()
    organization_name = serializers.CharField()
    member_count = serializers.IntegerField()
    contracts_created = serializers.IntegerField()
    contracts_signed = serializers.IntegerField()
    conversion_rate = serializers.FloatField()
    total_monthly_profit = serializers.DecimalField(max_digits=14, decimal_places=2)
