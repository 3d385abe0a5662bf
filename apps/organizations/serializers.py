from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Organization, Team


class OrganizationSerializer(serializers.ModelSerializer):
    """Organization with team and member counts (annotated by the queryset)."""

    team_count = serializers.IntegerField(read_only=True, default=0)
    member_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Organization
        fields = [
            'id',
            'name',
            'description',
            'color',
            'logo_url',
            'is_active',
            'team_count',
            'member_count',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']


class OrganizationCreateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Organization
        fields = ['name', 'description', 'color', 'logo_url', 'is_active']


class TeamSerializer(serializers.ModelSerializer):

    organization_name = serializers.CharField(source='organization.name', read_only=True)
    team_leader = UserPublicSerializer(read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id',
            'organization',
            'organization_name',
            'name',
            'description',
            'team_leader',
            'member_count',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_member_count(self, obj):
        return obj.members.filter(is_active=True).count()


class TeamCreateSerializer(serializers.Serializer):
    organization_id = serializers.UUIDField()
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    team_leader_id = serializers.UUIDField(required=False, allow_null=True)


class TeamUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    team_leader_id = serializers.UUIDField(required=False)


class TeamMemberActionSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
