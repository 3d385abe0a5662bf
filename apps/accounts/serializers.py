from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'phone',
            'display_name',
            'role',
            'organization',
            'team',
            'email_verified',
            'created_at',
            'last_login',
        ]
        read_only_fields = [
            'id', 'email', 'role', 'organization', 'team',
            'email_verified', 'created_at', 'last_login',
        ]


class UserRegistrationSerializer(serializers.Serializer):
    """Input serializer for user registration."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    first_name = serializers.CharField(max_length=100, required=False, default='')
    last_name = serializers.CharField(max_length=100, required=False, default='')
    phone = serializers.CharField(max_length=32, required=False, default='')

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordResetRequestSerializer(serializers.Serializer):
    """Serializer for password reset request."""

    email = serializers.EmailField(required=True)


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Serializer for password reset confirmation."""

    token = serializers.CharField(required=True)
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


class UserPublicSerializer(serializers.ModelSerializer):
    """Minimal user info for nesting in contracts, teams, etc."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'role']
        read_only_fields = fields


class TeamMemberSerializer(serializers.ModelSerializer):
    """Back-office view of a user account."""

    display_name = serializers.CharField(source='get_display_name', read_only=True)
    organization_name = serializers.CharField(source='organization.name', read_only=True, default=None)
    team_name = serializers.CharField(source='team.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'phone',
            'display_name',
            'role',
            'organization',
            'organization_name',
            'team',
            'team_name',
            'is_active',
            'email_verified',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class TeamMemberCreateSerializer(serializers.Serializer):
    """Input serializer for creating a back-office user."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, validators=[validate_password])
    first_name = serializers.CharField(max_length=100, required=False, default='')
    last_name = serializers.CharField(max_length=100, required=False, default='')
    phone = serializers.CharField(max_length=32, required=False, default='')
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.PARTNER)
    team_id = serializers.UUIDField(required=False, allow_null=True)


class TeamMemberUpdateSerializer(serializers.Serializer):
    """Input serializer for updating a back-office user."""

    first_name = serializers.CharField(max_length=100, required=False)
    last_name = serializers.CharField(max_length=100, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    is_active = serializers.BooleanField(required=False)
    team_id = serializers.UUIDField(required=False)
