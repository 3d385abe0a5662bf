from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Notification
        fields = [
            'id',
            'type',
            'priority',
            'title',
            'message',
            'entity_type',
            'related_entity_id',
            'is_read',
            'read_at',
            'created_at',
        ]
        read_only_fields = fields
