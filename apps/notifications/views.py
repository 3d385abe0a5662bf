from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import NotificationSerializer
from .services import (
    list_notifications,
    unread_count,
    mark_as_read,
    mark_all_as_read,
    NotificationNotFoundError,
)


@extend_schema(responses={200: NotificationSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """
    Latest notifications of the current user.

    Response:
        {"results": [...], "unread_count": 3}
    """
    notifications = list_notifications(user=request.user)
    return Response({
        'results': NotificationSerializer(notifications, many=True).data,
        'unread_count': unread_count(user=request.user),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    return Response({'unread_count': unread_count(user=request.user)})


@extend_schema(request=None, responses={200: NotificationSerializer})
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, notification_id):
    try:
        notification = mark_as_read(notification_id=notification_id, user=request.user)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(NotificationSerializer(notification).data)


@extend_schema(request=None)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    count = mark_all_as_read(user=request.user)
    return Response({'marked': count})
