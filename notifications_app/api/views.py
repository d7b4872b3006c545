import logging

from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from ..models import Notification
from .filters import NotificationFilter
from .serializers import NotificationSerializer, NotificationCreateSerializer

logger = logging.getLogger(__name__)


class NotificationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    """
    The notification inbox of the requesting user.

    - `GET /api/notifications/`: own, non-expired notifications (filters `type`, `is_read`).
    - `GET /api/notifications/{id}/`: a single own notification.
    - `DELETE /api/notifications/{id}/`: delete an own notification.
    - `PATCH /api/notifications/{id}/read/`: mark one notification as read.
    - `PATCH /api/notifications/read-all/`: mark all unread notifications as read.
    - `POST /api/notifications/`: administrators send a notification to any user.

    Notifications of other users are invisible and answered with 404.
    """
    filterset_class = NotificationFilter
    pagination_class = None

    def get_permissions(self):
        if self.action == 'create':
            self.permission_classes = [IsAdminUser]
        else:
            self.permission_classes = [IsAuthenticated]
        return super().get_permissions()

    def get_queryset(self):
        now = timezone.now()
        return Notification.objects.filter(user=self.request.user).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gte=now)
        )

    def get_serializer_class(self):
        if self.action == 'create':
            return NotificationCreateSerializer
        return NotificationSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        notification = Notification.objects.create(**serializer.validated_data)
        logger.info("Admin %s sent notification %s to user %s",
                    request.user.id, notification.id, notification.user_id)
        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'])
    def read(self, request, pk=None):
        notification = self.get_object()
        if notification.is_read:
            raise ValidationError("Notification is already marked as read.")
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at'])
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=['patch'], url_path='read-all')
    def read_all(self, request):
        updated = self.get_queryset().filter(is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({'marked_read': updated})
