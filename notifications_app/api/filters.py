import django_filters
from ..models import Notification


class NotificationFilter(django_filters.FilterSet):
    """Filters the own notification list by `type` and `is_read`."""
    type = django_filters.ChoiceFilter(choices=Notification.NotificationType.choices)
    is_read = django_filters.BooleanFilter()

    class Meta:
        model = Notification
        fields = ['type', 'is_read']
