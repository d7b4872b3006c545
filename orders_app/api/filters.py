import django_filters
from django.db.models import Q

from ..models import Order, OrderStatus


class OrderFilter(django_filters.FilterSet):
    """
    Filters for the order list.

    - `status`: exact order status, e.g. `?status=IN_PROGRESS`.
    - `role`: `client` keeps the orders the user bought, `freelancer` the ones they sell.
    """
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    role = django_filters.ChoiceFilter(
        choices=(('client', 'client'), ('freelancer', 'freelancer')),
        method='filter_role'
    )

    class Meta:
        model = Order
        fields = ['status', 'role']

    def filter_role(self, queryset, name, value):
        user = self.request.user
        if value == 'client':
            return queryset.filter(client=user)
        if value == 'freelancer':
            return queryset.filter(freelancer__user=user)
        return queryset.filter(Q(client=user) | Q(freelancer__user=user))
