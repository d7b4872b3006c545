import django_filters

from ..models import Dispute


class DisputeFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Dispute.DisputeStatus.choices)
    order_id = django_filters.NumberFilter(field_name='order_id')

    class Meta:
        model = Dispute
        fields = ['status', 'order_id']
