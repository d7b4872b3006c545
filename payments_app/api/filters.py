import django_filters

from ..models import Transaction


class TransactionFilter(django_filters.FilterSet):
    """
    Filters the transaction list by `type`, `status` and `order_id`.
    """
    type = django_filters.ChoiceFilter(choices=Transaction.TransactionType.choices)
    status = django_filters.ChoiceFilter(choices=Transaction.TransactionStatus.choices)
    order_id = django_filters.NumberFilter(field_name='order_id')

    class Meta:
        model = Transaction
        fields = ['type', 'status', 'order_id']
