import django_filters
from gigs_app.models import Gig


class GigFilter(django_filters.FilterSet):
    """
    A `FilterSet` for the gig list endpoint.

    `min_price` and `max_delivery_time` work on values annotated by the ViewSet's
    `get_queryset` (the cheapest package and the fastest delivery of each gig), the
    other filters on plain model fields.

    Attributes:
        min_price (NumberFilter): Gigs whose cheapest package costs at least the value.
        max_delivery_time (NumberFilter): Gigs with a package deliverable within the value.
        freelancer_id (NumberFilter): Gigs of one FreelancerProfile.
        category (CharFilter): Case-insensitive exact category match.
        status (ChoiceFilter): Gig status.
    """
    min_price = django_filters.NumberFilter(field_name="min_price", lookup_expr='gte')
    max_delivery_time = django_filters.NumberFilter(
        field_name="min_delivery_time_days", lookup_expr='lte'
    )
    freelancer_id = django_filters.NumberFilter(field_name="freelancer__id")
    category = django_filters.CharFilter(field_name="category", lookup_expr='iexact')
    status = django_filters.ChoiceFilter(choices=Gig.GigStatus.choices)

    class Meta:
        model = Gig
        fields = ['freelancer_id', 'category', 'status', 'min_price', 'max_delivery_time']
