import django_filters
from ..models import Review


class ReviewFilter(django_filters.FilterSet):
    """
    Query parameter filters for the review list.
    """
    # The FreelancerProfile the reviews are about
    freelancer_id = django_filters.NumberFilter(field_name="freelancer__id")

    order_id = django_filters.NumberFilter(field_name="order__id")

    class Meta:
        model = Review
        fields = ['freelancer_id', 'order_id']
