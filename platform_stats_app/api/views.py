from django.db.models import Avg
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from gigs_app.models import Gig
from profile_app.models import FreelancerProfile
from reviews_app.models import Review


class BaseInfoView(APIView):
    """
    Public, read-only summary of the marketplace.

    Endpoint:
        GET /api/base-info/

    Only approved reviews and active gigs are counted, matching what anonymous
    visitors can see through the other endpoints. `average_rating` is rounded to
    one decimal and is null while there are no reviews.
    """
    permission_classes = [AllowAny]

    def get(self, request, format=None):
        reviews = Review.objects.filter(moderation_status=Review.ModerationStatus.APPROVED)

        average_rating = reviews.aggregate(average=Avg('rating'))['average']
        if average_rating is not None:
            average_rating = round(average_rating, 1)

        data = {
            'review_count': reviews.count(),
            'average_rating': average_rating,
            'freelancer_profile_count': FreelancerProfile.objects.count(),
            'gig_count': Gig.objects.filter(status=Gig.GigStatus.ACTIVE).count(),
        }
        return Response(data, status=status.HTTP_200_OK)
