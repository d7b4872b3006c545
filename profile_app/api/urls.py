from django.urls import path
from .views import (
    ProfileDetailView,
    ClientProfileListView,
    FreelancerProfileListView,
    FreelancerProfileDetailView,
)

urlpatterns = [
    # The name 'pk' in the path must match `lookup_url_kwarg` in the view.
    path('profile/<int:pk>/', ProfileDetailView.as_view(), name='profile-detail'),
    path('profiles/client/', ClientProfileListView.as_view(), name='client-profile-list'),
    path('profiles/freelancer/', FreelancerProfileListView.as_view(), name='freelancer-profile-list'),
    path('freelancers/<int:pk>/', FreelancerProfileDetailView.as_view(), name='freelancer-profile-detail'),
]
