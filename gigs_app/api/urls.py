from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    GigViewSet,
    GigPackageViewSet
)

router = DefaultRouter()
router.register(r'gigs', GigViewSet, basename='gig')
router.register(r'gig-packages', GigPackageViewSet, basename='gigpackage')

urlpatterns = [
    path('', include(router.urls)),
]
