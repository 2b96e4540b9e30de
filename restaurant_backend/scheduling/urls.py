# scheduling/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from scheduling.views import ShiftViewSet, TimeEntryViewSet

router = DefaultRouter()
router.register(r"shifts", ShiftViewSet, basename="shifts")
router.register(r"clock", TimeEntryViewSet, basename="clock")

urlpatterns = [
    path("", include(router.urls)),
]
