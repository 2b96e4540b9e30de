# branches/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from branches.views import BranchViewSet

router = SimpleRouter()
router.register("", BranchViewSet, basename="branch")

urlpatterns = [
    path("", include(router.urls)),
]
