# payroll/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from payroll.views import PayrollPostGLView, PayrollTransactionViewSet

router = DefaultRouter()
router.register(r"transactions", PayrollTransactionViewSet, basename="payroll-transactions")

urlpatterns = [
    path("post-gl/", PayrollPostGLView.as_view(), name="payroll-post-gl"),
    path("", include(router.urls)),
]
