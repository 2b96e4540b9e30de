# users/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import LoginView, MeView, RegisterView, StaffViewSet

app_name = "users"

router = DefaultRouter()
router.register("staff", StaffViewSet, basename="staff")

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    path("", include(router.urls)),
]
