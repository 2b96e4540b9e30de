from .auth import LoginView, RegisterView
from .me import MeView
from .staff import StaffViewSet

__all__ = [
    "RegisterView",
    "LoginView",
    "MeView",
    "StaffViewSet",
]
