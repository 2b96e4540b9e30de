"""
PATH: users/views/auth.py

AUTH ENDPOINTS

- register: staff self-registration (role defaults to employee)
- login: email OR username + password; opens a session AND returns a JWT pair
"""

from django.contrib.auth import authenticate, login
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from permissions.roles import ROLE_CHOICES, ROLE_EMPLOYEE
from users.models import User

# ---------------------------
# SERIALIZERS (LOCAL, SIMPLE)
# ---------------------------


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=6)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(help_text="Email or username")
    password = serializers.CharField(write_only=True)


class LoginResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user_id = serializers.UUIDField()
    email = serializers.EmailField()
    role = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()


# ---------------------------
# VIEWS
# ---------------------------


class RegisterView(APIView):
    permission_classes = [AllowAny]
    serializer_class = RegisterSerializer

    @extend_schema(
        request=RegisterSerializer,
        responses={201: dict},
        description="Register a new staff account",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        # Only admins may hand out elevated roles at registration time.
        role = data.get("role") or ROLE_EMPLOYEE
        if not getattr(request.user, "is_superuser", False):
            role = ROLE_EMPLOYEE

        user = User.objects.create_user(
            email=data["email"],
            username=data.get("username") or None,
            password=data["password"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=role,
            is_staff=True,
        )

        return Response(
            {"message": "User registered successfully", "user_id": str(user.id)},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: LoginResponseSerializer},
        description="Authenticate with email or username and password",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            username=serializer.validated_data["identifier"],
            password=serializer.validated_data["password"],
        )

        if not user:
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        login(request, user, backend="users.auth_backends.EmailOrUsernameBackend")
        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "message": "Login successful",
                "user_id": user.id,
                "email": user.email,
                "role": user.role,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            }
        )
