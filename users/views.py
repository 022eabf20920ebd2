"""Users app API views.

Endpoints:
- auth/signin, auth/refresh, auth/verify, auth/signout: JWT lifecycle.
- account/register: creates a customer account.
- account/profile: reads or updates the authenticated user's profile.
"""

from common.responses import envelope
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from .logging import log_auth_event
from .serializers import (
    EmailOrPhoneTokenObtainPairSerializer,
    RegistrationSerializer,
    SignOutSerializer,
    UserMeSerializer,
)


@extend_schema(
    operation_id="users_current_user",
    summary="Get or update current user profile",
    description=(
        "GET returns the authenticated user's profile; PATCH updates `first_name`, `last_name` and `phone`.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth."
    ),
    tags=["User Endpoints"],
    request=UserMeSerializer,
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    if request.method == "PATCH":
        serializer = UserMeSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        log_auth_event("profile_update", request, user=request.user)
        return Response(envelope(True, message="Profile updated", data={"user": serializer.data}))
    log_auth_event("profile", request, user=request.user)
    return Response(envelope(True, data={"user": UserMeSerializer(request.user).data}))


current_user.throttle_scope = "profile"


@extend_schema(tags=["User Endpoints"], request=RegistrationSerializer)
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def register(request):
    """Register a new customer and return their profile with a token pair."""
    serializer = RegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        log_auth_event("register", request, status="invalid")
        return Response(
            envelope(False, message="Validation error", errors=serializer.errors),
            status=status.HTTP_400_BAD_REQUEST,
        )
    user = serializer.save()
    log_auth_event("register", request, user=user, status="success")
    refresh = RefreshToken.for_user(user)
    data = {
        "user": UserMeSerializer(user).data,
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }
    return Response(envelope(True, message="Account created", data=data), status=status.HTTP_201_CREATED)


register.throttle_scope = "register"


class SignOutView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"], request=SignOutSerializer)
    def post(self, request):
        serializer = SignOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response(envelope(False, message="Invalid token."), status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request, status="success")
        return Response(envelope(True, message="Signed out."))


class _EnvelopedTokenView:
    """Wrap a simplejwt view's payload into the envelope and log the outcome."""

    auth_action = ""

    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except APIException:
            log_auth_event(self.auth_action, request, status="failed")
            raise
        log_auth_event(self.auth_action, request, status="success")
        return Response(envelope(True, data=resp.data), status=resp.status_code)


class SignInView(_EnvelopedTokenView, TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailOrPhoneTokenObtainPairSerializer
    auth_action = "signin"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class RefreshView(_EnvelopedTokenView, TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"
    auth_action = "token_refresh"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class VerifyView(_EnvelopedTokenView, TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"
    auth_action = "token_verify"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)
