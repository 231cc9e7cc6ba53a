import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.throttling import AnonRateThrottle
from drf_spectacular.utils import extend_schema, OpenApiResponse

from authentication.core.base_view import BaseAPIView
from authentication.core.response import standardized_response
from authentication.models import UserSession
from authentication.serializers import (
    AuthDataSerializer,
    SessionSerializer,
    UserBaseSerializer,
    UserLoginSerializer,
    UserRegistrationSerializer,
    VerificationConfirmSerializer,
)
from .services import AuthenticationService, EmailVerificationService

logger = logging.getLogger(__name__)


def _auth_payload(user, session, tokens):
    return {
        'user': UserBaseSerializer(user).data,
        'session': SessionSerializer(session).data,
        'tokens': tokens,
    }


@extend_schema(
    tags=["Auth"],
    request=UserRegistrationSerializer,
    responses={201: AuthDataSerializer, 400: OpenApiResponse(description="Invalid input")},
)
class SignUpView(BaseAPIView):
    permission_classes = [AllowAny]
    throttle_classes = [AnonRateThrottle]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, session, tokens = AuthenticationService.register(
            request_meta=request.META,
            **serializer.validated_data
        )
        return Response(
            standardized_response(data=_auth_payload(user, session, tokens), message="Account created"),
            status=status.HTTP_201_CREATED
        )


@extend_schema(
    tags=["Auth"],
    request=UserLoginSerializer,
    responses={200: AuthDataSerializer, 401: OpenApiResponse(description="Invalid email or password")},
)
class SignInView(BaseAPIView):
    permission_classes = [AllowAny]
    throttle_classes = [AnonRateThrottle]

    def post(self, request):
        serializer = UserLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user, session, tokens = AuthenticationService.login(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
            request_meta=request.META,
        )
        return Response(standardized_response(data=_auth_payload(user, session, tokens)))


@extend_schema(
    tags=["Auth"],
    request=None,
    responses={200: OpenApiResponse(description="Signed out")},
    description="Ends the presented session. With a JWT, every session of the user is ended.",
)
class SignOutView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        session = request.auth if isinstance(request.auth, UserSession) else None
        AuthenticationService.logout(request.user, session=session)
        return Response(standardized_response(message="Signed out"))


@extend_schema(tags=["Auth"], responses={200: UserBaseSerializer})
class CurrentUserView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(standardized_response(data=UserBaseSerializer(request.user).data))


@extend_schema(
    tags=["Auth"],
    request=None,
    responses={202: OpenApiResponse(description="Verification issued")},
)
class RequestEmailVerificationView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if request.user.email_verified:
            return Response(standardized_response(message="Email already verified"))

        verification = EmailVerificationService.issue(request.user)
        return Response(
            standardized_response(
                data={'identifier': verification.identifier, 'expires_at': verification.expires_at},
                message="Verification issued"
            ),
            status=status.HTTP_202_ACCEPTED
        )


@extend_schema(
    tags=["Auth"],
    request=VerificationConfirmSerializer,
    responses={200: OpenApiResponse(description="Email verified"), 400: OpenApiResponse(description="Invalid value")},
)
class ConfirmEmailVerificationView(BaseAPIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = VerificationConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        EmailVerificationService.confirm(**serializer.validated_data)
        return Response(standardized_response(message="Email verified"))
