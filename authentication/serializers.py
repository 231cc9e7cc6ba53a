from rest_framework import serializers
from .models import CustomUser, UserSession

# ------------------------------------------------------
# BASE USER SERIALIZER
# ------------------------------------------------------
class UserBaseSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = [
            'uuid',
            'name',
            'email',
            'email_verified',
            'image',
            'created_at',
        ]
        read_only_fields = fields


class SessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserSession
        fields = ['token', 'expires_at']
        read_only_fields = fields


# ------------------------------------------------------
# TOKEN SERIALIZERS
# ------------------------------------------------------
class TokenSerializer(serializers.Serializer):
    access_token = serializers.CharField(help_text="JWT access token for API requests")
    refresh_token = serializers.CharField(help_text="JWT refresh token for obtaining new access tokens")
    token_type = serializers.CharField()
    expires_in = serializers.IntegerField()
    refresh_expires_in = serializers.IntegerField(help_text="Refresh token expiration time in seconds")


class AuthDataSerializer(serializers.Serializer):
    user = UserBaseSerializer(help_text="User profile information")
    session = SessionSerializer(help_text="Session token for the Session authorization scheme")
    tokens = TokenSerializer(help_text="JWT tokens for authentication")


# ------------------------------------------------------
# AUTH SERIALIZERS
# ------------------------------------------------------
class UserRegistrationSerializer(serializers.Serializer):
    email = serializers.EmailField(help_text="User email address")
    password = serializers.CharField(write_only=True, min_length=8, help_text="User password (minimum 8 characters)")
    name = serializers.CharField(required=False, allow_blank=True, max_length=150, help_text="User display name")


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class VerificationConfirmSerializer(serializers.Serializer):
    identifier = serializers.EmailField(help_text="Email address being verified")
    value = serializers.CharField(max_length=255, help_text="Verification value issued for the email")
