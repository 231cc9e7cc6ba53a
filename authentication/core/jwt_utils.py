from datetime import timedelta
from django.conf import settings
from rest_framework_simplejwt.tokens import RefreshToken
import logging

logger = logging.getLogger(__name__)


class TokenManager:
    """JWT pair issuance keyed on the user's UUID."""

    @staticmethod
    def generate_tokens(user):
        try:
            refresh = RefreshToken.for_user(user)
            refresh['email'] = user.email
            refresh['email_verified'] = user.email_verified

            access_expiry = settings.SIMPLE_JWT.get('ACCESS_TOKEN_LIFETIME', timedelta(minutes=15))
            refresh_expiry = settings.SIMPLE_JWT.get('REFRESH_TOKEN_LIFETIME', timedelta(days=14))

            return {
                'access_token': str(refresh.access_token),
                'refresh_token': str(refresh),
                'token_type': 'Bearer',
                'expires_in': int(access_expiry.total_seconds()),
                'refresh_expires_in': int(refresh_expiry.total_seconds()),
            }
        except Exception as e:
            logger.error(f"Failed to generate tokens for user {user.email}: {str(e)}")
            raise
