import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from authentication.core.exceptions import InvalidInputException, UnauthorizedException
from authentication.core.ip_utils import get_client_ip
from authentication.core.jwt_utils import TokenManager
from authentication.models import Account, CustomUser, UserSession, Verification

logger = logging.getLogger(__name__)


class AuthenticationService:
    """Sign-up, sign-in and sign-out against the session/account tables."""

    @staticmethod
    def _open_session(user, request_meta=None):
        request_meta = request_meta or {}
        return UserSession.objects.create(
            user=user,
            ip_address=get_client_ip(request_meta),
            user_agent=request_meta.get('HTTP_USER_AGENT'),
        )

    @staticmethod
    def register(email, password, name='', request_meta=None):
        """Create a user with a credential account and an open session."""
        email = CustomUser.objects.normalize_email(email or '').strip()

        if CustomUser.objects.filter(email__iexact=email).exists():
            raise InvalidInputException({'email': ['A user with this email already exists.']})

        try:
            validate_password(password)
        except DjangoValidationError as e:
            raise InvalidInputException({'password': list(e.messages)})

        try:
            with transaction.atomic():
                user = CustomUser.objects.create_user(email=email, password=password, name=name or '')
                Account.objects.create(
                    user=user,
                    account_id=str(user.uuid),
                    provider_id=Account.CREDENTIAL_PROVIDER,
                )
                session = AuthenticationService._open_session(user, request_meta)
        except IntegrityError:
            # A concurrent sign-up took the email between the check and the insert
            logger.warning(f"Duplicate registration for email: {email}")
            raise InvalidInputException({'email': ['A user with this email already exists.']})

        logger.info(f"Registration successful for user: {user.email}")
        return user, session, TokenManager.generate_tokens(user)

    @staticmethod
    def login(email, password, request_meta=None):
        if request_meta:
            logger.info(f"Login attempt from IP: {get_client_ip(request_meta)}")

        # Emails are unique case-insensitively; authenticate against the stored spelling
        stored_email = CustomUser.objects.filter(email__iexact=email).values_list('email', flat=True).first()
        user = authenticate(username=stored_email or email, password=password)
        if user is None:
            logger.warning(f"Failed login attempt for email: {email}")
            raise UnauthorizedException('Invalid email or password')

        session = AuthenticationService._open_session(user, request_meta)
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])

        logger.info(f"Login successful for user: {user.email}")
        return user, session, TokenManager.generate_tokens(user)

    @staticmethod
    def logout(user, session=None):
        """Delete the presented session, or every session of the user when none is given."""
        sessions = UserSession.objects.filter(user=user)
        if session is not None:
            sessions = sessions.filter(pk=session.pk)
        deleted, _ = sessions.delete()
        logger.info(f"Signed out user {user.email} ({deleted} session(s) removed)")
        return deleted


class EmailVerificationService:

    @staticmethod
    def issue(user):
        """Store a fresh verification value for the user's email, replacing older ones."""
        Verification.objects.filter(identifier=user.email).delete()
        verification = Verification.objects.create(
            identifier=user.email,
            value=secrets.token_urlsafe(24),
            expires_at=timezone.now() + timedelta(seconds=settings.EMAIL_VERIFICATION_TIMEOUT),
        )
        # Delivery belongs to the auth provider; only the issuance is recorded here.
        logger.info(f"Issued email verification for {user.email}, expires {verification.expires_at.isoformat()}")
        return verification

    @staticmethod
    def confirm(identifier, value):
        verification = Verification.objects.filter(identifier=identifier, value=value).first()
        if verification is None or verification.is_expired:
            logger.warning(f"Invalid or expired verification attempt for {identifier}")
            raise InvalidInputException({'value': ['Invalid or expired verification value.']})

        with transaction.atomic():
            updated = CustomUser.objects.filter(email=identifier).update(email_verified=True)
            verification.delete()

        if not updated:
            raise InvalidInputException({'identifier': ['No user is registered with this email.']})

        logger.info(f"Email verified for {identifier}")
        return True
