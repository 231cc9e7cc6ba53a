import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import authentication, exceptions

from authentication.models import UserSession

logger = logging.getLogger(__name__)


class SessionTokenAuthentication(authentication.BaseAuthentication):
    """
    Authenticate requests carrying ``Authorization: Session <token>``.

    The token must match a stored, unexpired UserSession whose user is active.
    """
    keyword = 'Session'

    def authenticate(self, request):
        auth = authentication.get_authorization_header(request).split()

        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise exceptions.AuthenticationFailed(_('Invalid session header.'))

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed(_('Invalid session token.'))

        return self.authenticate_credentials(token)

    def authenticate_credentials(self, token):
        session = (
            UserSession.objects.select_related('user')
            .filter(token=token)
            .first()
        )
        if session is None:
            raise exceptions.AuthenticationFailed(_('Invalid session token.'))

        if session.is_expired:
            logger.info("Rejected expired session %s for user %s", session.pk, session.user_id)
            raise exceptions.AuthenticationFailed(_('Session has expired.'))

        if not session.user.is_active:
            raise exceptions.AuthenticationFailed(_('User inactive or deleted.'))

        return session.user, session

    def authenticate_header(self, request):
        return self.keyword
