from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .auth.services import AuthenticationService, EmailVerificationService
from .core.exceptions import InvalidInputException
from .models import Account, UserSession, Verification

User = get_user_model()


class SignUpTests(APITestCase):
    def test_sign_up_creates_user_account_and_session(self):
        resp = self.client.post('/api/auth/sign-up/', {
            'email': 'Maria@Example.com', 'password': 'Str0ng-Passw0rd!', 'name': 'Maria'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.data['data']
        self.assertEqual(data['user']['name'], 'Maria')
        self.assertFalse(data['user']['email_verified'])
        self.assertTrue(data['session']['token'])
        self.assertEqual(data['tokens']['token_type'], 'Bearer')

        user = User.objects.get(email__iexact='maria@example.com')
        self.assertTrue(Account.objects.filter(user=user, provider_id=Account.CREDENTIAL_PROVIDER).exists())
        self.assertEqual(UserSession.objects.filter(user=user).count(), 1)

    def test_duplicate_email_is_rejected(self):
        User.objects.create_user(email='maria@example.com', password='Str0ng-Passw0rd!')
        resp = self.client.post('/api/auth/sign-up/', {
            'email': 'maria@example.com', 'password': 'An0ther-Passw0rd!'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', resp.data['error'])

    def test_weak_password_is_rejected(self):
        resp = self.client.post('/api/auth/sign-up/', {
            'email': 'maria@example.com', 'password': 'password'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', resp.data['error'])
        self.assertFalse(User.objects.exists())

    def test_email_taken_during_sign_up_is_a_field_error(self):
        # Another sign-up inserts the same email after the duplicate check
        with patch.object(User.objects, 'create_user', side_effect=IntegrityError('UNIQUE constraint failed')):
            with self.assertRaises(InvalidInputException) as ctx:
                AuthenticationService.register('maria@example.com', 'Str0ng-Passw0rd!')

        self.assertIn('email', ctx.exception.detail)
        self.assertFalse(Account.objects.exists())
        self.assertFalse(UserSession.objects.exists())


class SignInTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='joao@example.com', password='Str0ng-Passw0rd!', name='João')

    def test_sign_in_returns_session_and_tokens(self):
        resp = self.client.post('/api/auth/sign-in/', {
            'email': 'joao@example.com', 'password': 'Str0ng-Passw0rd!'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['user']['email'], 'joao@example.com')
        self.assertTrue(UserSession.objects.filter(token=resp.data['data']['session']['token']).exists())

    def test_sign_in_ignores_email_case(self):
        resp = self.client.post('/api/auth/sign-in/', {
            'email': 'JOAO@example.com', 'password': 'Str0ng-Passw0rd!'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['user']['uuid'], str(self.user.uuid))

    def test_wrong_password(self):
        resp = self.client.post('/api/auth/sign-in/', {
            'email': 'joao@example.com', 'password': 'wrong-password'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.data['error_code'], 'unauthorized')
        self.assertFalse(UserSession.objects.exists())

    def test_bearer_token_reaches_current_user(self):
        resp = self.client.post('/api/auth/sign-in/', {
            'email': 'joao@example.com', 'password': 'Str0ng-Passw0rd!'
        }, format='json')
        access = resp.data['data']['tokens']['access_token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        resp = self.client.get('/api/auth/me/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['data']['uuid'], str(self.user.uuid))

    def test_sign_out_ends_presented_session(self):
        kept = UserSession.objects.create(user=self.user)
        ended = UserSession.objects.create(user=self.user)

        self.client.credentials(HTTP_AUTHORIZATION=f'Session {ended.token}')
        resp = self.client.post('/api/auth/sign-out/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertFalse(UserSession.objects.filter(pk=ended.pk).exists())
        self.assertTrue(UserSession.objects.filter(pk=kept.pk).exists())

        resp = self.client.get('/api/auth/me/')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        resp = self.client.get('/api/auth/me/')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)


class EmailVerificationTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email='ana@example.com', password='Str0ng-Passw0rd!')
        self.client.force_authenticate(user=self.user)

    def test_request_and_confirm(self):
        resp = self.client.post('/api/auth/verification/request/')
        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED)

        verification = Verification.objects.get(identifier='ana@example.com')
        resp = self.client.post('/api/auth/verification/confirm/', {
            'identifier': 'ana@example.com', 'value': verification.value
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertTrue(self.user.email_verified)
        self.assertFalse(Verification.objects.exists())

    def test_reissue_replaces_previous_value(self):
        first = EmailVerificationService.issue(self.user)
        second = EmailVerificationService.issue(self.user)

        self.assertFalse(Verification.objects.filter(pk=first.pk).exists())
        self.assertTrue(Verification.objects.filter(pk=second.pk).exists())

    def test_wrong_value_is_rejected(self):
        EmailVerificationService.issue(self.user)
        resp = self.client.post('/api/auth/verification/confirm/', {
            'identifier': 'ana@example.com', 'value': 'guess'
        }, format='json')

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertFalse(self.user.email_verified)

    def test_expired_value_is_rejected(self):
        verification = EmailVerificationService.issue(self.user)
        Verification.objects.filter(pk=verification.pk).update(expires_at=timezone.now() - timedelta(seconds=1))

        resp = self.client.post('/api/auth/verification/confirm/', {
            'identifier': 'ana@example.com', 'value': verification.value
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_already_verified(self):
        self.user.email_verified = True
        self.user.save()

        resp = self.client.post('/api/auth/verification/request/')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(Verification.objects.exists())
