from django.urls import path
from .auth.views import (
    SignUpView, SignInView, SignOutView, CurrentUserView,
    RequestEmailVerificationView, ConfirmEmailVerificationView,
)

urlpatterns = [
    path('sign-up/', SignUpView.as_view(), name='sign-up'),
    path('sign-in/', SignInView.as_view(), name='sign-in'),
    path('sign-out/', SignOutView.as_view(), name='sign-out'),
    path('me/', CurrentUserView.as_view(), name='current-user'),

    # Email verification
    path('verification/request/', RequestEmailVerificationView.as_view(), name='verification-request'),
    path('verification/confirm/', ConfirmEmailVerificationView.as_view(), name='verification-confirm'),
]
