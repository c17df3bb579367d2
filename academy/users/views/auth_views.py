"""
Academy Authentication Views

This module provides the authentication endpoints of the academy platform.

Views:
- CustomTokenObtainPairView: Email/password login, tokens set as cookies
- CustomTokenRefreshView: Token rotation from the refresh cookie
- LogoutView: Token invalidation and cookie removal
- RegistrationView: Public student self-registration
- ProfileView: Read and update the current user's account
- ChangePasswordView: Password change with the current password
- SetInitialPasswordView: Initial password for admin-created accounts

Features:
- JWT tokens stored in HTTP-only cookies, never in the response body
- Secure token blacklisting for logout
- Cookie flags controlled by AUTH_COOKIE_SECURE / AUTH_COOKIE_SAMESITE

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from backend.custom_auth import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME

from ...exceptions import BusinessRuleViolation
from ...responses import success_response
from ..serializers import (
    ChangePasswordSerializer,
    EmailTokenObtainPairSerializer,
    ProfileUpdateSerializer,
    RegistrationSerializer,
    SetInitialPasswordSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def set_auth_cookies(
    response: Response, access: Optional[str], refresh: Optional[str]
) -> Response:
    """
    Store JWT tokens in HTTP-only cookies on ``response``.

    * httponly=True: prevents JavaScript access (mitigates XSS attacks)
    * secure / samesite: from AUTH_COOKIE_SECURE and AUTH_COOKIE_SAMESITE
    """
    lifetimes = {
        ACCESS_COOKIE_NAME: settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"],
        REFRESH_COOKIE_NAME: settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"],
    }
    for name, value in ((ACCESS_COOKIE_NAME, access), (REFRESH_COOKIE_NAME, refresh)):
        if value:
            response.set_cookie(
                name,
                value,
                httponly=True,
                secure=settings.AUTH_COOKIE_SECURE,
                samesite=settings.AUTH_COOKIE_SAMESITE,
                path="/",
                max_age=int(lifetimes[name].total_seconds()),
            )
    return response


def issue_tokens(response: Response, user) -> Response:
    refresh = EmailTokenObtainPairSerializer.get_token(user)
    return set_auth_cookies(response, str(refresh.access_token), str(refresh))


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    Email/password login.

    - Validates credentials with EmailTokenObtainPairSerializer.
    - Removes tokens from the payload and sets `access_token` and
      `refresh_token` cookies instead.
    - Returns the user with role and permissions.
    """

    serializer_class = EmailTokenObtainPairSerializer

    def post(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        tokens = serializer.validated_data
        user = serializer.user
        logger.info("User %s logged in", user.pk)

        response = success_response(
            data={"user": UserSerializer(user).data},
            message=_("Login successful"),
        )
        return set_auth_cookies(response, tokens.get("access"), tokens.get("refresh"))


class CustomTokenRefreshView(TokenRefreshView):
    """
    Refresh JWT tokens from the refresh cookie (or a ``refresh`` body field)
    and store the rotated pair in cookies.
    """

    def post(self, request: Request, *args, **kwargs) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME) or request.data.get(
            "refresh"
        )
        if not refresh_token:
            raise BusinessRuleViolation(_("Refresh token not provided"))

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        data = serializer.validated_data
        response = success_response(message=_("Token refreshed"))
        return set_auth_cookies(response, data.get("access"), data.get("refresh"))


class LogoutView(APIView):
    """
    Logout by blacklisting the refresh token and deleting both cookies.

    Always answers 205 Reset Content; an already invalid refresh token does
    not prevent the cookies from being cleared.
    """

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(REFRESH_COOKIE_NAME) or request.data.get(
            "refresh"
        )
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.info("Logout with unusable refresh token: %s", e)

        response = success_response(
            message=_("Successfully logged out."), status=status.HTTP_205_RESET_CONTENT
        )
        response.delete_cookie(REFRESH_COOKIE_NAME)
        response.delete_cookie(ACCESS_COOKIE_NAME)
        return response


class RegistrationView(generics.CreateAPIView):
    """
    Public self-registration of students.

    Request Body Example (JSON):
    {
        "email": "jane@example.com",
        "first_name": "Jane",
        "last_name": "Doe",
        "password": "secret1234",
        "password_confirm": "secret1234",
        "department": 1,
        "groups": [3]
    }

    The new user is logged in right away.
    """

    serializer_class = RegistrationSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered student %s", user.pk)

        response = success_response(
            data={"user": UserSerializer(user).data},
            message=_("Registration successful."),
            status=status.HTTP_201_CREATED,
        )
        return issue_tokens(response, user)


class ProfileView(APIView):
    def get(self, request: Request) -> Response:
        return success_response(data=UserSerializer(request.user).data)

    def put(self, request: Request) -> Response:
        serializer = ProfileUpdateSerializer(
            request.user, data=request.data, partial=True
        )
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response(
            data=UserSerializer(user).data, message=_("Profile updated successfully")
        )

    patch = put


class ChangePasswordView(APIView):
    def post(self, request: Request) -> Response:
        serializer = ChangePasswordSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(message=_("Password changed successfully"))


class SetInitialPasswordView(APIView):
    """
    Initial password setting for users created by an administrator.

    Security Requirements:
        - User must be authenticated
        - User profile must have force_password_change=True
        - Password must meet Django's validation requirements
    """

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        user = request.user
        if not user.profile.force_password_change:
            raise BusinessRuleViolation(_("Password has already been set."))

        serializer = SetInitialPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(user)
        logger.info("User %s set initial password", user.pk)
        return success_response(message=_("Password successfully set."))
