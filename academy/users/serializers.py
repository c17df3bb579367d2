"""
Academy User Serializers

This module provides serializers for authentication, user management and
password operations.

Serializers:
- EmailTokenObtainPairSerializer: Email/password login issuing a JWT pair
- UserSerializer: User data with role, department and permissions
- RegistrationSerializer: Public self-registration of students
- ProfileUpdateSerializer: A user's own name and email
- ChangePasswordSerializer: Password change with the current password
- SetInitialPasswordSerializer: First password for admin-created accounts

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Any, Dict

from django.contrib.auth.models import User, update_last_login
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from ..exceptions import InvalidCredentials
from ..organization.models import Department, StudyGroup
from .models import Profile, Role, full_name
from .roles import permissions_for


def _check_password_strength(value: str, user: User = None) -> str:
    try:
        validate_password(value, user=user)
    except DjangoValidationError as e:
        raise serializers.ValidationError(list(e.messages))
    return value


def _email_taken(email: str, exclude_id=None) -> bool:
    return User.objects.filter(email__iexact=email).exclude(id=exclude_id).exists()


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT login with email and password.

    Token Payload Includes:
    - role: Platform role of the user
    - force_password_change: Password security requirement
    """

    username_field = "email"

    @classmethod
    def get_token(cls, user: User) -> RefreshToken:
        token = super().get_token(user)
        profile, _created = Profile.objects.get_or_create(user=user)
        token["role"] = profile.role
        token["force_password_change"] = profile.force_password_change
        return token

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Authenticate by email and issue a token pair.

        Raises:
            InvalidCredentials: Unknown email, wrong password or inactive account
        """
        user = User.objects.filter(email__iexact=attrs["email"].strip()).first()
        if user is None or not user.check_password(attrs["password"]):
            raise InvalidCredentials()
        if not user.is_active:
            raise InvalidCredentials(_("Account is deactivated"))

        self.user = user
        refresh = self.get_token(user)
        if api_settings.UPDATE_LAST_LOGIN:
            update_last_login(None, user)
        return {"refresh": str(refresh), "access": str(refresh.access_token)}


class UserSerializer(serializers.ModelSerializer):
    """
    User data serializer including role and department from the profile.

    Used both for reading and for administrative create/update. ``password``
    is only accepted on write and is optional on update.
    """

    role = serializers.ChoiceField(
        choices=Role.choices, source="profile.role", required=False
    )
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.filter(is_active=True),
        source="profile.department",
        required=False,
        allow_null=True,
    )
    force_password_change = serializers.BooleanField(
        source="profile.force_password_change", read_only=True
    )
    full_name = serializers.SerializerMethodField()
    permissions = serializers.SerializerMethodField()
    password = serializers.CharField(
        write_only=True, required=False, min_length=8, style={"input_type": "password"}
    )

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "department",
            "permissions",
            "is_active",
            "date_joined",
            "last_login",
            "force_password_change",
            "password",
        )
        read_only_fields = ("id", "username", "date_joined", "last_login")
        extra_kwargs = {"email": {"required": True}}

    def get_full_name(self, obj: User) -> str:
        return full_name(obj)

    def get_permissions(self, obj: User) -> list:
        return sorted(permissions_for(obj))

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if _email_taken(value, self.instance.id if self.instance else None):
            raise serializers.ValidationError(
                _("A user with this email address already exists.")
            )
        return value

    def validate_password(self, value: str) -> str:
        return _check_password_strength(value, self.instance)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": [_("This field is required.")]})
        return attrs

    @transaction.atomic
    def create(self, validated_data: Dict[str, Any]) -> User:
        """
        Create a user; admin-created accounts must set their own password on
        first login.
        """
        profile_data = validated_data.pop("profile", {})
        password = validated_data.pop("password")
        email = validated_data["email"]
        user = User.objects.create_user(username=email[:150], password=password, **validated_data)

        profile = user.profile
        profile.role = profile_data.get("role", Role.STUDENT)
        profile.department = profile_data.get("department")
        profile.force_password_change = True
        profile.save()
        return user

    @transaction.atomic
    def update(self, instance: User, validated_data: Dict[str, Any]) -> User:
        profile_data = validated_data.pop("profile", {})
        password = validated_data.pop("password", None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()

        if profile_data:
            profile = instance.profile
            for attr, value in profile_data.items():
                setattr(profile, attr, value)
            profile.save()
        return instance


class RegistrationSerializer(serializers.Serializer):
    """
    Public self-registration.

    Registered users are students who may use their password right away.
    Optional ``groups`` must be active groups of the chosen department.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True, min_length=8)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.filter(is_active=True),
        required=False,
        allow_null=True,
    )
    groups = serializers.PrimaryKeyRelatedField(
        queryset=StudyGroup.objects.filter(is_active=True),
        many=True,
        required=False,
    )

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if _email_taken(value):
            raise serializers.ValidationError(_("A user with this email already exists."))
        return value

    def validate_password(self, value: str) -> str:
        return _check_password_strength(value)

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": _("Passwords do not match")}
            )
        groups = data.get("groups") or []
        department = data.get("department")
        if groups and department is None:
            raise serializers.ValidationError(
                {"groups": _("A department is required when joining groups")}
            )
        if any(group.department_id != department.id for group in groups):
            raise serializers.ValidationError(
                {"groups": _("Groups must belong to the selected department")}
            )
        return data

    @transaction.atomic
    def create(self, validated_data: Dict[str, Any]) -> User:
        groups = validated_data.pop("groups", [])
        department = validated_data.pop("department", None)
        validated_data.pop("password_confirm")
        password = validated_data.pop("password")

        user = User.objects.create_user(
            username=validated_data["email"][:150], password=password, **validated_data
        )
        profile = user.profile
        profile.role = Role.STUDENT
        profile.department = department
        profile.force_password_change = False
        profile.save()
        for group in groups:
            group.students.add(user)
        return user


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("first_name", "last_name", "email")

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if _email_taken(value, self.instance.id):
            raise serializers.ValidationError(_("Email already in use"))
        return value


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)
    new_password_confirm = serializers.CharField(write_only=True)

    def validate_current_password(self, value: str) -> str:
        if not self.context["request"].user.check_password(value):
            raise serializers.ValidationError(_("Current password is incorrect"))
        return value

    def validate_new_password(self, value: str) -> str:
        return _check_password_strength(value, self.context["request"].user)

    def validate(self, data: Dict[str, str]) -> Dict[str, str]:
        if data["new_password"] != data["new_password_confirm"]:
            raise serializers.ValidationError(
                {"new_password_confirm": _("The passwords do not match.")}
            )
        if data["new_password"] == data["current_password"]:
            raise serializers.ValidationError(
                {"new_password": _("New password must differ from the current password")}
            )
        return data

    def save(self, **kwargs) -> User:
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save()
        user.profile.mark_password_changed()
        return user


class SetInitialPasswordSerializer(serializers.Serializer):
    """
    Secure password setting serializer with comprehensive validation.

    Features:
    - Password confirmation validation
    - Django password strength validation
    - Automatic profile update to remove force password change requirement
    """

    password = serializers.CharField(
        write_only=True,
        required=True,
        min_length=8,
        style={"input_type": "password"},
        help_text=_("Password must be at least 8 characters long"),
    )

    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={"input_type": "password"},
        help_text=_("Enter the same password for confirmation"),
    )

    def validate_password(self, value: str) -> str:
        return _check_password_strength(value)

    def validate(self, data: Dict[str, str]) -> Dict[str, str]:
        if data.get("password") != data.get("password_confirm"):
            raise serializers.ValidationError(
                {"password_confirm": _("The passwords do not match.")}
            )
        return data

    def save(self, user: User) -> User:
        """
        Set new password and update user profile.

        Side Effects:
            - Sets new password for user
            - Removes force password change requirement from profile
        """
        user.set_password(self.validated_data["password"])
        user.save()
        user.profile.mark_password_changed()
        return user
