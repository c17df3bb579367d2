"""
Authentication Tests

Login with email and password, cookie based token refresh, logout,
self-registration and the profile and password endpoints.
"""

from django.contrib.auth.models import User
from rest_framework import status
from rest_framework.test import APITestCase

from academy.tests.helpers import PASSWORD, create_department, create_user
from academy.users.models import Role


class LoginTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("jane@academy.test", role=Role.TEACHER)
        create_user("gone@academy.test", is_active=False)

    def login(self, email="jane@academy.test", password=PASSWORD):
        return self.client.post(
            "/api/auth/login/", {"email": email, "password": password}, format="json"
        )

    def test_login_sets_token_cookies(self):
        response = self.login()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.cookies["access_token"].value)
        self.assertTrue(response.cookies["refresh_token"].value)
        self.assertNotIn("access", response.json()["data"])

    def test_login_returns_user_with_role_and_permissions(self):
        body = self.login().json()
        self.assertTrue(body["success"])
        user = body["data"]["user"]
        self.assertEqual(user["email"], "jane@academy.test")
        self.assertEqual(user["role"], Role.TEACHER)
        self.assertIn("manage_modules", user["permissions"])
        self.assertNotIn("manage_users", user["permissions"])

    def test_login_email_is_case_insensitive(self):
        response = self.login(email="JANE@academy.test")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_wrong_password(self):
        response = self.login(password="not-the-password")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json(), {"success": False, "error": "Invalid credentials"})

    def test_unknown_email(self):
        response = self.login(email="nobody@academy.test")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deactivated_account(self):
        response = self.login(email="gone@academy.test")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["error"], "Account is deactivated")

    def test_login_updates_last_login(self):
        self.login()
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_profile_with_access_cookie(self):
        self.login()
        response = self.client.get("/api/auth/profile/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["id"], self.user.id)

    def test_profile_requires_authentication(self):
        response = self.client.get("/api/auth/profile/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.json()["success"])


class TokenTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("max@academy.test")

    def setUp(self):
        response = self.client.post(
            "/api/auth/login/",
            {"email": "max@academy.test", "password": PASSWORD},
            format="json",
        )
        self.refresh_token = response.cookies["refresh_token"].value

    def test_refresh_token_success(self):
        response = self.client.post("/api/auth/refresh/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.cookies["access_token"].value)

    def test_refresh_token_from_body(self):
        del self.client.cookies["refresh_token"]
        response = self.client.post(
            "/api/auth/refresh/", {"refresh": self.refresh_token}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_refresh_token_failure(self):
        self.client.cookies["refresh_token"] = "bad token"
        response = self.client.post("/api/auth/refresh/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token_missing(self):
        del self.client.cookies["refresh_token"]
        response = self.client.post("/api/auth/refresh/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "Refresh token not provided")

    def test_logout_clears_cookies_and_blacklists_token(self):
        response = self.client.post("/api/auth/logout/")
        self.assertEqual(response.status_code, status.HTTP_205_RESET_CONTENT)
        self.assertEqual(response.cookies["access_token"].value, "")
        self.assertEqual(response.cookies["refresh_token"].value, "")

        response = self.client.post(
            "/api/auth/refresh/", {"refresh": self.refresh_token}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RegistrationTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.department = create_department()
        create_user("taken@academy.test")

    def payload(self, **overrides):
        data = {
            "email": "New.Student@academy.test",
            "password": PASSWORD,
            "password_confirm": PASSWORD,
            "first_name": "New",
            "last_name": "Student",
            "department": self.department.id,
        }
        data.update(overrides)
        return data

    def test_register_creates_student(self):
        response = self.client.post("/api/auth/register/", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["message"], "Registration successful.")
        self.assertTrue(response.cookies["access_token"].value)

        user = User.objects.get(email="new.student@academy.test")
        self.assertEqual(user.profile.role, Role.STUDENT)
        self.assertEqual(user.profile.department, self.department)
        self.assertFalse(user.profile.force_password_change)

    def test_register_duplicate_email(self):
        response = self.client.post(
            "/api/auth/register/", self.payload(email="TAKEN@academy.test"), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["error"], "Validation failed")
        self.assertIn("email", body["details"])

    def test_register_password_mismatch(self):
        response = self.client.post(
            "/api/auth/register/",
            self.payload(password_confirm="Other-Passw0rd!"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_confirm", response.json()["details"])

    def test_register_weak_password(self):
        response = self.client.post(
            "/api/auth/register/",
            self.payload(password="12345678", password_confirm="12345678"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.json()["details"])


class PasswordTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("pat@academy.test", role=Role.TEACHER)
        cls.fresh = create_user("fresh@academy.test")
        cls.fresh.profile.force_password_change = True
        cls.fresh.profile.save()

    def test_update_profile(self):
        self.client.force_authenticate(self.user)
        response = self.client.patch(
            "/api/auth/profile/", {"first_name": "Pat"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["full_name"], "Pat")

    def test_change_password(self):
        self.client.force_authenticate(self.user)
        response = self.client.post(
            "/api/auth/change-password/",
            {
                "current_password": PASSWORD,
                "new_password": "An0ther-Passw0rd!",
                "new_password_confirm": "An0ther-Passw0rd!",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("An0ther-Passw0rd!"))

    def test_change_password_wrong_current(self):
        self.client.force_authenticate(self.user)
        response = self.client.post(
            "/api/auth/change-password/",
            {
                "current_password": "wrong-password",
                "new_password": "An0ther-Passw0rd!",
                "new_password_confirm": "An0ther-Passw0rd!",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("current_password", response.json()["details"])

    def test_set_initial_password(self):
        self.client.force_authenticate(self.fresh)
        response = self.client.post(
            "/api/auth/set-initial-password/",
            {"password": "Init1al-Passw0rd!", "password_confirm": "Init1al-Passw0rd!"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.fresh.refresh_from_db()
        self.assertFalse(self.fresh.profile.force_password_change)

    def test_set_initial_password_only_once(self):
        self.client.force_authenticate(self.user)
        response = self.client.post(
            "/api/auth/set-initial-password/",
            {"password": "Init1al-Passw0rd!", "password_confirm": "Init1al-Passw0rd!"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "Password has already been set.")
