"""
User Management Tests

Administrative user CRUD, filters, soft delete and statistics.
"""

from django.contrib.auth.models import User
from rest_framework import status
from rest_framework.test import APITestCase

from academy.tests.helpers import PASSWORD, create_department, create_user
from academy.users.models import Role


class UserCrudTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.department = create_department()
        cls.admin = create_user("admin@academy.test", role=Role.ADMIN)
        cls.teacher = create_user("teacher@academy.test", role=Role.TEACHER, department=cls.department)
        cls.student = create_user("student@academy.test", department=cls.department)

    def setUp(self):
        self.client.force_authenticate(self.admin)

    def test_list_is_paginated(self):
        response = self.client.get("/api/users/", {"limit": 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(body["pagination"], {"current": 1, "pages": 2, "total": 3, "limit": 2})

    def test_list_filters_by_role(self):
        response = self.client.get("/api/users/", {"role": Role.TEACHER})
        emails = [user["email"] for user in response.json()["data"]]
        self.assertEqual(emails, ["teacher@academy.test"])

    def test_list_search(self):
        response = self.client.get("/api/users/", {"search": "stud"})
        self.assertEqual(response.json()["pagination"]["total"], 1)

    def test_limit_is_capped(self):
        response = self.client.get("/api/users/", {"limit": 500})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.json()["pagination"], {"current": 1, "pages": 1, "total": 3, "limit": 100}
        )

    def test_invalid_page(self):
        response = self.client.get("/api/users/", {"page": "0"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_admin_is_forbidden(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json(), {"success": False, "error": "Insufficient permissions"})

    def test_create_user_requires_password_change(self):
        response = self.client.post(
            "/api/users/",
            {
                "email": "New.Teacher@academy.test",
                "password": PASSWORD,
                "role": Role.TEACHER,
                "department": self.department.id,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()["data"]
        self.assertEqual(data["email"], "new.teacher@academy.test")
        self.assertEqual(data["role"], Role.TEACHER)
        self.assertEqual(data["department"], self.department.id)
        self.assertTrue(data["force_password_change"])

    def test_create_user_duplicate_email(self):
        response = self.client.post(
            "/api/users/",
            {"email": "STUDENT@academy.test", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.json()["details"])

    def test_create_user_without_password(self):
        response = self.client.post(
            "/api/users/", {"email": "nopass@academy.test"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.json()["details"])

    def test_update_role(self):
        response = self.client.patch(
            f"/api/users/{self.student.id}/", {"role": Role.TEACHER}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.student.refresh_from_db()
        self.assertEqual(self.student.profile.role, Role.TEACHER)

    def test_delete_deactivates(self):
        response = self.client.delete(f"/api/users/{self.student.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.get(pk=self.student.id).is_active)

    def test_force_password_change(self):
        response = self.client.post(f"/api/users/{self.teacher.id}/force-password-change/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.teacher.profile.refresh_from_db()
        self.assertTrue(self.teacher.profile.force_password_change)

    def test_statistics(self):
        response = self.client.get("/api/users/statistics/")
        data = response.json()["data"]
        self.assertEqual(data["total_users"], 3)
        self.assertEqual(data["users_by_role"][Role.STUDENT], 1)
        self.assertEqual(data["users_by_role"][Role.HOD], 0)
