"""
Module Tests

Module CRUD with role scoping, prerequisite validation, question and note
assignment and student progress.
"""

from rest_framework import status
from rest_framework.test import APITestCase

from academy.assessments.models import PerformanceMetric
from academy.modules.models import Module
from academy.tests.helpers import (
    create_assessment,
    create_department,
    create_group,
    create_mcq,
    create_module,
    create_user,
)
from academy.users.models import Role


class ModuleTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin@academy.test", role=Role.ADMIN)
        cls.hod = create_user("hod@academy.test", role=Role.HOD)
        cls.cs = create_department(hod=cls.hod)
        cls.math = create_department(name="Mathematics", code="MATH")
        cls.teacher = create_user("teacher@academy.test", role=Role.TEACHER, department=cls.cs)
        cls.other_teacher = create_user("t2@academy.test", role=Role.TEACHER, department=cls.cs)
        cls.student = create_user("student@academy.test", department=cls.cs)
        cls.group = create_group(cls.cs, teacher=cls.teacher, students=[cls.student])
        cls.other_group = create_group(cls.cs, name="CS-B", code="CSB", teacher=cls.other_teacher)
        cls.basics = create_module(cls.cs, groups=[cls.group], created_by=cls.teacher)
        cls.advanced = create_module(cls.cs, title="Advanced Python", created_by=cls.teacher)
        cls.algebra = create_module(cls.math, title="Algebra")

    def test_teacher_creates_module(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/modules/",
            {
                "title": "  Testing  ",
                "department": self.cs.id,
                "groups": [self.group.id],
                "tags": ["Python", " basics ", "python", ""],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()["data"]
        self.assertEqual(data["title"], "Testing")
        self.assertEqual(data["tags"], ["python", "basics"])
        self.assertEqual(data["created_by"]["id"], self.teacher.id)

    def test_teacher_cannot_assign_untaught_group(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/modules/",
            {"title": "Testing", "department": self.cs.id, "groups": [self.other_group.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"], "Can only assign modules to groups you teach")

    def test_teacher_cannot_create_in_other_department(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/modules/", {"title": "Calculus", "department": self.math.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_cannot_create(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            "/api/modules/", {"title": "Mine", "department": self.cs.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_lists_assigned_modules(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/modules/")
        titles = [m["title"] for m in response.json()["data"]]
        self.assertEqual(titles, ["Python Basics"])

    def test_admin_filters_by_department(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/modules/", {"department": self.math.id})
        self.assertEqual([m["title"] for m in response.json()["data"]], ["Algebra"])

    def test_invalid_difficulty_filter(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/modules/", {"difficulty": "expert"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_tag_filter(self):
        Module.objects.filter(pk=self.advanced.pk).update(tags=["python", "oop"])
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/modules/", {"tags": "OOP,rust"})
        self.assertEqual([m["title"] for m in response.json()["data"]], ["Advanced Python"])

    def test_other_teacher_cannot_update(self):
        self.client.force_authenticate(self.other_teacher)
        response = self.client.patch(
            f"/api/modules/{self.advanced.id}/", {"title": "Mine"}, format="json"
        )
        # outside the teacher's read scope
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_hod_updates_department_module(self):
        self.client.force_authenticate(self.hod)
        response = self.client.patch(
            f"/api/modules/{self.basics.id}/", {"difficulty": "advanced"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["message"], "Module updated successfully")

    def test_department_cannot_change(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f"/api/modules/{self.basics.id}/", {"department": self.math.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("department", response.json()["details"])

    def test_prerequisite_cycle_is_rejected(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/modules/{self.advanced.id}/",
            {"prerequisites": [self.basics.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(
            f"/api/modules/{self.basics.id}/",
            {"prerequisites": [self.advanced.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "Circular dependency detected in prerequisites")

    def test_module_cannot_require_itself(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/modules/{self.basics.id}/",
            {"prerequisites": [self.basics.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "Module cannot be a prerequisite of itself")

    def test_prerequisite_from_other_department(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f"/api/modules/{self.basics.id}/",
            {"prerequisites": [self.algebra.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_prerequisite_of_active_module(self):
        self.advanced.prerequisites.add(self.basics)
        self.client.force_authenticate(self.teacher)
        response = self.client.delete(f"/api/modules/{self.basics.id}/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_module_in_active_assessment(self):
        create_assessment(self.cs, [], modules=[self.basics])
        self.client.force_authenticate(self.teacher)
        response = self.client.delete(f"/api/modules/{self.basics.id}/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["error"], "Cannot delete module that is used in active assessments"
        )

    def test_delete_module(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.delete(f"/api/modules/{self.advanced.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Module.objects.get(pk=self.advanced.id).is_active)

    def test_add_questions(self):
        question = create_mcq(self.cs)
        self.client.force_authenticate(self.teacher)
        url = f"/api/modules/{self.basics.id}/questions/"
        response = self.client.post(url, {"questionIds": [question.id]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["message"], "1 questions added to module")

        response = self.client.post(url, {"questionIds": [question.id]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["error"], "All specified questions are already in the module"
        )

    def test_add_question_from_other_department(self):
        question = create_mcq(self.math)
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            f"/api/modules/{self.basics.id}/questions/",
            {"questionIds": [question.id]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_question(self):
        question = create_mcq(self.cs)
        self.basics.questions.add(question)
        self.client.force_authenticate(self.teacher)
        response = self.client.delete(f"/api/modules/{self.basics.id}/questions/{question.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(self.basics.questions.exists())

    def test_progress(self):
        question = create_mcq(self.cs)
        self.basics.questions.add(question)
        PerformanceMetric.objects.create(
            student=self.student,
            department=self.cs,
            group=self.group,
            module=self.basics,
            total_practice_submissions=2,
            accepted_submissions=1,
        )
        self.client.force_authenticate(self.teacher)
        response = self.client.get(f"/api/modules/{self.basics.id}/progress/")
        data = response.json()["data"]
        self.assertEqual(data["overview"]["totalStudents"], 1)
        self.assertEqual(data["overview"]["completedStudents"], 1)
        self.assertEqual(data["students"][0]["completionPercentage"], 100.0)

    def test_retrieve_includes_student_progress(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/modules/{self.basics.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        progress = response.json()["data"]["studentProgress"]
        self.assertEqual([p["student"]["id"] for p in progress], [self.student.id])
