"""
Question Bank and Note Tests
"""

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.test import APITestCase

from academy.assessments.models import PerformanceMetric
from academy.modules.models import Note
from academy.tests.helpers import (
    create_coding,
    create_department,
    create_group,
    create_mcq,
    create_module,
    create_user,
)
from academy.users.models import Role


class QuestionTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.cs = create_department()
        cls.math = create_department(name="Mathematics", code="MATH")
        cls.teacher = create_user("teacher@academy.test", role=Role.TEACHER, department=cls.cs)
        cls.student = create_user("student@academy.test", department=cls.cs)
        cls.group = create_group(cls.cs, teacher=cls.teacher, students=[cls.student])
        cls.mcq = create_mcq(cls.cs, correct=1)
        cls.coding = create_coding(cls.cs)
        cls.hidden = create_mcq(cls.cs, title="Unassigned")
        cls.module = create_module(cls.cs, groups=[cls.group], questions=[cls.mcq, cls.coding])

    def mcq_payload(self, **overrides):
        data = {
            "title": "Tuples",
            "text": "Are tuples mutable?",
            "type": "mcq",
            "department": self.cs.id,
            "options": ["yes", "no"],
            "correct_option": 1,
        }
        data.update(overrides)
        return data

    def test_teacher_creates_question(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post("/api/questions/", self.mcq_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["created_by"]["id"], self.teacher.id)

    def test_teacher_edits_own_question(self):
        own = create_mcq(self.cs, title="Mine", created_by=self.teacher)
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/questions/{own.id}/", {"title": "Renamed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["title"], "Renamed")

    def test_teacher_cannot_edit_colleagues_question(self):
        colleague = create_user("t2@academy.test", role=Role.TEACHER, department=self.cs)
        theirs = create_mcq(self.cs, title="Theirs", created_by=colleague)
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/questions/{theirs.id}/", {"title": "Renamed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f"/api/questions/{theirs.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        theirs.refresh_from_db()
        self.assertTrue(theirs.is_active)

    def test_mcq_needs_two_options(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/questions/", self.mcq_payload(options=["only"], correct_option=0), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("options", response.json()["details"])

    def test_correct_option_in_range(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/questions/", self.mcq_payload(correct_option=2), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("correct_option", response.json()["details"])

    def test_teacher_cannot_create_in_other_department(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/questions/", self.mcq_payload(department=self.math.id), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_sees_assigned_questions_without_answers(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/questions/")
        questions = response.json()["data"]
        self.assertEqual({q["id"] for q in questions}, {self.mcq.id, self.coding.id})
        self.assertTrue(all("correct_option" not in q for q in questions))

    def test_student_cannot_open_unassigned_question(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/questions/{self.hidden.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters_by_type(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get("/api/questions/", {"type": "coding"})
        self.assertEqual([q["id"] for q in response.json()["data"]], [self.coding.id])

    def test_mcq_attempt_updates_metrics(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            f"/api/questions/{self.mcq.id}/attempt/", {"selectedOption": 1}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertTrue(data["accepted"])
        self.assertEqual(data["modulesUpdated"], 1)
        self.assertEqual(data["correctOption"], 1)

        metric = PerformanceMetric.objects.get(student=self.student, module=self.module)
        self.assertEqual(metric.total_practice_submissions, 1)
        self.assertEqual(metric.accepted_submissions, 1)
        self.assertEqual(metric.group, self.group)

    def test_wrong_mcq_attempt(self):
        self.client.force_authenticate(self.student)
        self.client.post(
            f"/api/questions/{self.mcq.id}/attempt/", {"selectedOption": 0}, format="json"
        )
        metric = PerformanceMetric.objects.get(student=self.student, module=self.module)
        self.assertEqual(metric.total_practice_submissions, 1)
        self.assertEqual(metric.accepted_submissions, 0)

    def test_repeated_attempts_share_one_metric(self):
        self.client.force_authenticate(self.student)
        for option in (0, 1):
            response = self.client.post(
                f"/api/questions/{self.mcq.id}/attempt/", {"selectedOption": option}, format="json"
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)
        metric = PerformanceMetric.objects.get(student=self.student, module=self.module)
        self.assertEqual(metric.total_practice_submissions, 2)
        self.assertEqual(metric.accepted_submissions, 1)

    def test_second_module_metric_is_rejected(self):
        PerformanceMetric.objects.create(student=self.student, department=self.cs, module=self.module)
        with self.assertRaises(IntegrityError), transaction.atomic():
            PerformanceMetric.objects.create(
                student=self.student, department=self.cs, module=self.module
            )

    def test_coding_attempt(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            f"/api/questions/{self.coding.id}/attempt/", {"passed": True}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn("correctOption", response.json()["data"])

    def test_attempt_requires_answer(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(f"/api/questions/{self.mcq.id}/attempt/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("selectedOption", response.json()["details"])

    def test_teacher_cannot_attempt(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            f"/api/questions/{self.mcq.id}/attempt/", {"selectedOption": 1}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class NoteTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.cs = create_department()
        cls.teacher = create_user("teacher@academy.test", role=Role.TEACHER, department=cls.cs)
        cls.student = create_user("student@academy.test", department=cls.cs)

    def test_teacher_creates_note(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/notes/",
            {"title": "Cheat sheet", "content": "print()", "department": self.cs.id},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["uploaded_by"]["id"], self.teacher.id)

    def test_search_notes(self):
        self.client.force_authenticate(self.teacher)
        self.client.post(
            "/api/notes/",
            {"title": "Cheat sheet", "content": "print()", "department": self.cs.id},
            format="json",
        )
        response = self.client.get("/api/notes/", {"search": "PRINT"})
        self.assertEqual(response.json()["pagination"]["total"], 1)

    def test_teacher_cannot_delete_colleagues_note(self):
        colleague = create_user("t2@academy.test", role=Role.TEACHER, department=self.cs)
        note = Note.objects.create(title="Theirs", department=self.cs, uploaded_by=colleague)
        self.client.force_authenticate(self.teacher)
        response = self.client.delete(f"/api/notes/{note.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(colleague)
        response = self.client.delete(f"/api/notes/{note.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        note.refresh_from_db()
        self.assertFalse(note.is_active)

    def test_student_cannot_create_note(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            "/api/notes/", {"title": "Mine", "department": self.cs.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
