from datetime import timedelta
from io import StringIO

from django.contrib.auth.models import User
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from academy.modules.models import Module
from academy.notices.models import Notice
from academy.organization.models import Department, StudyGroup
from academy.tests.helpers import create_user
from academy.users.models import Role

"""
    Tests for the management commands: demo data seeding and the removal of
    accounts whose initial password was never set.
"""


class SeedDemoDataTests(TestCase):
    def run_seed(self):
        call_command("seed_demo_data", stdout=StringIO())

    def test_seed_creates_demo_data(self):
        self.run_seed()
        department = Department.objects.get(code="CS")
        self.assertEqual(department.hod.profile.role, Role.HOD)
        self.assertEqual(User.objects.filter(email__endswith="@academy.local").count(), 4)
        group = StudyGroup.objects.get(department=department)
        self.assertEqual(group.teacher.profile.role, Role.TEACHER)
        self.assertEqual(group.students.count(), 1)
        self.assertEqual(Module.objects.get().questions.count(), 3)
        self.assertEqual(Notice.objects.count(), 1)

    def test_seed_twice_creates_no_duplicates(self):
        self.run_seed()
        self.run_seed()
        self.assertEqual(Department.objects.count(), 1)
        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Module.objects.get().questions.count(), 3)
        self.assertEqual(Notice.objects.count(), 1)


class CleanupInactiveUsersTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.active = create_user("active@academy.test")
        cls.pending = create_user("pending@academy.test")
        cls.fresh = create_user("fresh@academy.test")
        for user in (cls.pending, cls.fresh):
            user.profile.force_password_change = True
            user.profile.save()
        User.objects.filter(pk__in=[cls.active.pk, cls.pending.pk]).update(
            date_joined=timezone.now() - timedelta(days=2)
        )

    def test_deletes_expired_pending_users(self):
        out = StringIO()
        call_command("cleanup_inactive_users", stdout=out)
        self.assertFalse(User.objects.filter(pk=self.pending.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.active.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.fresh.pk).exists())
        self.assertIn("1 user(s) deleted.", out.getvalue())

    def test_dry_run_keeps_users(self):
        out = StringIO()
        call_command("cleanup_inactive_users", "--dry-run", stdout=out)
        self.assertTrue(User.objects.filter(pk=self.pending.pk).exists())
        self.assertIn("pending@academy.test", out.getvalue())
