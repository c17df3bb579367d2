"""
Notice Board Tests

Audience targeting per role, read tracking, posting rules, department and
group feeds, statistics and expiry cleanup.
"""

from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from academy.notices.models import Notice, NoticeRead, Priority, TargetType
from academy.tests.helpers import create_department, create_group, create_user
from academy.users.models import Role


def create_notice(title, posted_by, target_type=TargetType.ALL, groups=(), **fields):
    notice = Notice.objects.create(
        title=title, content=f"{title} content", posted_by=posted_by, target_type=target_type, **fields
    )
    if groups:
        notice.groups.add(*groups)
    return notice


class NoticeTestData:
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin@academy.test", role=Role.ADMIN)
        cls.hod = create_user("hod@academy.test", role=Role.HOD)
        cls.cs = create_department(hod=cls.hod)
        cls.math = create_department(name="Mathematics", code="MATH")
        cls.teacher = create_user("teacher@academy.test", role=Role.TEACHER, department=cls.cs)
        cls.student = create_user("student@academy.test", department=cls.cs)
        cls.loner = create_user("loner@academy.test", department=cls.cs)
        cls.group = create_group(cls.cs, teacher=cls.teacher, students=[cls.student])
        cls.other_group = create_group(cls.cs, name="CS-B", code="CSB")

        cls.everyone = create_notice("Everyone", cls.admin, priority=Priority.LOW)
        cls.students = create_notice(
            "Students", cls.admin, TargetType.ROLE, target_roles=[Role.STUDENT]
        )
        cls.teachers = create_notice(
            "Teachers", cls.admin, TargetType.ROLE, target_roles=[Role.TEACHER]
        )
        cls.cs_notice = create_notice(
            "CS", cls.hod, TargetType.DEPARTMENT, department=cls.cs, priority=Priority.HIGH
        )
        cls.math_notice = create_notice(
            "Math", cls.admin, TargetType.DEPARTMENT, department=cls.math
        )
        cls.group_notice = create_notice(
            "Group", cls.teacher, TargetType.GROUP, groups=[cls.group]
        )
        cls.expired = create_notice(
            "Expired", cls.admin, expires_at=timezone.now() - timedelta(days=1)
        )
        cls.inactive = create_notice("Inactive", cls.admin, is_active=False)

    def titles(self, response):
        return {notice["title"] for notice in response.json()["data"]}


class NoticeAudienceTests(NoticeTestData, APITestCase):
    def test_student_audience(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/notices/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.titles(response), {"Everyone", "Students", "CS", "Group"})

    def test_student_without_group(self):
        self.client.force_authenticate(self.loner)
        response = self.client.get("/api/notices/")
        self.assertEqual(self.titles(response), {"Everyone", "Students", "CS"})

    def test_teacher_audience(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get("/api/notices/")
        self.assertEqual(self.titles(response), {"Everyone", "Teachers", "Group"})

    def test_hod_audience(self):
        self.client.force_authenticate(self.hod)
        response = self.client.get("/api/notices/")
        self.assertEqual(self.titles(response), {"Everyone", "CS"})

    def test_admin_sees_all_active(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/notices/")
        self.assertEqual(response.json()["pagination"]["total"], 6)

    def test_admin_lists_inactive(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/notices/", {"isActive": "false"})
        self.assertEqual(self.titles(response), {"Inactive"})

    def test_student_cannot_list_inactive(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/notices/", {"isActive": "false"})
        self.assertNotIn("Inactive", self.titles(response))

    def test_list_orders_by_priority(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/notices/")
        data = response.json()["data"]
        self.assertEqual(data[0]["title"], "CS")
        self.assertEqual(data[-1]["title"], "Everyone")

    def test_filters(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/notices/", {"targetType": "role"})
        self.assertEqual(self.titles(response), {"Students"})
        response = self.client.get("/api/notices/", {"search": "grou"})
        self.assertEqual(self.titles(response), {"Group"})

    def test_invalid_priority_filter(self):
        self.client.force_authenticate(self.student)
        response = self.client.get("/api/notices/", {"priority": "urgent"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/notices/{self.cs_notice.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["targetAudience"], "Department: Computer Science")
        self.assertFalse(data["isRead"])

    def test_detail_outside_audience(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/notices/{self.math_notice.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"], "Access denied to this notice")

    def test_detail_expired(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/notices/{self.expired.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"], "Notice has expired")


class NoticeReadTests(NoticeTestData, APITestCase):
    def setUp(self):
        self.client.force_authenticate(self.student)

    def test_mark_read_is_idempotent(self):
        url = f"/api/notices/{self.everyone.id}/mark-read/"
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"], {"readCount": 1, "isRead": True})

        response = self.client.post(url)
        self.assertEqual(response.json()["data"]["readCount"], 1)
        self.assertEqual(NoticeRead.objects.filter(user=self.student).count(), 1)

    def test_mark_read_outside_audience(self):
        response = self.client.post(f"/api/notices/{self.teachers.id}/mark-read/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unread_count_and_filter(self):
        response = self.client.get("/api/notices/unread-count/")
        self.assertEqual(response.json()["data"], {"unreadCount": 4})

        self.client.post(f"/api/notices/{self.everyone.id}/mark-read/")
        response = self.client.get("/api/notices/unread-count/")
        self.assertEqual(response.json()["data"], {"unreadCount": 3})

        response = self.client.get("/api/notices/", {"unread": "true"})
        self.assertNotIn("Everyone", self.titles(response))

    def test_list_reports_read_state(self):
        self.client.post(f"/api/notices/{self.everyone.id}/mark-read/")
        response = self.client.get("/api/notices/")
        read = {n["title"]: n["isRead"] for n in response.json()["data"]}
        self.assertTrue(read["Everyone"])
        self.assertFalse(read["CS"])

    def test_mark_all_read(self):
        self.client.post(f"/api/notices/{self.everyone.id}/mark-read/")
        response = self.client.post("/api/notices/mark-all-read/")
        self.assertEqual(response.json()["data"], {"markedCount": 3})
        self.assertEqual(response.json()["message"], "Marked 3 notices as read")

        response = self.client.get("/api/notices/unread-count/")
        self.assertEqual(response.json()["data"]["unreadCount"], 0)


class NoticePostingTests(NoticeTestData, APITestCase):
    def test_teacher_posts_group_notice(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/notices/",
            {
                "title": "Homework",
                "content": "Chapter 3",
                "target_type": "group",
                "groups": [self.group.id],
                "priority": "high",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["message"], "Notice created successfully")
        self.assertEqual(response.json()["data"]["posted_by"]["id"], self.teacher.id)

    def test_teacher_cannot_target_untaught_group(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(
            "/api/notices/",
            {
                "title": "Homework",
                "content": "Chapter 3",
                "target_type": "group",
                "groups": [self.other_group.id],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"], "Can only create notices for groups you teach")

    def test_group_notice_needs_groups(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/notices/",
            {"title": "Homework", "content": "Chapter 3", "target_type": "group"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.json()["error"], "At least one group is required for group-specific notices"
        )

    def test_role_notice_deduplicates_roles(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/notices/",
            {
                "title": "Staff",
                "content": "Meeting",
                "target_type": "role",
                "target_roles": [Role.TEACHER, Role.HOD, Role.TEACHER],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["target_roles"], [Role.TEACHER, Role.HOD])

    def test_hod_cannot_post_for_other_department(self):
        self.client.force_authenticate(self.hod)
        response = self.client.post(
            "/api/notices/",
            {
                "title": "Exam",
                "content": "Friday",
                "target_type": "department",
                "department": self.math.id,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_expiry_must_be_in_future(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/notices/",
            {
                "title": "Old",
                "content": "News",
                "expires_at": (timezone.now() - timedelta(hours=1)).isoformat(),
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("expires_at", response.json()["details"])

    def test_student_cannot_post(self):
        self.client.force_authenticate(self.student)
        response = self.client.post(
            "/api/notices/", {"title": "Hi", "content": "All"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_poster_updates_notice(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/notices/{self.group_notice.id}/", {"title": "Group update"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["title"], "Group update")

    def test_teacher_cannot_update_others_notice(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(
            f"/api/notices/{self.everyone.id}/", {"title": "Mine"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"], "Notice not found or access denied")

    def test_hod_updates_notice_for_everyone(self):
        self.client.force_authenticate(self.hod)
        response = self.client.patch(
            f"/api/notices/{self.everyone.id}/", {"priority": "high"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_hod_cannot_delete_others_notice(self):
        self.client.force_authenticate(self.hod)
        response = self.client.delete(f"/api/notices/{self.everyone.id}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_poster_deletes_notice(self):
        self.client.force_authenticate(self.hod)
        response = self.client.delete(f"/api/notices/{self.cs_notice.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Notice.objects.get(pk=self.cs_notice.id).is_active)


class NoticeFeedTests(NoticeTestData, APITestCase):
    def test_department_feed_for_hod(self):
        self.client.force_authenticate(self.hod)
        response = self.client.get(f"/api/notices/department/{self.cs.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.titles(response), {"Everyone", "CS"})

    def test_department_feed_denied_for_student(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/notices/department/{self.cs.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_department_feed_unknown_department(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/notices/department/9999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_group_feed_for_member(self):
        self.client.force_authenticate(self.student)
        response = self.client.get(f"/api/notices/group/{self.group.id}/")
        self.assertEqual(self.titles(response), {"Everyone", "Group"})

    def test_group_feed_denied_for_non_member(self):
        self.client.force_authenticate(self.loner)
        response = self.client.get(f"/api/notices/group/{self.group.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"], "Access denied to group notices")


class NoticeMaintenanceTests(NoticeTestData, APITestCase):
    def test_stats(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get("/api/notices/stats/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(
            data["overview"], {"totalNotices": 7, "activeNotices": 6, "expiredNotices": 1}
        )
        priorities = {row["priority"]: row["count"] for row in data["priorityBreakdown"]}
        self.assertEqual(priorities, {"medium": 5, "low": 1, "high": 1})
        self.assertEqual(len(data["recentNotices"]), 7)

    def test_stats_requires_analytics_permission(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get("/api/notices/stats/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cleanup_expired(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/notices/cleanup-expired/")
        self.assertEqual(response.json()["data"], {"deactivatedCount": 1})
        self.assertFalse(Notice.objects.get(pk=self.expired.id).is_active)

    def test_cleanup_command(self):
        out = StringIO()
        call_command("cleanup_expired_notices", "--dry-run", stdout=out)
        self.assertIn("1 notice(s) would be deactivated", out.getvalue())
        self.assertTrue(Notice.objects.get(pk=self.expired.id).is_active)

        call_command("cleanup_expired_notices", stdout=out)
        self.assertFalse(Notice.objects.get(pk=self.expired.id).is_active)
