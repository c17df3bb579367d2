"""
Seed Demo Data Management Command

Creates a small demo data set for local development:

- Department "Computer Science" (CS)
- One user per role (admin, hod, teacher, student @academy.local)
- Study group taught by the teacher with the student as member
- Module with two MCQ questions and one coding question
- A notice for all users

Running it again does not create duplicates.

Author: Academy Development Team
Version: 1.0.0
"""

import logging

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from academy.modules.models import Module, Question, QuestionType
from academy.notices.models import Notice, Priority, TargetType
from academy.organization.models import Department, StudyGroup
from academy.users.models import Profile, Role

User = get_user_model()

logger = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin@academy.local", "Ada", "Admin", Role.ADMIN),
    ("hod@academy.local", "Hanna", "Head", Role.HOD),
    ("teacher@academy.local", "Tom", "Teacher", Role.TEACHER),
    ("student@academy.local", "Sara", "Student", Role.STUDENT),
)

DEMO_QUESTIONS = (
    {
        "title": "Python list indexing",
        "text": "What does [1, 2, 3][-1] evaluate to?",
        "type": QuestionType.MCQ,
        "options": ["1", "2", "3", "IndexError"],
        "correct_option": 2,
        "points": 2,
    },
    {
        "title": "Dictionary lookup",
        "text": "Which method returns a default instead of raising KeyError?",
        "type": QuestionType.MCQ,
        "options": ["get", "pop", "keys", "items"],
        "correct_option": 0,
        "points": 2,
    },
    {
        "title": "FizzBuzz",
        "text": "Print the numbers 1 to 100, replacing multiples of 3 and 5.",
        "type": QuestionType.CODING,
        "options": [],
        "correct_option": None,
        "points": 6,
    },
)


class Command(BaseCommand):
    help = "Creates demo departments, users, groups, modules and notices."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default="Academy-demo-2024",
            help="Password set on newly created demo users.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        department, _created = Department.objects.get_or_create(
            code="CS",
            defaults={
                "name": "Computer Science",
                "description": "Programming and software engineering",
            },
        )

        users = {}
        for email, first_name, last_name, role in DEMO_USERS:
            user, created = User.objects.get_or_create(
                username=email,
                defaults={
                    "email": email,
                    "first_name": first_name,
                    "last_name": last_name,
                    "is_staff": role == Role.ADMIN,
                    "is_superuser": role == Role.ADMIN,
                },
            )
            if created:
                user.set_password(options["password"])
                user.save()
            profile, _created = Profile.objects.get_or_create(user=user)
            profile.role = role
            profile.department = None if role == Role.ADMIN else department
            profile.force_password_change = False
            profile.save()
            users[role] = user
            self.stdout.write(f"  {'created' if created else 'exists '} {email} ({role})")

        department.hod = users[Role.HOD]
        department.save()

        group, _created = StudyGroup.objects.get_or_create(
            department=department,
            code="CS-A",
            defaults={"name": "CS Group A", "teacher": users[Role.TEACHER]},
        )
        group.students.add(users[Role.STUDENT])

        module, _created = Module.objects.get_or_create(
            department=department,
            title="Python Basics",
            defaults={
                "description": "Syntax, data types and control flow",
                "created_by": users[Role.TEACHER],
                "estimated_hours": 10,
                "tags": ["python", "basics"],
            },
        )
        module.groups.add(group)
        for data in DEMO_QUESTIONS:
            question, _created = Question.objects.get_or_create(
                department=department,
                title=data["title"],
                defaults={**data, "created_by": users[Role.TEACHER]},
            )
            module.questions.add(question)

        Notice.objects.get_or_create(
            title="Welcome to the Academy",
            defaults={
                "content": "The demo data set is ready. Happy learning!",
                "posted_by": users[Role.ADMIN],
                "target_type": TargetType.ALL,
                "priority": Priority.HIGH,
            },
        )

        logger.info("Demo data seeded")
        self.stdout.write(self.style.SUCCESS("Demo data ready."))
