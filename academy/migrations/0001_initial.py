import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Department",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True, verbose_name="Name")),
                ("code", models.CharField(max_length=6, unique=True, validators=[django.core.validators.RegexValidator(message="Department code must be 2-6 letters", regex="^[A-Za-z]{2,6}$")], verbose_name="Code")),
                ("description", models.CharField(blank=True, max_length=500, verbose_name="Description")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("hod", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="headed_departments", to=settings.AUTH_USER_MODEL, verbose_name="Head of Department")),
            ],
            options={
                "verbose_name": "Department",
                "verbose_name_plural": "Departments",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="StudyGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="Name")),
                ("code", models.CharField(max_length=20, verbose_name="Code")),
                ("description", models.CharField(blank=True, max_length=500, verbose_name="Description")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="groups", to="academy.department", verbose_name="Department")),
                ("students", models.ManyToManyField(blank=True, related_name="study_groups", to=settings.AUTH_USER_MODEL, verbose_name="Students")),
                ("teacher", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="taught_groups", to=settings.AUTH_USER_MODEL, verbose_name="Teacher")),
            ],
            options={
                "verbose_name": "Study Group",
                "verbose_name_plural": "Study Groups",
                "ordering": ["name"],
            },
        ),
        migrations.AddConstraint(
            model_name="studygroup",
            constraint=models.UniqueConstraint(fields=("department", "code"), name="unique_group_code_per_department"),
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("Admin", "Admin"), ("HOD", "Head of Department"), ("Teacher", "Teacher"), ("Student", "Student")], db_index=True, default="Student", max_length=10, verbose_name="Role")),
                ("force_password_change", models.BooleanField(default=True, help_text="Require user to change password on next login for security", verbose_name="Force Password Change")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("department", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="members", to="academy.department", verbose_name="Department")),
                ("user", models.OneToOneField(help_text="Associated user account", on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL, verbose_name="User")),
            ],
            options={
                "verbose_name": "User Profile",
                "verbose_name_plural": "User Profiles",
                "db_table": "academy_profile",
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                ("text", models.TextField(verbose_name="Question text")),
                ("type", models.CharField(choices=[("mcq", "Multiple choice"), ("coding", "Coding")], default="mcq", max_length=10, verbose_name="Type")),
                ("difficulty", models.CharField(choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")], default="easy", max_length=10, verbose_name="Difficulty")),
                ("options", models.JSONField(blank=True, default=list, verbose_name="Options")),
                ("correct_option", models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="Correct option")),
                ("points", models.PositiveIntegerField(default=1, verbose_name="Points")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_questions", to=settings.AUTH_USER_MODEL)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="academy.department")),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Note",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                ("content", models.TextField(blank=True, verbose_name="Content")),
                ("attachment_url", models.URLField(blank=True, max_length=500, verbose_name="Attachment URL")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notes", to="academy.department")),
                ("uploaded_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="uploaded_notes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Note",
                "verbose_name_plural": "Notes",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Module",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                ("description", models.TextField(blank=True, max_length=2000, verbose_name="Description")),
                ("difficulty", models.CharField(choices=[("beginner", "Beginner"), ("intermediate", "Intermediate"), ("advanced", "Advanced")], default="beginner", max_length=12, verbose_name="Difficulty")),
                ("estimated_hours", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(200)], verbose_name="Estimated hours")),
                ("tags", models.JSONField(blank=True, default=list, verbose_name="Tags")),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="Sort order")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_modules", to=settings.AUTH_USER_MODEL)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modules", to="academy.department")),
                ("groups", models.ManyToManyField(blank=True, related_name="modules", to="academy.studygroup")),
                ("notes", models.ManyToManyField(blank=True, related_name="modules", to="academy.note")),
                ("prerequisites", models.ManyToManyField(blank=True, related_name="required_by", to="academy.module")),
                ("questions", models.ManyToManyField(blank=True, related_name="modules", to="academy.question")),
            ],
            options={
                "verbose_name": "Module",
                "verbose_name_plural": "Modules",
                "ordering": ["sort_order", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Assessment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("start_time", models.DateTimeField(verbose_name="Start time")),
                ("duration", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name="Duration (minutes)")),
                ("passing_score", models.PositiveIntegerField(default=0, verbose_name="Passing score")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_assessments", to=settings.AUTH_USER_MODEL)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assessments", to="academy.department")),
                ("groups", models.ManyToManyField(blank=True, related_name="assessments", to="academy.studygroup")),
                ("modules", models.ManyToManyField(blank=True, related_name="assessments", to="academy.module")),
            ],
            options={
                "verbose_name": "Assessment",
                "verbose_name_plural": "Assessments",
                "ordering": ["-start_time"],
            },
        ),
        migrations.CreateModel(
            name="AssessmentQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points", models.PositiveIntegerField(default=1)),
                ("order", models.PositiveIntegerField(default=0)),
                ("assessment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assessment_questions", to="academy.assessment")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assessment_links", to="academy.question")),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="assessmentquestion",
            constraint=models.UniqueConstraint(fields=("assessment", "question"), name="unique_assessment_question"),
        ),
        migrations.AddField(
            model_name="assessment",
            name="questions",
            field=models.ManyToManyField(blank=True, related_name="assessments", through="academy.AssessmentQuestion", to="academy.question"),
        ),
        migrations.CreateModel(
            name="AssessmentSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("in_progress", "In progress"), ("submitted", "Submitted")], default="in_progress", max_length=12)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("time_taken", models.PositiveIntegerField(default=0)),
                ("mcq_score", models.FloatField(default=0)),
                ("coding_score", models.FloatField(default=0)),
                ("total_score", models.FloatField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("assessment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="submissions", to="academy.assessment")),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assessment_submissions", to="academy.department")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assessment_submissions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="assessmentsubmission",
            constraint=models.UniqueConstraint(fields=("assessment", "student"), name="unique_submission_per_student"),
        ),
        migrations.CreateModel(
            name="McqAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("selected_option", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("is_correct", models.BooleanField(default=False)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="mcq_answers", to="academy.question")),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="mcq_answers", to="academy.assessmentsubmission")),
            ],
        ),
        migrations.AddConstraint(
            model_name="mcqanswer",
            constraint=models.UniqueConstraint(fields=("submission", "question"), name="unique_mcq_answer"),
        ),
        migrations.CreateModel(
            name="CodingSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("attempts", models.PositiveIntegerField(default=1)),
                ("best_score", models.FloatField(default=0)),
                ("is_completed", models.BooleanField(default=False)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="coding_submissions", to="academy.question")),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="coding_answers", to="academy.assessmentsubmission")),
            ],
        ),
        migrations.AddConstraint(
            model_name="codingsubmission",
            constraint=models.UniqueConstraint(fields=("submission", "question"), name="unique_coding_answer"),
        ),
        migrations.CreateModel(
            name="PerformanceMetric",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("total_practice_submissions", models.PositiveIntegerField(default=0)),
                ("accepted_submissions", models.PositiveIntegerField(default=0)),
                ("completed_assessments", models.PositiveIntegerField(default=0)),
                ("average_assessment_score", models.FloatField(default=0)),
                ("last_attempted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assessment", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="performance_metrics", to="academy.assessment")),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="performance_metrics", to="academy.department")),
                ("group", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="performance_metrics", to="academy.studygroup")),
                ("module", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="performance_metrics", to="academy.module")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="performance_metrics", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Performance Metric",
                "verbose_name_plural": "Performance Metrics",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="Notice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="Title")),
                ("content", models.TextField(verbose_name="Content")),
                ("target_type", models.CharField(choices=[("all", "All users"), ("department", "Department"), ("group", "Groups"), ("role", "Roles")], default="all", max_length=12, verbose_name="Target type")),
                ("target_roles", models.JSONField(blank=True, default=list, verbose_name="Target roles")),
                ("priority", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")], default="medium", max_length=6, verbose_name="Priority")),
                ("expires_at", models.DateTimeField(blank=True, null=True, verbose_name="Expires at")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("read_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("department", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notices", to="academy.department")),
                ("groups", models.ManyToManyField(blank=True, related_name="notices", to="academy.studygroup")),
                ("posted_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="posted_notices", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Notice",
                "verbose_name_plural": "Notices",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="NoticeRead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("read_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("notice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reads", to="academy.notice")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notice_reads", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-read_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="noticeread",
            constraint=models.UniqueConstraint(fields=("notice", "user"), name="unique_notice_read"),
        ),
    ]
