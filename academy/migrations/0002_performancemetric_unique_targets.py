from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("academy", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="performancemetric",
            constraint=models.UniqueConstraint(
                condition=models.Q(("assessment__isnull", True)),
                fields=("student", "module"),
                name="unique_module_metric_per_student",
            ),
        ),
        migrations.AddConstraint(
            model_name="performancemetric",
            constraint=models.UniqueConstraint(
                condition=models.Q(("module__isnull", True)),
                fields=("student", "assessment"),
                name="unique_assessment_metric_per_student",
            ),
        ),
    ]
