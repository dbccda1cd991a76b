import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations
from django.db import models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Employee",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("emp_id", models.CharField(blank=True, db_index=True, max_length=50)),
                ("full_name", models.CharField(blank=True, max_length=255)),
                ("job_title", models.CharField(blank=True, max_length=255)),
                ("dept", models.CharField(blank=True, db_index=True, max_length=255)),
                ("bu", models.CharField(blank=True, max_length=255)),
                ("dl_idl_staff", models.CharField(blank=True, max_length=50)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("employee_type", models.CharField(blank=True, max_length=100)),
                ("line_manager", models.CharField(blank=True, max_length=255)),
                ("joining_date", models.CharField(blank=True, max_length=50)),
                ("leaving_date", models.CharField(blank=True, max_length=50)),
                ("raw_data", models.JSONField(blank=True, null=True)),
                (
                    "line_manager_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="none",
                        max_length=20,
                    ),
                ),
                (
                    "pending_line_manager",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                ("change_requested_at", models.DateTimeField(blank=True, null=True)),
                ("imported_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "change_requested_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="requested_line_manager_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["emp_id"],
            },
        ),
    ]
