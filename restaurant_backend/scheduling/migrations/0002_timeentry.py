import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("branches", "0002_branch_geofence"),
        ("scheduling", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TimeEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("clock_in_at", models.DateTimeField(db_index=True)),
                ("clock_in_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("clock_in_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                (
                    "clock_in_source",
                    models.CharField(
                        choices=[("app", "Mobile App"), ("kiosk", "Branch Kiosk"), ("manual", "Manual Entry")],
                        default="app",
                        max_length=10,
                    ),
                ),
                ("clock_out_at", models.DateTimeField(blank=True, null=True)),
                ("clock_out_latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("clock_out_longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                (
                    "clock_out_source",
                    models.CharField(
                        blank=True,
                        choices=[("app", "Mobile App"), ("kiosk", "Branch Kiosk"), ("manual", "Manual Entry")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("total_hours", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "branch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="time_entries",
                        to="branches.branch",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Time entries",
                "ordering": ["-clock_in_at"],
                "indexes": [
                    models.Index(fields=["user", "clock_in_at"], name="time_user_clock_in_idx"),
                    models.Index(fields=["branch", "clock_in_at"], name="time_branch_clock_in_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("clock_out_at__isnull", True)),
                        fields=("user",),
                        name="uniq_time_entry_open_per_user",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("clock_out_at__isnull", True),
                            ("clock_out_at__gte", models.F("clock_in_at")),
                            _connector="OR",
                        ),
                        name="chk_time_entry_out_after_in",
                    ),
                ],
            },
        ),
    ]
