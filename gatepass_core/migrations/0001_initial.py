import django.db.models.deletion
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
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=30, unique=True)),
                ("name", models.CharField(max_length=255)),
            ],
            options={
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("STUDENT", "Student"),
                            ("STAFF", "Staff"),
                            ("HOD", "Hod"),
                            ("ACADEMIC_DIRECTOR", "Academic Director"),
                            ("HOSTEL_WARDEN", "Hostel Warden"),
                            ("SECURITY", "Security"),
                            ("EXECUTIVE_DIRECTOR", "Executive Director"),
                            ("ADMIN", "Admin"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                (
                    "residence",
                    models.CharField(
                        choices=[("DAY_SCHOLAR", "Day scholar"), ("HOSTELLER", "Hosteller")],
                        default="DAY_SCHOLAR",
                        max_length=20,
                    ),
                ),
                ("roll_number", models.CharField(blank=True, max_length=50)),
                ("phone", models.CharField(blank=True, max_length=50)),
                (
                    "department",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="members",
                        to="gatepass_core.department",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="campus_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="GatePassRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "requester_type",
                    models.CharField(
                        choices=[("STUDENT", "Student"), ("STAFF", "Staff"), ("HOD", "Hod")],
                        db_index=True,
                        editable=False,
                        max_length=16,
                    ),
                ),
                ("is_hosteller", models.BooleanField(default=False, editable=False)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("LEAVE", "Leave"),
                            ("HOME_VISIT", "Home Visit"),
                            ("EMERGENCY", "Emergency"),
                            ("OTHER", "Other"),
                        ],
                        default="LEAVE",
                        max_length=20,
                    ),
                ),
                ("reason", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING_STAFF", "Pending Staff"),
                            ("APPROVED_BY_STAFF", "Approved By Staff"),
                            ("REJECTED_BY_STAFF", "Rejected By Staff"),
                            ("PENDING_HOD", "Pending Hod"),
                            ("APPROVED_BY_HOD", "Approved By Hod"),
                            ("REJECTED_BY_HOD", "Rejected By Hod"),
                            ("PENDING_ACADEMIC_DIRECTOR", "Pending Academic Director"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("PENDING_HOSTEL_WARDEN", "Pending Hostel Warden"),
                            ("APPROVED_BY_HOSTEL_WARDEN", "Approved By Hostel Warden"),
                            ("REJECTED_BY_HOSTEL_WARDEN", "Rejected By Hostel Warden"),
                            ("USED", "Used"),
                            ("EXPIRED", "Expired"),
                        ],
                        db_index=True,
                        default="PENDING_STAFF",
                        editable=False,
                        max_length=40,
                    ),
                ),
                ("staff_comment", models.TextField(blank=True, editable=False, null=True)),
                ("hod_comment", models.TextField(blank=True, editable=False, null=True)),
                ("academic_director_comment", models.TextField(blank=True, editable=False, null=True)),
                ("hostel_warden_comment", models.TextField(blank=True, editable=False, null=True)),
                ("security_comment", models.TextField(blank=True, editable=False, null=True)),
                (
                    "department",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="gate_passes",
                        to="gatepass_core.department",
                    ),
                ),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="gate_passes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "staff_reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gate_passes_staff_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "hod_reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gate_passes_hod_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "academic_director_reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gate_passes_director_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "hostel_warden_reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gate_passes_warden_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "security_reviewer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gate_passes_security_reviewed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="gatepass_status_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="gate_pass_end_after_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("subject", models.CharField(max_length=255)),
                ("message", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("IN_PROGRESS", "In Progress"),
                            ("RESOLVED", "Resolved"),
                            ("REJECTED", "Rejected"),
                        ],
                        db_index=True,
                        default="PENDING",
                        editable=False,
                        max_length=20,
                    ),
                ),
                ("response", models.TextField(blank=True, editable=False)),
                (
                    "responder",
                    models.ForeignKey(
                        blank=True,
                        editable=False,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="complaints_answered",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="complaints",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="WorkflowEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("gate_pass", "Gate pass"), ("complaint", "Complaint")],
                        max_length=32,
                    ),
                ),
                ("object_id", models.PositiveIntegerField()),
                ("from_status", models.CharField(max_length=64)),
                ("outcome", models.CharField(max_length=64)),
                ("to_status", models.CharField(max_length=64)),
                ("role", models.CharField(max_length=64)),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "performed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="workflow_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["kind", "object_id"], name="wfevent_kind_object_idx"),
                ],
            },
        ),
    ]
