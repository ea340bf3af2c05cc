# gatepass_core/models/core.py

from django.db import models
from django.contrib.auth.models import User

from gatepass_core.workflows import ROLES, Residence, normalize_role


# ============================================================
# Base
# ============================================================
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================
# Department
# ============================================================
class Department(TimeStampedModel):
    code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"


# ============================================================
# Profile (role + residence, one per user)
# ============================================================
class Profile(TimeStampedModel):
    ROLE_CHOICES = [(r, r.replace("_", " ").title()) for r in ROLES]
    RESIDENCE_CHOICES = [
        (Residence.DAY_SCHOLAR.value, "Day scholar"),
        (Residence.HOSTELLER.value, "Hosteller"),
    ]

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="campus_profile",
    )
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, db_index=True)
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="members",
    )
    residence = models.CharField(
        max_length=20,
        choices=RESIDENCE_CHOICES,
        default=Residence.DAY_SCHOLAR.value,
    )
    roll_number = models.CharField(max_length=50, blank=True)
    phone = models.CharField(max_length=50, blank=True)

    @property
    def is_hosteller(self) -> bool:
        return self.residence == Residence.HOSTELLER.value

    def save(self, *args, **kwargs):
        self.role = normalize_role(self.role)
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.user.username} ({self.role})"
