"""User model for storefront customers and back-office staff.

Extends Django's `AbstractUser` with a unique, normalized email (the sign-in
identifier) and an optional E.164 phone number usable as an alternative
identifier.
"""

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and optional phone."""

    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +34612345678)")],
        help_text="Contact number in E.164 format; also accepted as sign-in identifier",
    )

    def save(self, *args, **kwargs):
        """Lowercase and strip email, strip phone, then persist."""
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
