"""User model for authentication.

The custom `User` extends Django's `AbstractUser` so the email address
is unique and stored normalized; shoppers sign in with it.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user with a unique, lower-cased email."""

    email = models.EmailField(unique=True)

    def save(self, *args, **kwargs):
        """Normalize the email so uniqueness checks are case-insensitive."""
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
