from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from utils.constants import Choices, Role


class CustomUserManager(BaseUserManager):
    """
    User manager for email-based accounts.
    Validation is handled by serializers, this manager focuses on creation.
    """

    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a user with the given email and password.
        """
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save an admin with the given email and password.
        """
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("is_verified", True)
        extra_fields["role"] = Role.ADMIN
        extra_fields["is_superuser"] = True

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Passenger, driver or administrator of the booking platform.

    Accounts are identified by email. The role drives access control:
    - CUSTOMER: books seats and pays for them
    - ADMIN: manages routes, buses and trips
    - DRIVER: operational account, no booking privileges beyond a customer's
    """

    username = None
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(
        max_length=20, choices=Choices.ROLE_CHOICES, default=Role.CUSTOMER, db_index=True
    )
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        db_table = "users"
        ordering = ["email"]

    @property
    def is_staff(self):
        """
        Admins get Django admin site access.
        """
        return self.role == Role.ADMIN

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def __str__(self):
        return f"{self.email} ({self.role})"
