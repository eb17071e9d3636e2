from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager


class CustomUserManager(UserManager):
    def create_user(self, username, email=None, password=None, **extra_fields):
        if not username:
            raise ValueError('The Username field must be set')
        if email:
            email = self.normalize_email(email).lower()
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', CustomUser.ROLE_OWNER)
        return super().create_superuser(username, email, password, **extra_fields)


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CustomUser(AbstractUser):
    """Back-office account: owners and admins run the café, kitchen and staff serve orders"""
    ROLE_OWNER = 'owner'
    ROLE_ADMIN = 'admin'
    ROLE_KITCHEN = 'kitchen'
    ROLE_STAFF = 'staff'

    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_KITCHEN, 'Kitchen'),
        (ROLE_STAFF, 'Staff'),
    ]

    ADMIN_ROLES = {ROLE_OWNER, ROLE_ADMIN}
    STAFF_ROLES = {ROLE_OWNER, ROLE_ADMIN, ROLE_KITCHEN, ROLE_STAFF}

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STAFF)
    last_login_at = models.DateTimeField(null=True, blank=True)

    objects = CustomUserManager()

    class Meta:
        db_table = 'users'

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_admin_role(self):
        return self.is_active and self.role in self.ADMIN_ROLES

    @property
    def is_staff_role(self):
        return self.is_active and self.role in self.STAFF_ROLES
