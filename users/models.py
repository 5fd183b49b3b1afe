# ===========================================================
# users/models.py
# ===========================================================

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models, transaction, connection
from django.utils import timezone
from django.core.exceptions import ValidationError
from django.utils.crypto import get_random_string
import logging

logger = logging.getLogger("users")


# ===========================================================
# USER QUERYSET & MANAGER
# ===========================================================
class UserQuerySet(models.QuerySet):
    """Soft-delete aware filters."""

    def active(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)

    def employees(self):
        return self.filter(role=User.ROLE_EMPLOYEE)


class UserManager(BaseUserManager.from_queryset(UserQuerySet)):
    """Custom user manager handling emp_id generation."""

    def generate_emp_id(self):
        """Generate a unique emp_id in the format EMP0001, EMP0002, etc."""
        with transaction.atomic():
            table_name = self.model._meta.db_table

            with connection.cursor() as cursor:
                query = f"SELECT emp_id FROM {table_name} ORDER BY id DESC LIMIT 1"
                if connection.vendor == "postgresql":
                    query += " FOR UPDATE"
                cursor.execute(query)
                result = cursor.fetchone()

            if result and result[0]:
                try:
                    num = int(result[0].replace("EMP", ""))
                    return f"EMP{num + 1:04d}"
                except (ValueError, AttributeError):
                    logger.warning(f"Invalid emp_id format found: {result[0]}")

            return "EMP0001"

    def create_user(self, email, password=None, **extra_fields):
        """Create a regular user. Users without a password get an unusable random one."""
        if not email:
            raise ValueError("Users must have an email address.")

        extra_fields["emp_id"] = extra_fields.get("emp_id") or self.generate_emp_id()
        extra_fields.setdefault("is_active", True)

        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password or get_random_string(16))
        user.save(using=self._db)

        logger.info(f"User created: {user.emp_id} ({user.role})")
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ROLE_HR)

        if not password:
            raise ValueError("Superuser must have a password.")

        return self.create_user(email, password=password, **extra_fields)


# ===========================================================
# USER MODEL
# ===========================================================
class User(AbstractBaseUser, PermissionsMixin):
    """
    People Ops user. The role drives which views the frontend renders
    and who is eligible for onboarding journeys.
    """

    ROLE_EMPLOYEE = "employee"
    ROLE_SUPERVISOR = "supervisor"
    ROLE_MANAGER = "manager"
    ROLE_HR = "hr"

    ROLE_CHOICES = [
        (ROLE_EMPLOYEE, "Employee"),
        (ROLE_SUPERVISOR, "Supervisor"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_HR, "HR"),
    ]

    # ---------- CORE ----------
    emp_id = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        db_index=True,
        help_text="Auto-generated employee ID (EMP0001, EMP0002, etc.)",
    )
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=200, blank=True)

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_EMPLOYEE,
        db_index=True,
    )

    # ---------- ORGANIZATION ----------
    department = models.CharField(max_length=100, blank=True)
    supervisor = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supervisees",
        limit_choices_to={"role__in": [ROLE_SUPERVISOR, ROLE_MANAGER]},
    )
    start_date = models.DateTimeField(null=True, blank=True)

    # ---------- DJANGO FLAGS ----------
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    # ---------- AUDIT ----------
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["emp_id"]
        indexes = [
            models.Index(fields=["role", "deleted_at"]),
        ]

    def __str__(self):
        return f"{self.name or self.email} ({self.emp_id})"

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email

    def clean(self):
        super().clean()
        if self.supervisor_id and self.pk and self.supervisor_id == self.pk:
            raise ValidationError({"supervisor": "User cannot be their own supervisor."})

    # ======================================================
    # ROLE HELPERS
    # ======================================================
    def is_hr(self):
        return self.role == self.ROLE_HR or self.is_superuser

    def is_supervisor(self):
        return self.role == self.ROLE_SUPERVISOR

    def is_manager(self):
        return self.role == self.ROLE_MANAGER

    def is_employee(self):
        return self.role == self.ROLE_EMPLOYEE

    # ======================================================
    # SOFT DELETE
    # ======================================================
    @property
    def is_deleted(self):
        return self.deleted_at is not None

    @transaction.atomic
    def soft_delete(self):
        """Deactivate the account but keep its history rows."""
        self.deleted_at = timezone.now()
        self.is_active = False
        self.save(update_fields=["deleted_at", "is_active", "updated_at"])
        logger.info(f"User soft-deleted: {self.emp_id}")
