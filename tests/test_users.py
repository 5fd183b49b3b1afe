"""
Tests for the custom user model.
"""

import pytest

from users.models import User

pytestmark = pytest.mark.django_db


class TestUserManager:

    def test_emp_ids_are_sequential(self, make_user):
        first = make_user()
        second = make_user()

        assert first.emp_id == "EMP0001"
        assert second.emp_id == "EMP0002"

    def test_superuser_defaults_to_hr(self):
        admin = User.objects.create_superuser("root@example.com", password="s3cret-pass")

        assert admin.is_staff and admin.is_superuser
        assert admin.role == User.ROLE_HR
        assert admin.check_password("s3cret-pass")

    def test_email_is_required(self):
        with pytest.raises(ValueError):
            User.objects.create_user("")


class TestRolesAndSoftDelete:

    def test_role_helpers(self, make_user):
        assert make_user().is_employee()
        assert make_user(role=User.ROLE_SUPERVISOR).is_supervisor()
        assert make_user(role=User.ROLE_MANAGER).is_manager()
        assert make_user(role=User.ROLE_HR).is_hr()
        assert not make_user(role=User.ROLE_MANAGER).is_hr()

    def test_soft_delete_keeps_row(self, make_user):
        kept = make_user()
        gone = make_user()

        gone.soft_delete()

        assert gone.is_deleted
        assert not gone.is_active
        assert list(User.objects.active()) == [kept]
        assert list(User.objects.deleted()) == [gone]
