"""
Pytest configuration and shared fixtures.
"""

import itertools

import pytest
from rest_framework.test import APIClient

from checklists.models import Checklist, ChecklistAssignment, ChecklistItem, ChecklistProgress
from users.models import User


@pytest.fixture
def make_user(db):
    """Factory for users; every call gets a unique email."""
    counter = itertools.count(1)

    def _make(role=User.ROLE_EMPLOYEE, **kwargs):
        n = next(counter)
        kwargs.setdefault("email", f"user{n}@example.com")
        kwargs.setdefault("name", f"User {n}")
        return User.objects.create_user(role=role, **kwargs)

    return _make


@pytest.fixture
def employee(make_user):
    return make_user()


@pytest.fixture
def hr_user(make_user):
    return make_user(role=User.ROLE_HR, name="HR Admin")


@pytest.fixture
def make_checklist(db):
    """Factory for a checklist with ``items`` items titled A, B, C, ..."""

    def _make(title="Welcome", items=2):
        checklist = Checklist.objects.create(title=title)
        for order in range(items):
            ChecklistItem.objects.create(checklist=checklist, title=chr(ord("A") + order), order=order)
        return checklist

    return _make


@pytest.fixture
def assign():
    def _assign(checklist, user):
        return ChecklistAssignment.objects.create(checklist=checklist, user=user)

    return _assign


@pytest.fixture
def make_progress():
    def _make(user, item, **payload):
        return ChecklistProgress.objects.create(user=user, checklist_item=item, **payload)

    return _make


@pytest.fixture
def api_client():
    return APIClient()
