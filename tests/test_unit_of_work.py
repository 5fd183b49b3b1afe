"""
Tests for the transactional unit of work.
"""

import pytest
from django.db import OperationalError, connections

from checklists.models import Checklist
from maintenance.exceptions import ConnectivityError
from maintenance.unit_of_work import ensure_store_available, run_in_transaction

pytestmark = pytest.mark.django_db


class TestRunInTransaction:

    def test_commits_and_returns_result(self):
        result = run_in_transaction(lambda: Checklist.objects.create(title="Kept"))

        assert result.pk is not None
        assert Checklist.objects.filter(title="Kept").exists()

    def test_failure_rolls_back_and_reraises_unchanged(self):
        error = KeyError("missing")

        def work():
            Checklist.objects.create(title="Discarded")
            raise error

        with pytest.raises(KeyError) as excinfo:
            run_in_transaction(work)

        assert excinfo.value is error
        assert not Checklist.objects.filter(title="Discarded").exists()

    def test_rollback_flag_discards_successful_work(self):
        result = run_in_transaction(lambda: Checklist.objects.create(title="Dry"), rollback=True)

        assert result.title == "Dry"
        assert not Checklist.objects.filter(title="Dry").exists()


class TestEnsureStoreAvailable:

    def test_reachable_store_passes(self):
        ensure_store_available()

    def test_unreachable_store_raises_connectivity_error(self, monkeypatch):
        def refuse():
            raise OperationalError("could not connect")

        monkeypatch.setattr(connections["default"], "ensure_connection", refuse)

        with pytest.raises(ConnectivityError) as excinfo:
            ensure_store_available()

        assert excinfo.value.exit_code == 3
