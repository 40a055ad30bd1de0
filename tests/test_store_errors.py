"""
Tests for store error translation and transaction scope.
"""

import pytest
from datetime import date
from unittest.mock import MagicMock
from sqlalchemy.exc import IntegrityError, OperationalError

from app.models import BlockedDate
from app.services.inventory_scope import InventoryScope
from app.services.range_store import RangeStore
from app.utils.db_helpers import atomic, compare_and_decrement, is_postgres, store_guard
from app.utils.errors import ConflictError, StoreUnavailableError, ValidationError


def _operational_error():
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestStoreGuard:

    def test_integrity_error_becomes_conflict(self):
        db = MagicMock()
        with pytest.raises(ConflictError) as exc_info:
            with store_guard(db, "insert"):
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))

        db.rollback.assert_called_once()
        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert exc_info.value.status_code == 409

    def test_operational_error_becomes_unavailable(self):
        db = MagicMock()
        with pytest.raises(StoreUnavailableError) as exc_info:
            with store_guard(db, "range_store.list_active"):
                raise _operational_error()

        db.rollback.assert_called_once()
        assert exc_info.value.context["operation"] == "range_store.list_active"
        assert exc_info.value.status_code == 503

    def test_other_errors_pass_through(self):
        db = MagicMock()
        with pytest.raises(ValidationError):
            with store_guard(db, "noop"):
                raise ValidationError("bad")
        db.rollback.assert_not_called()

    def test_range_store_translates_query_failure(self):
        db = MagicMock()
        db.query.side_effect = _operational_error()

        with pytest.raises(StoreUnavailableError):
            RangeStore(db).list_active(InventoryScope.of("L1"))


class TestAtomic:

    def test_commits_on_success(self):
        db = MagicMock()
        with atomic(db, "write"):
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self):
        db = MagicMock()
        with pytest.raises(ValidationError):
            with atomic(db, "write"):
                raise ValidationError("bad")
        db.commit.assert_not_called()
        db.rollback.assert_called()

    def test_commit_failure_is_translated(self):
        db = MagicMock()
        db.commit.side_effect = IntegrityError("COMMIT", {}, Exception("unique"))
        with pytest.raises(ConflictError):
            with atomic(db, "write"):
                pass

    def test_unique_block_key_enforced(self, db_session):
        scope = InventoryScope.of("L1")
        row = dict(
            listing_id="L1", scope_key=scope.key,
            blocked_date=date(2024, 6, 1), created_by_operator_id="op",
        )
        with atomic(db_session, "seed"):
            db_session.add(BlockedDate(**row))

        with pytest.raises(ConflictError):
            with atomic(db_session, "duplicate"):
                db_session.add(BlockedDate(**row))

        assert db_session.query(BlockedDate).count() == 1


class TestHelpers:

    def test_is_postgres(self, db_session):
        assert is_postgres(db_session) is False

    def test_compare_and_decrement_guards_floor(self, db_session):
        from app.models import DailyOverride

        scope = InventoryScope.of("L1")
        override = DailyOverride(
            **scope.row_fields(), override_date=date(2024, 6, 1), total_capacity=2, available_count=1,
        )
        db_session.add(override)
        db_session.commit()

        condition = DailyOverride.id == override.id
        assert compare_and_decrement(db_session, DailyOverride, condition, "available_count", 2) is False
        assert compare_and_decrement(db_session, DailyOverride, condition, "available_count", 1) is True
        db_session.commit()
        db_session.refresh(override)
        assert override.available_count == 0
