"""
Tests for blocks, per-day overrides and capacity consumption.
"""

import pytest
from datetime import date
from unittest.mock import patch

from app.models import BlockedDate, DailyOverride, TriggerType
from app.services.availability_resolver import AvailabilityResolver, SOURCE_BLOCKED, SOURCE_BOOKED
from app.services.inventory_service import InventoryService
from app.services.range_mutator import RangeMutator
from app.utils.errors import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def june_range(db_session):
    return RangeMutator(db_session).upsert_range("L1", None, "2024-06-01", "2024-06-10", 5000, 2)


class TestBlocks:

    def test_block_and_resolve(self, db_session, june_range):
        service = InventoryService(db_session)
        block = service.block("L1", None, "2024-06-05", created_by="op-1", reason="maintenance")

        assert block.created_by_operator_id == "op-1"
        assert block.reason == "maintenance"
        calendar = AvailabilityResolver(db_session).resolve("L1")
        assert calendar["2024-06-05"].available is False
        assert calendar["2024-06-05"].source == SOURCE_BLOCKED

    @pytest.mark.parametrize("created_by", [None, "", "   "])
    def test_block_requires_operator(self, db_session, created_by):
        with pytest.raises(ValidationError):
            InventoryService(db_session).block("L1", None, "2024-06-05", created_by=created_by)
        assert db_session.query(BlockedDate).count() == 0

    def test_block_is_idempotent(self, db_session):
        service = InventoryService(db_session)
        first = service.block("L1", None, "2024-06-05", created_by="op-1")
        second = service.block("L1", None, "2024-06-05", created_by="op-2")

        assert first.id == second.id
        assert db_session.query(BlockedDate).count() == 1

    def test_slot_only_feeds_default_reason(self, db_session):
        block = InventoryService(db_session).block(
            "L1", None, "2024-06-05", created_by="op-1", slot_definition_id="morning"
        )
        assert block.reason == "Blocked for slot morning"
        assert block.scope_key == "L1||"

    def test_unblock(self, db_session, june_range):
        service = InventoryService(db_session)
        service.block("L1", None, "2024-06-05", created_by="op-1")

        assert service.unblock("L1", None, "2024-06-05") == 1
        assert AvailabilityResolver(db_session).resolve("L1")["2024-06-05"].available is True

    def test_unblock_free_date_is_noop(self, db_session, june_range):
        """Unblocking a date that was never blocked leaves every calendar entry as it was"""
        service = InventoryService(db_session)
        service.block("L1", None, "2024-06-02", created_by="op-1")
        service.upsert_override("L1", None, "2024-06-08", price=7000)
        resolver = AvailabilityResolver(db_session)
        before = {key: entry.to_dict() for key, entry in resolver.resolve("L1").items()}

        assert service.unblock("L1", None, "2024-06-05") == 0

        after = {key: entry.to_dict() for key, entry in resolver.resolve("L1").items()}
        assert after == before
        assert after["2024-06-02"]["source"] == SOURCE_BLOCKED
        assert db_session.query(BlockedDate).count() == 1

    def test_unblock_respects_variant(self, db_session):
        service = InventoryService(db_session)
        service.block("L1", "blue", "2024-06-05", created_by="op-1")

        assert service.unblock("L1", None, "2024-06-05") == 0
        assert db_session.query(BlockedDate).count() == 1

    def test_list_blocks(self, db_session):
        service = InventoryService(db_session)
        for day in ("2024-06-07", "2024-06-01", "2024-07-01"):
            service.block("L1", None, day, created_by="op-1")

        june = service.list_blocks("L1", start="2024-06-01", end="2024-06-30")
        assert [b.blocked_date for b in june] == [date(2024, 6, 1), date(2024, 6, 7)]


class TestOverrides:

    def test_create_price_only(self, db_session, june_range):
        override = InventoryService(db_session).upsert_override("L1", None, "2024-06-03", price=7000)

        assert override.price == 7000
        assert override.total_capacity == 0
        assert override.available_count == 0
        assert override.date_range_id == june_range.id
        assert override.trigger_type == TriggerType.SELLER_UPDATE.value

    def test_create_total_only_starts_full(self, db_session, june_range):
        override = InventoryService(db_session).upsert_override("L1", None, "2024-06-03", total_capacity=4)
        assert override.total_capacity == 4
        assert override.available_count == 4
        assert override.price is None

        entry = AvailabilityResolver(db_session).resolve("L1")["2024-06-03"]
        assert entry.available is True
        assert entry.price == 5000

    def test_patch_keeps_unsupplied_fields(self, db_session, june_range):
        service = InventoryService(db_session)
        service.upsert_override("L1", None, "2024-06-03", price=7000, total_capacity=3, available_count=3)
        patched = service.upsert_override("L1", None, "2024-06-03", available_count=1)

        assert patched.price == 7000
        assert patched.total_capacity == 3
        assert patched.available_count == 1
        assert db_session.query(DailyOverride).count() == 1

        entry = AvailabilityResolver(db_session).resolve("L1")["2024-06-03"]
        assert entry.source == SOURCE_BOOKED
        assert entry.price == 7000

    def test_available_cannot_exceed_total(self, db_session, june_range):
        service = InventoryService(db_session)
        with pytest.raises(ValidationError):
            service.upsert_override("L1", None, "2024-06-03", total_capacity=2, available_count=3)

        service.upsert_override("L1", None, "2024-06-03", total_capacity=2)
        with pytest.raises(ValidationError):
            service.upsert_override("L1", None, "2024-06-03", available_count=5)
        assert db_session.query(DailyOverride).one().available_count == 2

    @pytest.mark.parametrize("field", ["price", "available_count", "total_capacity"])
    def test_negative_values_rejected(self, db_session, field):
        with pytest.raises(ValidationError):
            InventoryService(db_session).upsert_override("L1", None, "2024-06-03", **{field: -1})

    def test_override_without_range_is_unanchored(self, db_session):
        override = InventoryService(db_session).upsert_override("L1", None, "2024-09-01", price=4000)
        assert override.date_range_id is None
        assert AvailabilityResolver(db_session).resolve("L1")["2024-09-01"].price == 4000

    def test_create_available_only_takes_range_total(self, db_session, june_range):
        override = InventoryService(db_session).upsert_override("L1", None, "2024-06-03", available_count=1)

        assert override.total_capacity == 2
        assert override.available_count == 1
        entry = AvailabilityResolver(db_session).resolve("L1")["2024-06-03"]
        assert entry.source == SOURCE_BOOKED
        assert entry.remaining_count == 1

    def test_create_available_only_without_range(self, db_session):
        override = InventoryService(db_session).upsert_override("L1", None, "2024-09-01", available_count=3)

        assert override.total_capacity == 3
        assert override.available_count == 3

    def test_create_available_above_range_total(self, db_session, june_range):
        with pytest.raises(ValidationError):
            InventoryService(db_session).upsert_override("L1", None, "2024-06-03", available_count=5)
        assert db_session.query(DailyOverride).count() == 0

    def test_concurrent_create_patches_existing_row(self, db_session, june_range):
        """A create that loses the insert race re-reads and patches the stored row"""
        service = InventoryService(db_session)
        service.upsert_override("L1", None, "2024-06-03", price=7000, total_capacity=2)
        real_get = service.overrides.get
        calls = []

        def stale_get(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real_get(*args, **kwargs)

        with patch.object(service.overrides, "get", side_effect=stale_get):
            override = service.upsert_override("L1", None, "2024-06-03", price=8000)

        assert len(calls) == 2
        assert override.price == 8000
        assert override.total_capacity == 2
        assert db_session.query(DailyOverride).count() == 1

    def test_remove_override(self, db_session, june_range):
        service = InventoryService(db_session)
        service.upsert_override("L1", None, "2024-06-03", price=7000)

        assert service.remove_override("L1", None, "2024-06-03") == 1
        assert service.remove_override("L1", None, "2024-06-03") == 0
        assert AvailabilityResolver(db_session).resolve("L1")["2024-06-03"].price == 5000


class TestConsumeCapacity:

    def test_consume_creates_override_from_range(self, db_session, june_range):
        override = InventoryService(db_session).consume_capacity("L1", None, "2024-06-04")

        assert override.total_capacity == 2
        assert override.available_count == 1
        assert override.date_range_id == june_range.id
        assert override.trigger_type == TriggerType.BOOKING_CONSUMPTION.value

    def test_consume_until_sold_out(self, db_session, june_range):
        service = InventoryService(db_session)
        service.consume_capacity("L1", None, "2024-06-04")
        service.consume_capacity("L1", None, "2024-06-04")

        with pytest.raises(ConflictError):
            service.consume_capacity("L1", None, "2024-06-04")

        override = db_session.query(DailyOverride).one()
        assert override.available_count == 0
        entry = AvailabilityResolver(db_session).resolve("L1")["2024-06-04"]
        assert entry.available is False
        assert entry.remaining_count == 0

    def test_consume_more_than_remaining(self, db_session, june_range):
        with pytest.raises(ConflictError):
            InventoryService(db_session).consume_capacity("L1", None, "2024-06-04", units=3)
        assert db_session.query(DailyOverride).count() == 0

    def test_consume_after_price_only_override(self, db_session, june_range):
        service = InventoryService(db_session)
        service.upsert_override("L1", None, "2024-06-03", price=7000)
        assert AvailabilityResolver(db_session).resolve("L1")["2024-06-03"].available is True

        override = service.consume_capacity("L1", None, "2024-06-03")

        assert override.total_capacity == 2
        assert override.available_count == 1
        assert override.price == 7000
        assert override.trigger_type == TriggerType.BOOKING_CONSUMPTION.value

    def test_consume_uses_existing_override(self, db_session, june_range):
        service = InventoryService(db_session)
        service.upsert_override("L1", None, "2024-06-04", price=8000, total_capacity=5)
        override = service.consume_capacity("L1", None, "2024-06-04", units=2)

        assert override.available_count == 3
        assert override.price == 8000

    def test_consume_on_blocked_date(self, db_session, june_range):
        service = InventoryService(db_session)
        service.block("L1", None, "2024-06-04", created_by="op-1")
        with pytest.raises(ConflictError):
            service.consume_capacity("L1", None, "2024-06-04")

    def test_consume_without_range(self, db_session):
        with pytest.raises(NotFoundError):
            InventoryService(db_session).consume_capacity("L1", None, "2024-06-04")

    def test_consume_zero_units_rejected(self, db_session, june_range):
        with pytest.raises(ValidationError):
            InventoryService(db_session).consume_capacity("L1", None, "2024-06-04", units=0)
