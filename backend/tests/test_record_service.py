"""记录写入：派生字段始终与组成字段一致"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import ActivityLog, BlazerRecord
from app.services.activity_logger import ActivityLogger
from app.services.balance import CategoryType
from app.services.exceptions import RecordNotFoundError, RecordValidationError, RecordWriteError
from app.services.record_service import RecordService
from tests.conftest import run


def with_service(session_factory, fn, activity_logger=None):
    async def scenario():
        async with session_factory() as db:
            service = RecordService(db, activity_logger or ActivityLogger(session_factory))
            return await fn(service)
    return run(scenario())


def fetch_logs(session_factory):
    async def scenario():
        async with session_factory() as db:
            result = await db.execute(select(ActivityLog).order_by(ActivityLog.id))
            return list(result.scalars().all())
    return run(scenario())


def blazer_rows(session_factory, gender="Male", size="M-L"):
    async def scenario():
        async with session_factory() as db:
            result = await db.execute(
                select(BlazerRecord)
                .where(BlazerRecord.gender == gender, BlazerRecord.size == size)
                .order_by(BlazerRecord.id)
            )
            return list(result.scalars().all())
    return run(scenario())


class BrokenSessionFactory:
    """无法打开会话的会话工厂"""

    def __call__(self):
        return self

    async def __aenter__(self):
        raise ConnectionError("activity store offline")

    async def __aexit__(self, *exc):
        return False


class TestKitWrites:

    def test_create_computes_closing_and_ignores_supplied_value(self, session_factory):
        record = with_service(session_factory, lambda s: s.create_record(CategoryType.KIT, {
            "item_name": "Pencils", "opening_balance": 10, "addins": 5, "takeouts": 3,
            "closing_balance": 999,
        }))
        assert record.closing_balance == Decimal("12")

    def test_non_numeric_input_is_saved_as_zero(self, session_factory):
        record = with_service(session_factory, lambda s: s.create_record(CategoryType.KIT, {
            "item_name": "Pencils", "opening_balance": "lots", "addins": 2, "takeouts": None,
        }))
        assert record.opening_balance == Decimal("0")
        assert record.closing_balance == Decimal("2")

    def test_update_recomputes_closing(self, session_factory):
        record = with_service(session_factory, lambda s: s.create_record(CategoryType.KIT, {
            "item_name": "Pencils", "opening_balance": 10, "addins": 5, "takeouts": 3,
        }))
        updated = with_service(session_factory, lambda s: s.update_record(
            CategoryType.KIT, record.id, {"takeouts": 8, "closing_balance": 1}
        ))
        assert updated.takeouts == Decimal("8")
        assert updated.closing_balance == Decimal("7")

    def test_missing_key_is_rejected(self, session_factory):
        with pytest.raises(RecordValidationError):
            with_service(session_factory, lambda s: s.create_record(CategoryType.KIT, {
                "item_name": "  ", "opening_balance": 1,
            }))

    def test_unknown_record(self, session_factory):
        with pytest.raises(RecordNotFoundError):
            with_service(session_factory, lambda s: s.update_record(CategoryType.KIT, 42, {"addins": 1}))

    def test_rejected_write_keeps_payload_and_logs_error(self, session_factory):
        payload = {"item_name": "Pencils", "date": "not-a-date", "opening_balance": 3}
        with pytest.raises(RecordWriteError) as excinfo:
            with_service(session_factory, lambda s: s.create_record(CategoryType.KIT, payload))
        assert excinfo.value.payload["item_name"] == "Pencils"

        logs = fetch_logs(session_factory)
        assert [log.action for log in logs] == ["create_error"]
        assert logs[0].error_details["message"]


class TestExpenseWrites:

    def test_remaining_balance_uses_overspend(self, session_factory):
        record = with_service(session_factory, lambda s: s.create_record(CategoryType.EXPENSE, {
            "expense_category": "Stationery", "fixed_amount": 1000,
            "previous_month_overspend": -200, "expenses": 300,
        }))
        assert record.remaining_balance == Decimal("500")
        assert not record.is_overspent


class TestBlazerWrites:

    def create_history(self, session_factory, quantities=(20, -5, 3)):
        async def fn(service):
            records = []
            for quantity in quantities:
                records.append(await service.create_record(CategoryType.BLAZER, {
                    "gender": "Male", "size": "M-L", "quantity": quantity,
                }))
            return records
        return with_service(session_factory, fn)

    def test_running_totals_on_create(self, session_factory):
        records = self.create_history(session_factory)
        assert [r.in_office_stock for r in records] == [Decimal("20"), Decimal("15"), Decimal("18")]
        assert (records[1].added, records[1].sent) == (Decimal("0"), Decimal("5"))

    def test_edit_recomputes_chain(self, session_factory):
        records = self.create_history(session_factory)
        with_service(session_factory, lambda s: s.update_record(
            CategoryType.BLAZER, records[0].id, {"quantity": 10}
        ))
        rows = blazer_rows(session_factory)
        assert [r.in_office_stock for r in rows] == [Decimal("10"), Decimal("5"), Decimal("8")]
        assert (rows[0].added, rows[0].sent) == (Decimal("10"), Decimal("0"))

    def test_edit_added_and_sent_updates_quantity(self, session_factory):
        records = self.create_history(session_factory)
        updated = with_service(session_factory, lambda s: s.update_record(
            CategoryType.BLAZER, records[1].id, {"sent": 7}
        ))
        assert updated.quantity == Decimal("-7")
        assert [r.in_office_stock for r in blazer_rows(session_factory)][-1] == Decimal("16")

    def test_negative_sent_rejected(self, session_factory):
        records = self.create_history(session_factory)
        with pytest.raises(RecordValidationError):
            with_service(session_factory, lambda s: s.update_record(
                CategoryType.BLAZER, records[1].id, {"sent": -1}
            ))

    def test_gender_and_size_are_fixed(self, session_factory):
        records = self.create_history(session_factory, quantities=(4,))
        with pytest.raises(RecordValidationError):
            with_service(session_factory, lambda s: s.update_record(
                CategoryType.BLAZER, records[0].id, {"size": "M-XL"}
            ))

    def test_delete_recomputes_chain(self, session_factory):
        records = self.create_history(session_factory)
        with_service(session_factory, lambda s: s.delete_record(CategoryType.BLAZER, records[0].id))
        assert [r.in_office_stock for r in blazer_rows(session_factory)] == [Decimal("-5"), Decimal("-2")]

    def test_other_sizes_untouched(self, session_factory):
        self.create_history(session_factory)
        with_service(session_factory, lambda s: s.create_record(CategoryType.BLAZER, {
            "gender": "Female", "size": "F-S", "quantity": 8,
        }))
        assert blazer_rows(session_factory, "Female", "F-S")[0].in_office_stock == Decimal("8")
        assert blazer_rows(session_factory)[-1].in_office_stock == Decimal("18")


class TestActivityLog:

    def test_writes_are_logged_with_before_and_after(self, session_factory):
        record = with_service(session_factory, lambda s: s.create_record(CategoryType.BLAZER, {
            "gender": "Male", "size": "M-L", "quantity": 5,
        }))
        with_service(session_factory, lambda s: s.update_record(
            CategoryType.BLAZER, record.id, {"remarks": "recount"}
        ))
        with_service(session_factory, lambda s: s.delete_record(CategoryType.BLAZER, record.id))

        logs = fetch_logs(session_factory)
        assert [log.action for log in logs] == ["create", "update", "delete"]
        assert all(log.record_id == record.id for log in logs)
        assert "Added 5 Male - L Blazers" in logs[0].description
        assert logs[1].old_value["remarks"] is None
        assert logs[1].new_value["remarks"] == "recount"
        assert logs[2].module_name == "Blazer Inventory"

    def test_log_failure_does_not_block_write(self, session_factory):
        record = with_service(
            session_factory,
            lambda s: s.create_record(CategoryType.GAME, {
                "game_details": "Chess", "previous_stock": 4, "adding": 2, "sent": 1,
            }),
            activity_logger=ActivityLogger(BrokenSessionFactory()),
        )
        assert record.id is not None
        assert record.in_stock == Decimal("5")
        assert fetch_logs(session_factory) == []
