"""期初结转解析"""

import asyncio
import logging
from decimal import Decimal

import pytest

from app.services.balance import CategoryType
from app.services.carry_forward import CarryForwardResolver, OpeningResult
from app.services.record_service import RecordService
from app.services.record_store import RecordStore
from app.services.activity_logger import ActivityLogger
from tests.conftest import run


def resolve(store, category_type, key, timeout=1.0) -> OpeningResult:
    return run(CarryForwardResolver(store, timeout=timeout).resolve_opening_value(category_type, key))


class TestScenarios:

    def test_kit_carries_previous_closing(self, fake_store):
        fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=10, addins=5, takeouts=3)
        result = resolve(fake_store, CategoryType.KIT, "Pencils")
        assert result.opening == Decimal("12")
        assert result.source == "carried"
        assert result.field_name == "opening_balance"
        assert result.resets == {"addins": Decimal("0"), "takeouts": Decimal("0")}

    def test_game_negative_balance_is_clamped(self, fake_store):
        fake_store.add(CategoryType.GAME, game_details="Chess", previous_stock=4, adding=0, sent=10)
        result = resolve(fake_store, CategoryType.GAME, "Chess")
        assert result.opening == Decimal("0")
        assert result.source == "carried"

    def test_blazer_aggregates_history(self, fake_store):
        for quantity, added, sent in ((20, 20, 0), (-5, 0, 5), (3, 3, 0)):
            fake_store.add(CategoryType.BLAZER, gender="Male", size="M-L",
                           quantity=quantity, added=added, sent=sent, in_office_stock=999)
        result = resolve(fake_store, CategoryType.BLAZER, ("Male", "M-L"))
        assert result.opening == Decimal("18")
        assert result.field_name == "in_office_stock"
        assert result.resets == {"quantity": Decimal("0")}

    def test_blazer_negative_aggregate_is_clamped(self, fake_store):
        fake_store.add(CategoryType.BLAZER, gender="Female", size="F-S", added=0, sent=4)
        assert resolve(fake_store, CategoryType.BLAZER, ("Female", "F-S")).opening == Decimal("0")

    def test_expense_overspend_is_not_clamped(self, fake_store):
        fake_store.add(CategoryType.EXPENSE, expense_category="Stationery",
                       fixed_amount=1000, previous_month_overspend=0, expenses=1200)
        result = resolve(fake_store, CategoryType.EXPENSE, "Stationery")
        assert result.opening == Decimal("-200")
        assert result.field_name == "previous_month_overspend"
        assert result.source == "carried"

    def test_new_item_has_nothing_to_carry(self, fake_store):
        fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=1)
        result = resolve(fake_store, CategoryType.KIT, "NewWidget")
        assert result.opening == Decimal("0")
        assert result.source == "none"


@pytest.mark.parametrize("category_type, key", [
    (CategoryType.KIT, "Anything"),
    (CategoryType.GAME, "Anything"),
    (CategoryType.BLAZER, ("Male", "M-XS")),
    (CategoryType.EXPENSE, "Anything"),
])
def test_no_history_for_every_type(fake_store, category_type, key):
    result = resolve(fake_store, category_type, key)
    assert (result.opening, result.source) == (Decimal("0"), "none")


def test_latest_record_wins(fake_store):
    fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=100)
    fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=7, addins=1, takeouts=0)
    assert resolve(fake_store, CategoryType.KIT, "Pencils").opening == Decimal("8")


def test_stored_closing_is_not_trusted(fake_store):
    fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=10,
                   addins=5, takeouts=3, closing_balance=500)
    assert resolve(fake_store, CategoryType.KIT, "Pencils").opening == Decimal("12")


@pytest.mark.parametrize("category_type, key", [
    (CategoryType.KIT, ""),
    (CategoryType.KIT, None),
    (CategoryType.GAME, "   "),
    (CategoryType.BLAZER, ("Male", "")),
    (CategoryType.BLAZER, {"gender": "Male"}),
    (CategoryType.EXPENSE, None),
])
def test_incomplete_key_short_circuits(fake_store, category_type, key):
    result = resolve(fake_store, category_type, key)
    assert result.source == "none"
    assert result.opening is None
    assert fake_store.calls == []


def test_store_failure_yields_none(fake_store, caplog):
    fake_store.add(CategoryType.KIT, item_name="Pencils", opening_balance=10)
    fake_store.fail_with = ConnectionError("store unavailable")
    with caplog.at_level(logging.WARNING, logger="app.services.carry_forward"):
        result = resolve(fake_store, CategoryType.KIT, "Pencils")
    assert result.source == "none"
    assert result.opening == Decimal("0")
    assert any("store unavailable" in r.getMessage() for r in caplog.records)


def test_store_timeout_yields_none(fake_store):
    fake_store.add(CategoryType.GAME, game_details="Chess", previous_stock=3)
    fake_store.delays[("Chess",)] = 1.0
    result = resolve(fake_store, CategoryType.GAME, "Chess", timeout=0.05)
    assert result.source == "none"


def test_resolver_against_database(session_factory):
    async def scenario():
        async with session_factory() as db:
            service = RecordService(db, ActivityLogger(session_factory))
            await service.create_record(CategoryType.KIT, {
                "item_name": "Pencils", "opening_balance": 10, "addins": 5, "takeouts": 3,
            })
            for quantity in (20, -5, 3):
                await service.create_record(CategoryType.BLAZER, {
                    "gender": "Male", "size": "M-L", "quantity": quantity,
                })
            await service.create_record(CategoryType.EXPENSE, {
                "expense_category": "Stationery", "fixed_amount": 1000,
                "previous_month_overspend": 0, "expenses": 1200,
            })

        resolver = CarryForwardResolver(RecordStore(session_factory))
        return (
            await resolver.resolve_opening_value(CategoryType.KIT, "Pencils"),
            await resolver.resolve_opening_value(CategoryType.BLAZER, ("Male", "M-L")),
            await resolver.resolve_opening_value(CategoryType.EXPENSE, "Stationery"),
            await resolver.resolve_opening_value(CategoryType.KIT, "NewWidget"),
        )

    kit, blazer, expense, missing = run(scenario())
    assert kit.opening == Decimal("12")
    assert blazer.opening == Decimal("18")
    assert expense.opening == Decimal("-200")
    assert missing.source == "none"


def test_padded_item_name_is_stored_trimmed(session_factory):
    async def scenario():
        async with session_factory() as db:
            service = RecordService(db, ActivityLogger(session_factory))
            record = await service.create_record(CategoryType.KIT, {
                "item_name": "Pencils ", "opening_balance": 10, "addins": 5, "takeouts": 3,
            })
            await service.create_record(CategoryType.BLAZER, {
                "gender": " Male", "size": "M-L ", "quantity": 4,
            })

        resolver = CarryForwardResolver(RecordStore(session_factory))
        return (
            record.item_name,
            await resolver.resolve_opening_value(CategoryType.KIT, "Pencils "),
            await resolver.resolve_opening_value(CategoryType.KIT, "Pencils"),
            await resolver.resolve_opening_value(CategoryType.BLAZER, ("Male", "M-L")),
        )

    stored, padded, plain, blazer = run(scenario())
    assert stored == "Pencils"
    assert (padded.opening, padded.source) == (Decimal("12"), "carried")
    assert plain.opening == Decimal("12")
    assert blazer.opening == Decimal("4")


def test_renamed_item_is_stored_trimmed(session_factory):
    async def scenario():
        async with session_factory() as db:
            service = RecordService(db, ActivityLogger(session_factory))
            record = await service.create_record(CategoryType.GAME, {
                "game_details": "Chess", "previous_stock": 2, "adding": 1,
            })
            await service.update_record(CategoryType.GAME, record.id, {"game_details": "  Carrom  "})

        resolver = CarryForwardResolver(RecordStore(session_factory))
        return await resolver.resolve_opening_value(CategoryType.GAME, "Carrom")

    result = run(scenario())
    assert (result.opening, result.source) == (Decimal("3"), "carried")
