"""结余计算与数值转换"""

import logging
from decimal import Decimal

import pytest

from app.services.balance import (
    CategoryType,
    coerce_number,
    compute_blazer_stock,
    compute_closing,
    split_signed_quantity,
)
from app.services.categories import get_variant


class TestCoerceNumber:

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_values_are_zero(self, value):
        assert coerce_number(value) == Decimal("0")

    def test_numeric_strings_are_parsed(self):
        assert coerce_number(" 12.50 ") == Decimal("12.50")
        assert coerce_number("-3") == Decimal("-3")

    def test_ints_and_floats(self):
        assert coerce_number(7) == Decimal("7")
        assert coerce_number(2.5) == Decimal("2.5")

    @pytest.mark.parametrize("value", ["abc", float("nan"), float("inf"), Decimal("NaN"), "NaN", True, object()])
    def test_non_numeric_fails_closed_with_warning(self, value, caplog):
        with caplog.at_level(logging.WARNING, logger="app.services.balance"):
            result = coerce_number(value, "addins")
        assert result == Decimal("0")
        assert result.is_finite()
        assert any("addins" in r.getMessage() for r in caplog.records)


class TestComputeClosing:

    def test_kit(self):
        assert compute_closing(CategoryType.KIT, 10, 5, 3) == Decimal("12")

    def test_game_can_go_negative(self):
        assert compute_closing(CategoryType.GAME, 4, 0, 10) == Decimal("-6")

    def test_expense_with_negative_overspend(self):
        # 上月结余, 固定额度, 支出
        assert compute_closing(CategoryType.EXPENSE, -200, 1000, 300) == Decimal("500")

    def test_missing_inputs_treated_as_zero(self):
        assert compute_closing(CategoryType.KIT, None, "", 4) == Decimal("-4")

    def test_garbage_input_does_not_produce_nan(self):
        result = compute_closing(CategoryType.GAME, "ten", 5, None)
        assert result == Decimal("5")

    def test_idempotent(self):
        args = (CategoryType.KIT, Decimal("10.5"), "2", 1)
        assert compute_closing(*args) == compute_closing(*args)

    def test_accepts_plain_string_type(self):
        assert compute_closing("expense", 0, 1000, 1200) == Decimal("-200")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            compute_closing("books", 1, 1, 1)


class TestBlazerStock:

    def test_aggregates_full_history(self):
        history = [
            {"added": 20, "sent": 0},
            {"added": 0, "sent": 5},
            {"added": 3, "sent": 0},
        ]
        assert compute_blazer_stock(history) == Decimal("18")

    def test_empty_history(self):
        assert compute_blazer_stock([]) == Decimal("0")

    @pytest.mark.parametrize("quantity, expected", [
        (20, (Decimal("20"), Decimal("20"), Decimal("0"))),
        (-5, (Decimal("-5"), Decimal("0"), Decimal("5"))),
        (0, (Decimal("0"), Decimal("0"), Decimal("0"))),
        ("oops", (Decimal("0"), Decimal("0"), Decimal("0"))),
    ])
    def test_split_signed_quantity(self, quantity, expected):
        assert split_signed_quantity(quantity) == expected

    def test_form_preview_uses_signed_quantity(self):
        variant = get_variant(CategoryType.BLAZER)
        form = {"gender": "Male", "size": "M-L", "in_office_stock": Decimal("18"), "quantity": -4}
        assert variant.preview_closing(form) == Decimal("14")


class TestCategoryKeys:

    def test_trigger_key_uses_only_key_fields(self):
        variant = get_variant(CategoryType.BLAZER)
        form = {"gender": "Male", "size": "M-L", "quantity": 9, "remarks": "x"}
        assert variant.trigger_key(form) == "Male-M-L"

    @pytest.mark.parametrize("form", [
        {"gender": "Male", "size": None},
        {"gender": "", "size": "M-L"},
        {"gender": "  ", "size": "M-L"},
        {},
    ])
    def test_incomplete_blazer_key(self, form):
        assert get_variant(CategoryType.BLAZER).category_key(form) is None

    def test_normalize_key_shapes(self):
        kit = get_variant(CategoryType.KIT)
        blazer = get_variant(CategoryType.BLAZER)
        assert kit.normalize_key("Pencils") == ("Pencils",)
        assert kit.normalize_key({"item_name": " Pencils "}) == ("Pencils",)
        assert blazer.normalize_key(("Male", "M-L")) == ("Male", "M-L")
        assert blazer.normalize_key("Male-M-L") is None
        assert blazer.normalize_key(("Male",)) is None

    def test_every_category_type_has_a_variant(self):
        for category_type in CategoryType:
            assert get_variant(category_type).category_type is category_type
