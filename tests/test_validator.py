"""Tests for input validation."""

from datetime import date
from decimal import Decimal

import pytest

from lifeledger.models.habit import Habit, HabitType
from lifeledger.models.transaction import TransactionCategory, TransactionKind
from lifeledger.validation import RecordValidator


@pytest.fixture
def validator():
    return RecordValidator()


class TestHabitValidation:
    def test_valid(self, validator):
        result = validator.validate_habit("Read", 3, HabitType.CHECK)
        assert result.is_valid
        assert result.error_count == 0

    def test_blank_title(self, validator):
        result = validator.validate_habit("   ", 3, "check")
        assert not result.is_valid
        assert result.issues[0].field == "title"

    @pytest.mark.parametrize("goal", [0, -1, 2.5, "abc", None])
    def test_bad_goal(self, validator, goal):
        result = validator.validate_habit("Read", goal, "check")
        assert [i.field for i in result.issues] == ["goal_per_week"]

    def test_unknown_type(self, validator):
        result = validator.validate_habit("Read", 3, "daily")
        assert result.issues[0].field == "type"


class TestLogValidation:
    def test_number_habit_needs_non_negative_value(self, validator):
        habit = Habit(title="Water", type=HabitType.NUMBER)
        assert not validator.validate_log(habit, None).is_valid
        assert not validator.validate_log(habit, -1).is_valid
        assert validator.validate_log(habit, 0).is_valid
        assert validator.validate_log(habit, 2).is_valid

    def test_check_habit_takes_no_value(self, validator):
        habit = Habit(title="Read", type=HabitType.CHECK)
        assert validator.validate_log(habit).is_valid
        assert not validator.validate_log(habit, 3).is_valid


class TestTransactionValidation:
    def test_valid(self, validator):
        result = validator.validate_transaction(
            TransactionKind.EXPENSE, TransactionCategory.FOOD, Decimal("12.30"), date(2024, 1, 1)
        )
        assert result.is_valid

    def test_accepts_raw_values(self, validator):
        result = validator.validate_transaction("income", "other-income", "5", date(2024, 1, 1))
        assert result.is_valid

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, "NaN"])
    def test_bad_amount(self, validator, amount):
        result = validator.validate_transaction("expense", "food", amount, date(2024, 1, 1))
        assert [i.field for i in result.issues] == ["amount"]

    @pytest.mark.parametrize("amount", [1e30, "1e30", Decimal("1000000000000")])
    def test_amount_too_large(self, validator, amount):
        result = validator.validate_transaction("income", "salary", amount, date(2024, 1, 1))
        [issue] = result.issues
        assert issue.field == "amount"
        assert issue.message.startswith("Amount must be less than")

    def test_largest_amount_accepted(self, validator):
        result = validator.validate_transaction(
            "income", "salary", "999999999999.99", date(2024, 1, 1)
        )
        assert result.is_valid

    @pytest.mark.parametrize("amount", [10.456, "0.001", Decimal("1.999")])
    def test_sub_cent_amount_reported(self, validator, amount):
        result = validator.validate_transaction("expense", "food", amount, date(2024, 1, 1))
        [issue] = result.issues
        assert issue.message == "Amount can have at most 2 decimal places"
        assert issue.suggested_fix.startswith("Use ")

    def test_trailing_zeros_are_whole_cents(self, validator):
        result = validator.validate_transaction("expense", "food", "10.500", date(2024, 1, 1))
        assert result.is_valid

    def test_category_must_match_kind(self, validator):
        result = validator.validate_transaction("income", "food", 10, date(2024, 1, 1))
        issue = result.issues[0]
        assert issue.issue_type == "mismatch"
        assert "Salary" in issue.suggested_fix

    def test_unknown_category_message_names_it(self, validator):
        result = validator.validate_transaction("expense", "pets", 10, date(2024, 1, 1))
        assert result.issues[0].message == "Unknown category: pets"

    def test_missing_date(self, validator):
        result = validator.validate_transaction("expense", "food", 10, None)
        assert result.issues[0].field == "date"

    def test_summary(self, validator):
        result = validator.validate_transaction("expense", "food", 0, None)
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌")
        assert "Amount must be greater than 0" in summary
        assert "Please choose a date" in summary
        assert result.error_count == 2
