"""
Input Validation

Checks user input before anything is written:
- Habits need a non-blank title and a positive weekly goal
- Numeric habit logs need a value of zero or more
- Transactions need a positive amount in whole cents (below
  MAX_AMOUNT), a date, and a category that belongs to their kind

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the UI can show them immediately.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from lifeledger.models.habit import Habit, HabitType
from lifeledger.models.transaction import TransactionCategory, TransactionKind
from lifeledger.models.validation import ValidationIssue, ValidationResult


CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("1000000000000")


class RecordValidator:
    """Validates habit, log and transaction input."""

    def validate_habit(
        self,
        title: Optional[str],
        goal_per_week: Any,
        habit_type: Any,
    ) -> ValidationResult:
        issues = []

        if not title or not title.strip():
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Please enter a title",
            ))

        try:
            goal = int(goal_per_week)
            if goal != goal_per_week and not isinstance(goal_per_week, str):
                raise ValueError
        except (TypeError, ValueError):
            goal = None
        if goal is None or goal < 1:
            issues.append(ValidationIssue(
                field="goal_per_week",
                issue_type="invalid_value",
                message="Weekly goal must be a whole number of at least 1",
            ))

        try:
            HabitType(habit_type)
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Unknown habit type: {habit_type}",
            ))

        return ValidationResult(entity_type="habit", issues=issues)

    def validate_log(self, habit: Habit, value: Optional[float] = None) -> ValidationResult:
        issues = []

        if habit.type is HabitType.NUMBER:
            if value is None or value < 0:
                issues.append(ValidationIssue(
                    field="value",
                    issue_type="invalid_value",
                    message="Enter a number of 0 or more",
                ))
        elif habit.type is HabitType.CHECK:
            if value is not None:
                issues.append(ValidationIssue(
                    field="value",
                    issue_type="mismatch",
                    message="Check habits are logged as done, without a value",
                ))

        return ValidationResult(entity_type="habit_log", issues=issues)

    def validate_transaction(
        self,
        kind: Any,
        category: Any,
        amount: Any,
        on_date: Optional[date],
    ) -> ValidationResult:
        issues = []

        try:
            kind = TransactionKind(kind)
        except ValueError:
            kind = None
            issues.append(ValidationIssue(
                field="kind",
                issue_type="invalid_value",
                message="Type must be income or expense",
            ))

        try:
            category = TransactionCategory(category)
        except ValueError:
            issues.append(ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Unknown category: {category}",
            ))
            category = None

        if kind is not None and category is not None and category.kind is not kind:
            issues.append(ValidationIssue(
                field="category",
                issue_type="mismatch",
                message=f"'{category.label}' is not a valid {kind.value} category",
                suggested_fix=f"Choose one of: {', '.join(c.label for c in TransactionCategory.for_kind(kind))}",
            ))

        try:
            parsed = Decimal(str(amount)) if amount is not None else None
        except InvalidOperation:
            parsed = None
        if parsed is None or not parsed.is_finite() or parsed <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than 0",
            ))
        elif parsed >= MAX_AMOUNT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be less than {MAX_AMOUNT:,}",
            ))
        elif parsed != parsed.quantize(CENT):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount can have at most 2 decimal places",
                suggested_fix=f"Use {parsed.quantize(CENT)}",
            ))

        if on_date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please choose a date",
            ))

        return ValidationResult(entity_type="transaction", issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """What we show next to the form."""
        if result.is_valid:
            return "✅ Saved."

        lines = ["❌ Please fix the following:"]
        for issue in result.issues:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")
        return "\n".join(lines)
