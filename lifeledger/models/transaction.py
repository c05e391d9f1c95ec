"""
Finance Models for LifeLedger

DESIGN DECISION: Transaction kind and category are closed enums.
Every category belongs to exactly one kind, and a transaction whose
category does not match its kind is rejected at construction.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeledger.models.habit import new_record_id


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCategory(str, Enum):
    """Supported transaction categories, grouped by kind."""
    # Income
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"
    OTHER_INCOME = "other-income"
    # Expense
    FOOD = "food"
    TRANSPORT = "transport"
    HOUSING = "housing"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    SHOPPING = "shopping"
    OTHER_EXPENSE = "other-expense"

    @property
    def kind(self) -> TransactionKind:
        if self in INCOME_CATEGORIES:
            return TransactionKind.INCOME
        return TransactionKind.EXPENSE

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def for_kind(cls, kind: TransactionKind) -> list["TransactionCategory"]:
        return [category for category in cls if category.kind is kind]


INCOME_CATEGORIES = frozenset({
    TransactionCategory.SALARY,
    TransactionCategory.FREELANCE,
    TransactionCategory.INVESTMENT,
    TransactionCategory.OTHER_INCOME,
})

_CATEGORY_LABELS = {
    TransactionCategory.SALARY: "Salary",
    TransactionCategory.FREELANCE: "Freelance",
    TransactionCategory.INVESTMENT: "Investments",
    TransactionCategory.OTHER_INCOME: "Other income",
    TransactionCategory.FOOD: "Food",
    TransactionCategory.TRANSPORT: "Transport",
    TransactionCategory.HOUSING: "Housing",
    TransactionCategory.ENTERTAINMENT: "Entertainment",
    TransactionCategory.HEALTH: "Health",
    TransactionCategory.EDUCATION: "Education",
    TransactionCategory.SHOPPING: "Shopping",
    TransactionCategory.OTHER_EXPENSE: "Other expenses",
}


class Transaction(BaseModel):
    """A single dated income or expense entry."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_record_id)
    kind: TransactionKind
    category: TransactionCategory
    amount: Annotated[
        Decimal,
        Field(ge=0, decimal_places=2, description="Non-negative amount")
    ]
    description: str = Field(default="", max_length=500)
    date: date
    created_at: datetime = Field(default_factory=datetime.utcnow)
    owner_user_id: str = ""

    @model_validator(mode='after')
    def validate_category_kind(self) -> 'Transaction':
        if self.category.kind is not self.kind:
            raise ValueError(
                f"Category '{self.category.value}' is not a valid {self.kind.value} category"
            )
        return self

    @property
    def signed_amount(self) -> Decimal:
        """+amount for income, -amount for expense."""
        if self.kind is TransactionKind.INCOME:
            return self.amount
        return -self.amount
