"""
Core Data Models for Budget Tracker

These models define the strict schemas for the ledger:
1. Transaction - one income or expense entry
2. LedgerSummary - the derived balance/income/expense totals

DESIGN DECISION: Amounts are Decimal, never float.
Summing many two-decimal amounts as floats drifts (0.1 + 0.2 != 0.3);
with Decimal, balance == income + expense holds exactly.

DESIGN DECISION: The description is stored under the field name "text".
That is the name existing stored ledgers use, so the model reads and
writes it through an alias while code uses the clearer "description".
"""

from decimal import Decimal
from enum import Enum
from typing import Iterable

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from budget_tracker.formatting import (
    DEFAULT_CURRENCY_SYMBOL,
    format_amount,
    format_expense_total,
)
from budget_tracker.validation import parse_amount


class TransactionKind(str, Enum):
    """Which side of the ledger a transaction sits on."""
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(BaseModel):
    """
    A single ledger entry.

    Positive amounts are income, negative amounts are expenses.
    Zero is allowed and counts towards neither total.

    Transactions are immutable: the ledger only ever adds or removes them.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
    )

    id: int = Field(
        ...,
        ge=0,
        strict=True,
        description="Unique id, non-decreasing in creation order"
    )
    description: str = Field(
        ...,
        min_length=1,
        alias="text",
        description="What the money was for (plain text)"
    )
    amount: Decimal = Field(
        ...,
        description="Signed amount; positive is income, negative is expense"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: object) -> Decimal:
        """Accept the same amount inputs as the add form, finite only."""
        return parse_amount(v)

    @property
    def kind(self) -> TransactionKind:
        # Zero rows are shown on the income side
        if self.amount >= 0:
            return TransactionKind.INCOME
        return TransactionKind.EXPENSE

    def display_amount(self, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
        """Amount formatted for display, e.g. "-R1500.00"."""
        return format_amount(self.amount, currency_symbol)

    def to_record(self) -> dict:
        """Convert to the stored record shape: {id, text, amount}."""
        return {
            "id": self.id,
            "text": self.description,
            "amount": self.amount,
        }


class LedgerSummary(BaseModel):
    """
    Aggregates over the full transaction list.

    Always computed fresh from the transactions; never cached.
    """
    model_config = ConfigDict(frozen=True)

    balance: Decimal = Field(
        ...,
        description="Sum of all amounts"
    )
    income: Decimal = Field(
        ...,
        ge=0,
        description="Sum of positive amounts"
    )
    expense: Decimal = Field(
        ...,
        le=0,
        description="Sum of negative amounts"
    )
    transaction_count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions summed"
    )

    @model_validator(mode='after')
    def validate_balance(self) -> 'LedgerSummary':
        """Balance must equal income plus expense."""
        if self.balance != self.income + self.expense:
            raise ValueError("Balance must equal income plus expense")
        return self

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction]) -> 'LedgerSummary':
        """Compute totals over the given transactions."""
        income = Decimal(0)
        expense = Decimal(0)
        count = 0

        for tx in transactions:
            count += 1
            if tx.amount > 0:
                income += tx.amount
            elif tx.amount < 0:
                expense += tx.amount

        return cls(
            balance=income + expense,
            income=income,
            expense=expense,
            transaction_count=count,
        )

    def formatted(self, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> dict[str, str]:
        """
        Totals formatted for display.

        Returns:
            {"balance": "R3500.00", "income": "R5000.00", "expense": "-R1500.00"}
        """
        return {
            "balance": format_amount(self.balance, currency_symbol),
            "income": format_amount(self.income, currency_symbol),
            "expense": format_expense_total(self.expense, currency_symbol),
        }
