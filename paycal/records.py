from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from paycal.schedule_engine import MAX_CUSTOM_DAYS, MAX_TWICE_MONTHLY_DAYS, PaySchedule

logger = logging.getLogger(__name__)

INCOME_TYPE = "income"
EXPENSE_TYPE = "expense"


class PayScheduleRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    cadence: str
    last_paid_date: str = Field(alias="lastPaidDate")
    monthly_days: list[int] | None = Field(default=None, alias="monthlyDays")
    custom_days: list[int] | None = Field(default=None, alias="customDays")

    @field_validator("last_paid_date", mode="before")
    @classmethod
    def stringify_last_paid_date(cls, value: Any) -> Any:
        # Parsed lazily so a corrupt anchor only fails the computations that need it.
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value

    @field_validator("monthly_days", "custom_days")
    @classmethod
    def check_days_of_month(
        cls, value: list[int] | None, info: ValidationInfo
    ) -> list[int] | None:
        if value is None:
            return value
        limit = MAX_CUSTOM_DAYS if info.field_name == "custom_days" else MAX_TWICE_MONTHLY_DAYS
        if len(value) > limit:
            raise ValueError(f"At most {limit} days of month are allowed.")
        for day in value:
            if not 1 <= day <= 31:
                raise ValueError("Days of month must be between 1 and 31.")
        return value

    def to_schedule(self) -> PaySchedule:
        normalized = "".join(ch for ch in self.cadence.lower() if ch.isalnum())
        if normalized == "custom":
            days = self.custom_days or []
        else:
            days = self.monthly_days or []
        return PaySchedule(
            anchor_date=self.last_paid_date,
            cadence=self.cadence,
            days_of_month=tuple(days),
        )


class TransactionRecord(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    id: str
    amount: Decimal = Decimal("0")
    date: datetime
    type: str = INCOME_TYPE
    is_recurring: bool = Field(default=False, alias="isRecurring")
    pay_schedule: PayScheduleRecord | None = Field(default=None, alias="paySchedule")
    name: str | None = None
    category: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def widen_plain_date(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day)
        return value

    @field_validator("date")
    @classmethod
    def drop_timezone(cls, value: datetime) -> datetime:
        return value.replace(tzinfo=None)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_income(self) -> bool:
        return self.type == INCOME_TYPE

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE_TYPE

    def to_schedule(self) -> PaySchedule | None:
        if not self.is_recurring or self.pay_schedule is None:
            return None
        return self.pay_schedule.to_schedule()


def parse_transactions(
    raw_transactions: Iterable[TransactionRecord | Mapping[str, Any]],
) -> List[TransactionRecord]:
    """Validate each record on its own; invalid records are logged and skipped."""
    parsed: List[TransactionRecord] = []
    for raw in raw_transactions:
        if isinstance(raw, TransactionRecord):
            parsed.append(raw)
            continue
        try:
            parsed.append(TransactionRecord.model_validate(raw))
        except ValidationError as exc:
            record_id = raw.get("id") if isinstance(raw, Mapping) else None
            logger.warning(
                "Skipping invalid transaction %s: %d validation error(s)",
                record_id,
                exc.error_count(),
            )
    return parsed
