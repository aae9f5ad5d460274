import datetime as dt
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import CATEGORIES


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: Any = None
    # Raw value from the server; may not be numeric.
    amount: Any = None
    category: Any = None
    date: Any = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    merchant: Optional[str] = None


class ExpenseListOut(BaseModel):
    items: list[ExpenseRecord] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _items_default(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class SummaryView(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: float = 0
    per_category: dict[str, float] = Field(default_factory=dict)

    @field_validator("per_category", mode="before")
    @classmethod
    def _per_category_default(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value


class ExpenseCreate(BaseModel):
    # None is sent as null when an unparsable amount is let through.
    amount: Optional[float] = None
    category: str
    date: dt.date
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    merchant: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def _nan_to_none(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and math.isnan(value):
            return None
        return value

    @field_validator("notes", "payment_method", "merchant", mode="before")
    @classmethod
    def _blank_to_absent(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "amount": self.amount,
            "category": self.category,
            "date": self.date.isoformat(),
        }
        for key in ("notes", "payment_method", "merchant"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str = ""
    month: int = Field(..., ge=1, le=12)
    year: int


class FormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: str = ""
    category: str = CATEGORIES[0]
    date: str
    payment_method: str = ""
    merchant: str = ""
    notes: str = ""

    def cleared(self) -> "FormState":
        return self.model_copy(update={"amount": "", "notes": "", "merchant": ""})
