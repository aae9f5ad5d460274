"""Shared fixtures: a pinned configuration and an in-memory stand-in for the
expenses backend so service tests never touch the network."""

from __future__ import annotations

from typing import Optional

import pytest

from api_client import ApiError
from config import get_settings
from schemas import ExpenseCreate, ExpenseRecord, SummaryView


@pytest.fixture(autouse=True)
def _pinned_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EXPENSES_TIMEZONE", "Asia/Jakarta")
    monkeypatch.setenv("EXPENSES_API_BASE_URL", "http://api.test")
    monkeypatch.delenv("EXPENSES_VALIDATE_AMOUNT", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeApi:
    def __init__(
        self,
        items: Optional[list[dict]] = None,
        summary: Optional[dict] = None,
    ) -> None:
        self.items = [ExpenseRecord.model_validate(item) for item in items or []]
        self.summary = SummaryView.model_validate(summary or {"total": 0})
        self.fail_list = False
        self.fail_summary = False
        self.fail_create = False
        self.list_calls: list[Optional[str]] = []
        self.summary_calls: list[tuple[int, int]] = []
        self.created: list[ExpenseCreate] = []

    async def list_expenses(self, category: Optional[str] = None) -> list[ExpenseRecord]:
        self.list_calls.append(category)
        if self.fail_list:
            raise ApiError("GET /api/expenses failed")
        if category:
            return [item for item in self.items if item.category == category]
        return list(self.items)

    async def get_summary(self, month: int, year: int) -> SummaryView:
        self.summary_calls.append((month, year))
        if self.fail_summary:
            raise ApiError("GET /api/summary failed")
        return self.summary

    async def create_expense(self, data: ExpenseCreate) -> None:
        if self.fail_create:
            raise ApiError("POST /api/expenses failed", status=500, detail="boom")
        self.created.append(data)
        self.items.append(
            ExpenseRecord(id=len(self.items) + 1, **data.to_payload())
        )


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi(
        items=[
            {"id": 1, "amount": 50000, "category": "Food & Drink", "date": "2024-06-01"},
            {"id": 2, "amount": 20000, "category": "Food & Drink", "date": "2024-07-01"},
            {"id": 3, "amount": 15000, "category": "Transportation", "date": "2024-06-20"},
        ],
        summary={"total": 65000, "per_category": {"Food & Drink": 50000, "Transportation": 15000}},
    )
