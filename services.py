from __future__ import annotations

import asyncio
import logging
import math
from typing import Optional, Protocol

from amounts import normalize_amount_input
from api_client import ApiError
from config import get_settings
from models import CATEGORIES, LOAD_ERROR_MESSAGE, SUBMIT_ERROR_MESSAGE
from periods import MonthlyView, MonthPartitioner, today_local
from schemas import ExpenseCreate, ExpenseRecord, FilterState, FormState, SummaryView
from state import (
    AppState,
    ErrorSet,
    ExpensesFailed,
    ExpensesLoaded,
    ExpensesRequested,
    FilterChanged,
    FormChanged,
    FormCleared,
    Store,
    SummaryLoaded,
    SummaryRequested,
)

logger = logging.getLogger(__name__)


class ExpensesApi(Protocol):
    async def list_expenses(
        self, category: Optional[str] = None
    ) -> list[ExpenseRecord]: ...

    async def get_summary(self, month: int, year: int) -> SummaryView: ...

    async def create_expense(self, data: ExpenseCreate) -> None: ...


class InvalidAmount(ValueError):
    pass


def initial_state() -> AppState:
    today = today_local()
    return AppState(
        form=FormState(category=CATEGORIES[0], date=today.isoformat()),
        filter=FilterState(category="", month=today.month, year=today.year),
    )


class ExpenseListService:
    def __init__(self, store: Store, api: ExpensesApi) -> None:
        self.store = store
        self.api = api

    async def refresh(self, category: Optional[str] = None) -> None:
        if category is None:
            category = self.store.state.filter.category
        generation = self.store.next_generation("expenses")
        self.store.dispatch(ExpensesRequested(generation))
        try:
            items = await self.api.list_expenses(category or None)
        except ApiError as exc:
            logger.warning(
                f"expenses_refresh_failed: category={category!r} generation={generation} error={exc}"
            )
            self.store.dispatch(ExpensesFailed(generation, LOAD_ERROR_MESSAGE))
            return
        self.store.dispatch(ExpensesLoaded(generation, tuple(items)))
        if generation != self.store.state.expenses_generation:
            logger.debug(f"expenses_refresh_stale: generation={generation}")
            return
        logger.info(
            f"expenses_refresh: category={category!r} generation={generation} count={len(items)}"
        )


class SummaryService:
    def __init__(self, store: Store, api: ExpensesApi) -> None:
        self.store = store
        self.api = api

    async def refresh(
        self, month: Optional[int] = None, year: Optional[int] = None
    ) -> None:
        current = self.store.state.filter
        month = current.month if month is None else month
        year = current.year if year is None else year
        generation = self.store.next_generation("summary")
        self.store.dispatch(SummaryRequested(generation))
        try:
            summary = await self.api.get_summary(month, year)
        except ApiError as exc:
            # Keep showing whatever summary we had.
            logger.warning(
                f"summary_refresh_failed: month={month} year={year} error={exc}"
            )
            return
        self.store.dispatch(SummaryLoaded(generation, summary))
        logger.info(f"summary_refresh: month={month} year={year} total={summary.total}")


class SubmissionService:
    def __init__(
        self,
        store: Store,
        api: ExpensesApi,
        expenses: ExpenseListService,
        summary: SummaryService,
    ) -> None:
        self.store = store
        self.api = api
        self.expenses = expenses
        self.summary = summary
        self.settings = get_settings()

    def build_payload(self, form: FormState) -> ExpenseCreate:
        amount = normalize_amount_input(form.amount)
        if self.settings.validate_amount and (math.isnan(amount) or amount < 0):
            raise InvalidAmount(f"Invalid amount: {form.amount!r}")
        return ExpenseCreate(
            amount=amount,
            category=form.category,
            date=form.date,
            notes=form.notes,
            payment_method=form.payment_method,
            merchant=form.merchant,
        )

    async def submit(self) -> bool:
        self.store.dispatch(ErrorSet(""))
        form = self.store.state.form
        try:
            payload = self.build_payload(form)
            await self.api.create_expense(payload)
        except (ApiError, ValueError) as exc:
            detail = getattr(exc, "detail", "") or str(exc)
            logger.warning(f"expense_submit_failed: detail={detail!r}")
            self.store.dispatch(ErrorSet(SUBMIT_ERROR_MESSAGE))
            return False
        self.store.dispatch(FormCleared())
        logger.info(
            f"expense_submitted: category={payload.category!r} date={payload.date} amount={payload.amount}"
        )
        await asyncio.gather(self.expenses.refresh(), self.summary.refresh())
        return True


class ExpenseTracker:
    """Entry point tying the state container to the fetch services."""

    def __init__(self, api: ExpensesApi, store: Optional[Store] = None) -> None:
        self.api = api
        self.store = store or Store(initial_state())
        self.expenses = ExpenseListService(self.store, api)
        self.summary = SummaryService(self.store, api)
        self.submission = SubmissionService(
            self.store, api, self.expenses, self.summary
        )
        self.partitioner = MonthPartitioner()
        self.loaded = False

    @property
    def state(self) -> AppState:
        return self.store.state

    async def load(
        self,
        category: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> None:
        self.store.dispatch(FilterChanged(category=category, month=month, year=year))
        await asyncio.gather(self.expenses.refresh(), self.summary.refresh())
        self.loaded = True

    async def set_filter(
        self,
        category: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> None:
        before = self.state.filter
        self.store.dispatch(FilterChanged(category=category, month=month, year=year))
        after = self.state.filter
        tasks = []
        if after.category != before.category:
            tasks.append(self.expenses.refresh(after.category))
        if (after.month, after.year) != (before.month, before.year):
            tasks.append(self.summary.refresh(after.month, after.year))
        if tasks:
            await asyncio.gather(*tasks)

    def update_form(self, **changes: str) -> None:
        self.store.dispatch(FormChanged(changes))

    async def submit(self) -> bool:
        return await self.submission.submit()

    def monthly_view(self) -> MonthlyView:
        state = self.state
        return self.partitioner.view(
            state.items, state.items_version, state.filter.month, state.filter.year
        )
