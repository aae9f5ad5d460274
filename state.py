from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Union

from schemas import ExpenseRecord, FilterState, FormState, SummaryView


@dataclass(frozen=True)
class AppState:
    form: FormState
    filter: FilterState
    items: tuple[ExpenseRecord, ...] = ()
    items_version: int = 0
    loading: bool = False
    error: str = ""
    summary: SummaryView = field(default_factory=SummaryView)
    expenses_generation: int = 0
    summary_generation: int = 0


# Actions


@dataclass(frozen=True)
class FormChanged:
    changes: dict[str, str]


@dataclass(frozen=True)
class FormCleared:
    pass


@dataclass(frozen=True)
class FilterChanged:
    category: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None


@dataclass(frozen=True)
class ExpensesRequested:
    generation: int


@dataclass(frozen=True)
class ExpensesLoaded:
    generation: int
    items: tuple[ExpenseRecord, ...]


@dataclass(frozen=True)
class ExpensesFailed:
    generation: int
    message: str


@dataclass(frozen=True)
class SummaryRequested:
    generation: int


@dataclass(frozen=True)
class SummaryLoaded:
    generation: int
    summary: SummaryView


@dataclass(frozen=True)
class ErrorSet:
    message: str


Action = Union[
    FormChanged,
    FormCleared,
    FilterChanged,
    ExpensesRequested,
    ExpensesLoaded,
    ExpensesFailed,
    SummaryRequested,
    SummaryLoaded,
    ErrorSet,
]


def reduce(state: AppState, action: Action) -> AppState:
    if isinstance(action, FormChanged):
        return replace(state, form=state.form.model_copy(update=action.changes))
    if isinstance(action, FormCleared):
        return replace(state, form=state.form.cleared())
    if isinstance(action, FilterChanged):
        updates = {
            key: value
            for key, value in (
                ("category", action.category),
                ("month", action.month),
                ("year", action.year),
            )
            if value is not None
        }
        return replace(state, filter=state.filter.model_copy(update=updates))
    if isinstance(action, ExpensesRequested):
        return replace(
            state, expenses_generation=action.generation, loading=True, error=""
        )
    if isinstance(action, ExpensesLoaded):
        if action.generation != state.expenses_generation:
            return state
        return replace(
            state,
            items=action.items,
            items_version=state.items_version + 1,
            loading=False,
        )
    if isinstance(action, ExpensesFailed):
        if action.generation != state.expenses_generation:
            return state
        return replace(state, loading=False, error=action.message)
    if isinstance(action, SummaryRequested):
        return replace(state, summary_generation=action.generation)
    if isinstance(action, SummaryLoaded):
        if action.generation != state.summary_generation:
            return state
        return replace(state, summary=action.summary)
    if isinstance(action, ErrorSet):
        return replace(state, error=action.message)
    raise TypeError(f"Unknown action: {action!r}")


Listener = Callable[[AppState, Action], None]


class Store:
    """Holds the current AppState; every change goes through ``dispatch``."""

    def __init__(self, initial: AppState) -> None:
        self._state = initial
        self._listeners: list[Listener] = []
        self._generations: dict[str, int] = {"expenses": 0, "summary": 0}

    @property
    def state(self) -> AppState:
        return self._state

    def next_generation(self, target: str) -> int:
        self._generations[target] += 1
        return self._generations[target]

    def dispatch(self, action: Action) -> AppState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state, action)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
