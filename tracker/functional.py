import math
import re
from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from tracker.domain import (
    CATEGORIES,
    EXPENSE_CATEGORIES,
    KINDS,
    PERIODS,
    Budget,
    BudgetDraft,
    Transaction,
    TransactionDraft,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _invalid(error: str, field: str, message: str, **extra) -> Left:
    return Left({"error": error, "field": field, "message": message, **extra})


def find_first(items: Iterable[T], pred: Callable[[T], bool]) -> Maybe[T]:
    for item in items:
        if pred(item):
            return Some(item)
    return Nothing()


def safe_transaction(trans: Iterable[Transaction], tid: str) -> Maybe[Transaction]:
    return find_first(trans, lambda t: t.id == tid)


def safe_budget(budgets: Iterable[Budget], category: str) -> Maybe[Budget]:
    return find_first(budgets, lambda b: b.category == category)


def check_amount(amount) -> Either[dict, float]:
    # bool is an int subclass but never a currency amount
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return _invalid("invalid_amount", "amount", "Please enter a valid amount", amount=amount)
    if not math.isfinite(amount) or amount <= 0:
        return _invalid("invalid_amount", "amount", "Please enter a valid amount", amount=amount)
    return Right(float(amount))


def check_date(value) -> Either[dict, str]:
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return _invalid("invalid_date", "date", f"Date must use the YYYY-MM-DD format, got {value!r}")
    return Right(value)


def validate_transaction(draft: TransactionDraft) -> Either[dict, TransactionDraft]:
    if draft.kind not in KINDS:
        return _invalid("invalid_kind", "kind", f"Unknown transaction type {draft.kind!r}")

    if draft.category not in CATEGORIES[draft.kind]:
        return _invalid(
            "category_type_mismatch",
            "category",
            f"Category {draft.category!r} is not a valid {draft.kind} category",
            kind=draft.kind,
        )

    if not isinstance(draft.description, str) or not draft.description.strip():
        return _invalid("empty_description", "description", "Please enter a description")

    if draft.notes is not None and not isinstance(draft.notes, str):
        return _invalid("invalid_notes", "notes", "Notes must be text")

    return (
        check_amount(draft.amount)
        .bind(lambda _: check_date(draft.date))
        .map(lambda _: draft)
    )


def validate_budget(draft: BudgetDraft) -> Either[dict, BudgetDraft]:
    if draft.category not in EXPENSE_CATEGORIES:
        return _invalid(
            "invalid_category",
            "category",
            f"Budgets can only be set on expense categories, got {draft.category!r}",
        )

    if draft.period not in PERIODS:
        return _invalid("invalid_period", "period", f"Unknown budget period {draft.period!r}")

    amount = check_amount(draft.amount)
    if amount.is_left():
        return _invalid("invalid_amount", "amount", "Please enter a valid budget amount", amount=draft.amount)
    return Right(draft)
