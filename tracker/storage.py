"""Persistence collaborator for the tracker.

Each collection is stored whole, as one JSON array under its own key. A
missing key reads as an empty collection. Storage failures surface as
:class:`~tracker.errors.PersistenceError`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from tracker.domain import Budget, BudgetDraft, Transaction, TransactionDraft
from tracker.errors import PersistenceError
from tracker.functional import validate_budget, validate_transaction

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Key-value blob storage the stores persist through."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, text: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """Keeps blobs in a dict; used by tests and throwaway sessions."""

    def __init__(self, blobs: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(blobs or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, text: str) -> None:
        self.blobs[key] = text

    def remove(self, key: str) -> None:
        self.blobs.pop(key, None)


class JsonFileStorage:
    """Stores each key as ``<key>.json`` inside a data directory."""

    def __init__(self, data_dir: Path):
        """Initialize file storage.

        Args:
            data_dir: Directory holding one JSON file per key. Created on
                      first write if it doesn't exist.
        """
        self.data_dir = Path(data_dir)

    def get_path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        target = self.get_path(key)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding='utf-8')
        except OSError as e:
            logger.exception("failed to read %s", target)
            raise PersistenceError(f"Failed to read {target}: {e}") from e

    def write(self, key: str, text: str) -> None:
        """Replace the blob for ``key`` atomically.

        The text goes to a temporary file in the same directory which is
        then moved over the target, so readers see either the old blob or
        the new one, never a partial write.

        Raises:
            PersistenceError: If the directory or file cannot be written
        """
        target = self.get_path(key)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix='.tmp', dir=self.data_dir)
            with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                handle.write(text)
            os.replace(tmp_name, target)
        except OSError as e:
            logger.exception("failed to write %s", target)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to save {target}: {e}") from e

    def remove(self, key: str) -> None:
        target = self.get_path(key)
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as e:
            logger.exception("failed to delete %s", target)
            raise PersistenceError(f"Failed to delete {target}: {e}") from e


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    return {
        'id': t.id,
        'type': t.kind,
        'amount': t.amount,
        'category': t.category,
        'description': t.description,
        'date': t.date,
        'notes': t.notes,
    }


def transaction_from_dict(d: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(d['id']),
        kind=d['type'],
        amount=float(d['amount']),
        category=d['category'],
        description=d['description'],
        date=d['date'],
        notes=d.get('notes'),
    )


def budget_to_dict(b: Budget) -> Dict[str, Any]:
    return {
        'id': b.id,
        'category': b.category,
        'amount': b.amount,
        'period': b.period,
        'spent': b.spent,
    }


def budget_from_dict(d: Dict[str, Any]) -> Budget:
    return Budget(
        id=str(d['id']),
        category=d['category'],
        amount=float(d['amount']),
        period=d['period'],
        spent=float(d.get('spent', 0.0)),
    )


def dump_transactions(trans: Tuple[Transaction, ...]) -> str:
    return json.dumps([transaction_to_dict(t) for t in trans], ensure_ascii=False)


def dump_budgets(budgets: Tuple[Budget, ...]) -> str:
    return json.dumps([budget_to_dict(b) for b in budgets], ensure_ascii=False)


def _load_items(text: Optional[str], key: str) -> List[Dict[str, Any]]:
    if not text:
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Stored {key} are not valid JSON: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise PersistenceError(f"Stored {key} must be a JSON array of objects")
    return data


def _check_stored(result, entity: str, eid: str) -> None:
    if result.is_left():
        raise PersistenceError(f"Stored {entity} {eid} is invalid: {result.get_error()['message']}")


def load_transactions(text: Optional[str]) -> Tuple[Transaction, ...]:
    items = _load_items(text, 'transactions')
    try:
        trans = tuple(transaction_from_dict(item) for item in items)
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Stored transaction is malformed: {e}") from e
    for t in trans:
        draft = TransactionDraft(t.kind, t.amount, t.category, t.description, t.date, t.notes)
        _check_stored(validate_transaction(draft), 'transaction', t.id)
    return trans


def load_budgets(text: Optional[str]) -> Tuple[Budget, ...]:
    items = _load_items(text, 'budgets')
    try:
        budgets = tuple(budget_from_dict(item) for item in items)
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(f"Stored budget is malformed: {e}") from e
    for b in budgets:
        _check_stored(validate_budget(BudgetDraft(b.category, b.amount, b.period)), 'budget', b.id)
    return budgets
