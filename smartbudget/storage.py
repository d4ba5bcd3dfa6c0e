"""Persistence for the transaction and goal lists.

The store only knows opaque string blobs under a key. Typed helpers turn
them into domain tuples and treat a missing or corrupt blob as an empty
list so a bad save never locks the user out.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, TypeVar

from smartbudget.domain import BudgetGoal, Transaction
from smartbudget.transforms import normalize_goals

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
GOALS_KEY = "budget_goals"

T = TypeVar("T")


class KeyValueStore(ABC):

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def save(self, key: str, blob: str) -> None:
        pass


class MemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def save(self, key: str, blob: str) -> None:
        self._data[key] = blob


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        target = self._path(key)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read {target}: {e}")
            return None

    def save(self, key: str, blob: str) -> None:
        target = self._path(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_suffix(".json.tmp")
        tmp.write_text(blob, encoding="utf-8")
        tmp.replace(target)


def _load_list(store: KeyValueStore, key: str, parse: Callable[[dict], T]) -> Tuple[T, ...]:
    blob = store.load(key)
    if blob is None:
        return ()
    try:
        data = json.loads(blob)
        if not isinstance(data, list):
            raise ValueError(f"expected a list, got {type(data).__name__}")
        return tuple(parse(item) for item in data)
    except (ValueError, KeyError, TypeError, ArithmeticError) as e:
        logger.warning(f"Discarding corrupt '{key}' data, starting empty: {e}")
        return ()


def load_transactions(store: KeyValueStore) -> Tuple[Transaction, ...]:
    return _load_list(store, TRANSACTIONS_KEY, Transaction.from_dict)


def save_transactions(store: KeyValueStore, trans: Tuple[Transaction, ...]) -> None:
    store.save(TRANSACTIONS_KEY, json.dumps([t.to_dict() for t in trans], ensure_ascii=False, indent=2))


def load_goals(store: KeyValueStore) -> Tuple[BudgetGoal, ...]:
    """Stored goals, cleaned the same way as freshly edited ones."""
    return normalize_goals(_load_list(store, GOALS_KEY, BudgetGoal.from_dict))


def save_goals(store: KeyValueStore, goals: Tuple[BudgetGoal, ...]) -> None:
    store.save(GOALS_KEY, json.dumps([g.to_dict() for g in goals], ensure_ascii=False, indent=2))
