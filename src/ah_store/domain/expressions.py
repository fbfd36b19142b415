"""Store expression value objects: conditions, update actions, transaction intents.

Conditions and actions address top-level document attributes only. An
attribute holding None is treated as absent; documents never persist None.

Both store backends evaluate these objects the same way, so a condition that
holds against the in-memory store holds against PostgreSQL.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from src.ah_common.enums import StoreTable
from src.ah_store.domain.tables import key_of, key_tuple

MAX_TRANSACTION_OPS = 100

_MISSING = object()


def _lookup(doc: dict | None, name: str) -> Any:
    if doc is None:
        return _MISSING
    value = doc.get(name)
    return _MISSING if value is None else value


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


class Condition(ABC):
    """Predicate evaluated by the store against the current document (None when absent)."""

    @abstractmethod
    def evaluate(self, doc: dict | None) -> bool: ...


@dataclass(frozen=True)
class AttrEq(Condition):
    name: str
    value: Any

    def evaluate(self, doc: dict | None) -> bool:
        current = _lookup(doc, self.name)
        return current is not _MISSING and current == self.value


@dataclass(frozen=True)
class AttrNe(Condition):
    """True when the attribute is absent or differs from ``value``."""

    name: str
    value: Any

    def evaluate(self, doc: dict | None) -> bool:
        current = _lookup(doc, self.name)
        return current is _MISSING or current != self.value


@dataclass(frozen=True)
class _Compare(Condition):
    name: str
    value: int

    def evaluate(self, doc: dict | None) -> bool:
        current = _lookup(doc, self.name)
        if current is _MISSING or isinstance(current, bool) or not isinstance(current, int):
            return False
        return self._compare(current)

    @abstractmethod
    def _compare(self, current: int) -> bool: ...


class AttrGt(_Compare):
    def _compare(self, current: int) -> bool:
        return current > self.value


class AttrGte(_Compare):
    def _compare(self, current: int) -> bool:
        return current >= self.value


class AttrLt(_Compare):
    def _compare(self, current: int) -> bool:
        return current < self.value


class AttrLte(_Compare):
    def _compare(self, current: int) -> bool:
        return current <= self.value


@dataclass(frozen=True)
class AttrIn(Condition):
    name: str
    values: tuple[Any, ...]

    def evaluate(self, doc: dict | None) -> bool:
        current = _lookup(doc, self.name)
        return current is not _MISSING and current in self.values


@dataclass(frozen=True)
class AttrExists(Condition):
    name: str

    def evaluate(self, doc: dict | None) -> bool:
        return _lookup(doc, self.name) is not _MISSING


@dataclass(frozen=True)
class AttrNotExists(Condition):
    name: str

    def evaluate(self, doc: dict | None) -> bool:
        return _lookup(doc, self.name) is _MISSING


@dataclass(frozen=True)
class IsEmpty(Condition):
    """Absent, or a zero-length list/string/map."""

    name: str

    def evaluate(self, doc: dict | None) -> bool:
        current = _lookup(doc, self.name)
        return current is _MISSING or len(current) == 0


class And(Condition):
    def __init__(self, *conditions: Condition) -> None:
        self.conditions = conditions

    def evaluate(self, doc: dict | None) -> bool:
        return all(c.evaluate(doc) for c in self.conditions)

    def __repr__(self) -> str:
        return f"And{self.conditions!r}"


class Or(Condition):
    def __init__(self, *conditions: Condition) -> None:
        self.conditions = conditions

    def evaluate(self, doc: dict | None) -> bool:
        return any(c.evaluate(doc) for c in self.conditions)

    def __repr__(self) -> str:
        return f"Or{self.conditions!r}"


@dataclass(frozen=True)
class Not(Condition):
    condition: Condition

    def evaluate(self, doc: dict | None) -> bool:
        return not self.condition.evaluate(doc)


def condition_holds(condition: Condition | None, doc: dict | None) -> bool:
    return condition is None or condition.evaluate(doc)


# ---------------------------------------------------------------------------
# Update actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetAttr:
    name: str
    value: Any


@dataclass(frozen=True)
class AddTo:
    """Numeric increment; an absent attribute counts as 0."""

    name: str
    delta: int


@dataclass(frozen=True)
class AppendTo:
    """List append; an absent attribute counts as []."""

    name: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class RemoveAttr:
    name: str


UpdateAction = SetAttr | AddTo | AppendTo | RemoveAttr


def apply_actions(
    doc: dict | None, key: dict[str, str], actions: tuple[UpdateAction, ...]
) -> dict:
    """Return a new document with ``actions`` applied; an absent doc starts from its key."""
    new_doc = copy.deepcopy(doc) if doc is not None else dict(key)
    for action in actions:
        if action.name in key:
            raise ValueError(f"Cannot update key attribute {action.name}")
        if isinstance(action, SetAttr):
            if action.value is None:
                new_doc.pop(action.name, None)
            else:
                new_doc[action.name] = copy.deepcopy(action.value)
        elif isinstance(action, AddTo):
            current = new_doc.get(action.name) or 0
            if isinstance(current, bool) or not isinstance(current, int):
                raise ValueError(f"AddTo on non-numeric attribute {action.name}")
            new_doc[action.name] = current + action.delta
        elif isinstance(action, AppendTo):
            current = new_doc.get(action.name) or []
            if not isinstance(current, list):
                raise ValueError(f"AppendTo on non-list attribute {action.name}")
            new_doc[action.name] = current + copy.deepcopy(list(action.values))
        elif isinstance(action, RemoveAttr):
            new_doc.pop(action.name, None)
        else:
            raise TypeError(f"Unknown update action: {action!r}")
    return new_doc


# ---------------------------------------------------------------------------
# Transaction intent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PutOp:
    table: StoreTable
    doc: dict
    condition: Condition | None = None
    label: str = "put"


@dataclass(frozen=True)
class UpdateOp:
    table: StoreTable
    key: dict[str, str]
    actions: tuple[UpdateAction, ...]
    condition: Condition | None = None
    label: str = "update"


@dataclass(frozen=True)
class DeleteOp:
    table: StoreTable
    key: dict[str, str]
    condition: Condition | None = None
    label: str = "delete"


TransactOp = PutOp | UpdateOp | DeleteOp


@dataclass
class TransactionIntent:
    """Ordered list of labelled writes submitted to the store as one unit.

    Labels identify participants in TransactionCancelledError.failed, so the
    caller can map a failed condition back to a business error.
    """

    ops: list[TransactOp] = field(default_factory=list)

    def add(self, op: TransactOp) -> "TransactionIntent":
        self.ops.append(op)
        return self

    @property
    def labels(self) -> list[str]:
        return [op.label for op in self.ops]

    def validate(self) -> None:
        """Raise ValueError for intents no store would accept."""
        if not self.ops:
            raise ValueError("Transaction has no operations")
        if len(self.ops) > MAX_TRANSACTION_OPS:
            raise ValueError(f"Transaction exceeds {MAX_TRANSACTION_OPS} operations")
        if len(set(self.labels)) != len(self.ops):
            raise ValueError(f"Duplicate labels in transaction: {self.labels}")
        targets = [target_of(op) for op in self.ops]
        if len(set(targets)) != len(targets):
            raise ValueError("Transaction touches the same entity more than once")


def target_of(op: TransactOp) -> tuple[str, str, str]:
    """(table, pk, sk) addressed by an operation."""
    key = key_of(op.table, op.doc) if isinstance(op, PutOp) else op.key
    pk, sk = key_tuple(op.table, key)
    return op.table.value, pk, sk


def next_document(op: TransactOp, current: dict | None) -> dict | None:
    """Document state after ``op`` (None = no row). Conditions are checked separately."""
    if isinstance(op, PutOp):
        return copy.deepcopy(op.doc)
    if isinstance(op, UpdateOp):
        return apply_actions(current, op.key, op.actions)
    return None
