"""
Idempotent Mutation Applier - application layer contract

Every side effect of reconciliation goes through one of two atomic
operations, so replaying a delivery is always safe:

- transition: conditional UPDATE keyed on a natural key, guarded on the
  current state. Rows already in the terminal state are left untouched and
  the call reports 0 rows.
- insert_once: INSERT protected by a uniqueness constraint on the natural
  key. A conflict is benign and reported as False.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Type

from sqlmodel import SQLModel


@dataclass(frozen=True)
class Transition:
    """
    One conditional state change.

    key: natural key columns; must include tenant_id for tenant-owned rows
    values: terminal field set to write
    when: guard on the current row state; a list/tuple/set value means
        "column IN values", None means "column IS NULL"
    """

    entity: Type[SQLModel]
    key: Dict[str, Any]
    values: Dict[str, Any]
    when: Dict[str, Any] = field(default_factory=dict)


class MutationApplier(ABC):
    @abstractmethod
    async def apply(self, transition: Transition) -> int:
        """Apply a transition in one statement. Returns rows changed."""
        pass

    @abstractmethod
    async def insert_once(self, row: SQLModel) -> bool:
        """Insert a row unless its natural key already exists"""
        pass
