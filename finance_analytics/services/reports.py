"""Per-run reports produced by the scheduled engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class OutcomeStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ItemOutcome:
    item_id: int
    status: OutcomeStatus
    reason: Optional[str] = None
    # id of the ledger transaction or budget created for the item
    created_id: Optional[int] = None


class _RunReport:
    items: list[ItemOutcome]

    def add(self, outcome: ItemOutcome) -> None:
        self.items.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for item in self.items if item.status == status)

    @property
    def processed(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def failures(self) -> list[ItemOutcome]:
        return [item for item in self.items if item.status == OutcomeStatus.FAILED]


@dataclass
class ExecutionReport(_RunReport):
    scan_date: date
    items: list[ItemOutcome] = field(default_factory=list)


@dataclass
class MaterializationReport(_RunReport):
    target_month: date
    items: list[ItemOutcome] = field(default_factory=list)

    @property
    def created(self) -> int:
        return self.succeeded
