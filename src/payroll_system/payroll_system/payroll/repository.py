from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EntryStatus
from .model import PayrollEntry


class PayrollEntryRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def get_for_employee_and_period(self, employee_id: int, period_id: int) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def list_for_period(self, period_id: int) -> Sequence[PayrollEntry]:
        raise NotImplementedError

    def save_batch(
        self, *, inserts: Sequence[PayrollEntry], replacements: Sequence[PayrollEntry]
    ) -> list[PayrollEntry]:
        """Persist a generation batch atomically and return the stored entries.

        Inserts rely on the (employee_id, period_id) unique key and raise
        DuplicateEntryError when a row already exists. Replacements carry the
        entry_id of the row they overwrite; StaleEntryError is raised when that
        row is gone or paid. Either everything is written or nothing is.
        """

        raise NotImplementedError

    def update(self, entry: PayrollEntry) -> bool:
        raise NotImplementedError

    def update_status(self, entry_id: int, status: EntryStatus) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError
