from __future__ import annotations

from typing import ContextManager, Protocol


class TransactionManager(Protocol):
    """Scoped all-or-nothing unit of work.

    `DatabaseConnection` implements it for MySQL; tests use an in-memory
    version that snapshots and restores state.
    """

    def transaction(self) -> ContextManager:
        raise NotImplementedError
