from __future__ import annotations

from typing import Protocol

from taskledger.models.rollup import FinishStatus, RollupRequest


class RollupServer(Protocol):
    """The coordinator as seen by the dispatcher.

    Keep this tiny so the HTTP client and in-memory fakes stay interchangeable.
    """

    def finish(self, status: FinishStatus) -> RollupRequest | None:
        """Report the previous request's status and fetch the next one.

        Returns None when no request is pending.
        """

    def add_notice(self, text: str) -> None:
        """Emit a notice for the request being processed."""

    def add_report(self, text: str) -> None:
        """Emit a report for the request being processed."""


__all__ = ["RollupServer"]
