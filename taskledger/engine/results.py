from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class LedgerError:
    """A request-scoped failure. Carried in ``Rejected``; never raised."""

    message: str

    kind: ClassVar[str] = "error"


class ValidationError(LedgerError):
    kind: ClassVar[str] = "validation"


class NotFoundError(LedgerError):
    kind: ClassVar[str] = "not_found"


class AuthorizationError(LedgerError):
    kind: ClassVar[str] = "authorization"


@dataclass(frozen=True, slots=True)
class Accepted:
    message: str
    reward: int = 0


@dataclass(frozen=True, slots=True)
class Rejected:
    error: LedgerError

    @property
    def message(self) -> str:
        return self.error.message


ActionResult = Accepted | Rejected


__all__ = [
    "Accepted",
    "ActionResult",
    "AuthorizationError",
    "LedgerError",
    "NotFoundError",
    "Rejected",
    "ValidationError",
]
