from __future__ import annotations

from collections.abc import Generator

import pytest

from taskledger.observability import reset_metrics
from taskledger.state.store import LedgerState


@pytest.fixture(autouse=True)
def _fresh_metrics() -> Generator[None, None, None]:
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture()
def state() -> LedgerState:
    return LedgerState()


@pytest.fixture()
def created_at() -> int:
    return 1_700_000_000
