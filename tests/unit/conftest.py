"""Unit-test fixtures: in-memory ledger and scripted accrual client."""

import pytest

from src.lm_accrual.infrastructure.persistence import LedgerRepository
from tests.unit.memory_ledger import MemoryStore, ScriptedAccrualClient


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ledger(store: MemoryStore) -> LedgerRepository:
    return LedgerRepository(orders=store, accounts=store)


@pytest.fixture
def accrual() -> ScriptedAccrualClient:
    return ScriptedAccrualClient()
