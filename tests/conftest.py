from __future__ import annotations

import pytest
from fakes import FakeDatabase, FakePool

from shared.repositories import FlaggedMessageRepository


@pytest.fixture(autouse=True)
def _clear_report_cache():
    FlaggedMessageRepository.invalidate_reports()
    yield
    FlaggedMessageRepository.invalidate_reports()


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def pool(db: FakeDatabase) -> FakePool:
    return FakePool(db)
