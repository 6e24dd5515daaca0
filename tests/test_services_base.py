"""
Retry behaviour of the shared service base.
"""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from arena.services import base
from arena.services.base import BaseService


def test_retries_operational_errors_until_success(monkeypatch):
    monkeypatch.setattr(base, "RETRY_BASE_DELAY", 0)
    calls = []

    async def flaky_read():
        calls.append(1)
        if len(calls) < 3:
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        return "standings"

    result = asyncio.run(BaseService(None).execute_with_retry(flaky_read))
    assert result == "standings"
    assert len(calls) == 3


def test_gives_up_after_max_retries(monkeypatch):
    monkeypatch.setattr(base, "RETRY_BASE_DELAY", 0)
    calls = []

    async def locked_read():
        calls.append(1)
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with pytest.raises(OperationalError):
        asyncio.run(BaseService(None).execute_with_retry(locked_read, max_retries=2))
    assert len(calls) == 2


def test_other_errors_are_not_retried():
    calls = []

    async def broken_read():
        calls.append(1)
        raise ValueError("bad page")

    with pytest.raises(ValueError):
        asyncio.run(BaseService(None).execute_with_retry(broken_read))
    assert len(calls) == 1
