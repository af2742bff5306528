"""
Pytest configuration and fixtures for coin control tests.
"""

from __future__ import annotations

import pytest

from coincontrol.models import ConsolidationTarget
from tests.fakes import ACCOUNT, PASSPHRASE, FakeWallet, RecordingSink


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def target() -> ConsolidationTarget:
    return ConsolidationTarget(account=ACCOUNT, passphrase=PASSPHRASE)
