"""
Test configuration and fixtures
"""
import sys
from pathlib import Path

# Add project root and src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"

sys.path.insert(0, str(project_root))
sys.path.insert(0, str(src_path))

import pytest

from nftledger.core.config import LedgerConfig
from nftledger.core.ledger import OwnershipLedger
from nftledger.core.types import AccountId


@pytest.fixture
def alice():
    return AccountId(b"\x11" * 32)


@pytest.fixture
def bob():
    return AccountId(b"\x22" * 32)


@pytest.fixture
def carol():
    return AccountId(b"\x33" * 32)


@pytest.fixture
def dave():
    return AccountId(b"\x44" * 32)


@pytest.fixture
def ledger():
    """Unbounded ledger with default settings"""
    return OwnershipLedger(LedgerConfig())


@pytest.fixture
def make_ledger():
    """Build a ledger from keyword settings"""

    def _make(**settings):
        return OwnershipLedger(LedgerConfig(**settings))

    return _make
