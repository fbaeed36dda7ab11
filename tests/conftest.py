"""
Pytest configuration for sardis-crosschain tests.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(package_src))

# Set test environment
os.environ.setdefault("SARDIS_XC_ENVIRONMENT", "dev")
os.environ.setdefault("SARDIS_XC_LOG_LEVEL", "DEBUG")

from sardis_crosschain.blockchains import NativeAsset  # noqa: E402
from sardis_crosschain.config import DEFAULT_CHAINS, get_settings  # noqa: E402
from sardis_crosschain.registry import build_registry  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    """Clear cached settings so env changes in a test stay local to it."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry():
    """Frozen registry with every shipped driver."""
    return build_registry()


@pytest.fixture
def eth_chain():
    return DEFAULT_CHAINS[NativeAsset.ETH]


@pytest.fixture
def btc_chain():
    return DEFAULT_CHAINS[NativeAsset.BTC]


@pytest.fixture
def sol_chain():
    return DEFAULT_CHAINS[NativeAsset.SOL]


@pytest.fixture
def trx_chain():
    return DEFAULT_CHAINS[NativeAsset.TRX]


@pytest.fixture
def atom_chain():
    return DEFAULT_CHAINS[NativeAsset.ATOM]


@pytest.fixture
def sample_eth_address():
    """Valid Ethereum address for testing."""
    return "0x1234567890123456789012345678901234567890"


@pytest.fixture
def other_eth_address():
    return "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
