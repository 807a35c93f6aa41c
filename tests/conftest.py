"""Shared test fixtures that don't touch a live chain"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from testnet_cycler.utils.random_params import RandomParameterGenerator
from tests.utils.test_utils import create_mock_account, create_mock_web3

@pytest.fixture
def mock_web3() -> MagicMock:
    """Fixture for mock AsyncWeb3 instance"""
    return create_mock_web3()

@pytest.fixture
def mock_account() -> MagicMock:
    """Fixture for mock signing account"""
    return create_mock_account()

@pytest.fixture
def random_params() -> RandomParameterGenerator:
    """Seeded generator so failures are reproducible"""
    return RandomParameterGenerator(seed=1234)

@pytest.fixture
def mock_sleep() -> AsyncMock:
    """Awaitable sleep that returns immediately"""
    return AsyncMock()
