"""
Root Pytest Fixtures.

Shared fixtures available to all test types.
"""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
