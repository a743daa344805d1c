"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Each test runs against a fresh, isolated in-memory sqlite store created with
the same model modules as production, which is the most reliable setup for an
async pytest environment.

Key Fixtures:
- `anyio_backend`: Specifies the asyncio backend.
- `initialize_test_db`: (autouse) Creates a fresh store schema for each test.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from tortoise import Tortoise

from storefront.core.database import build_tortoise_config


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """
    Specifies the asyncio backend for async tests.
    """
    return "asyncio"


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the store for each test function.

    This async, autouse fixture creates a fresh in-memory database and schema
    for each test and tears it down afterwards.
    """
    await Tortoise.init(config=build_tortoise_config("sqlite://:memory:"))
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()
