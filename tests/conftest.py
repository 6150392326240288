from collections.abc import Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from app.main import app

pytest_plugins = [
    "tests.git.fixtures",
    "tests.jobs.fixtures",
]


@pytest.fixture(scope="function")
def client() -> Generator[TestClient]:
    """
    Provides a TestClient without the real lifespan (no worker, no http client).
    """

    @asynccontextmanager
    async def mock_lifespan(_app):  # noqa: ANN001
        yield

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = mock_lifespan
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.router.lifespan_context = original_lifespan
