"""Integration test fixtures: the FastAPI app over an in-memory database."""

from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.api.app import create_app
from payslip_engine.api.dependencies import get_db_session
from payslip_engine.config import Settings, get_settings

TEST_SECRET = "test-secret"


def settings_for_tests() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        jwt_algorithm="HS256",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
        max_overtime_hours=3,
        auto_create_schema=False,
    )


def make_token(employee_id: int, role: str, secret: str = TEST_SECRET) -> str:
    return jwt.encode({"sub": str(employee_id), "role": role}, secret, algorithm="HS256")


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, one database session per request."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_settings] = settings_for_tests

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth() -> Callable[[int, str], dict[str, str]]:
    """Build an Authorization header for an employee id and role."""

    def _auth(employee_id: int, role: str = "employee") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(employee_id, role)}"}

    return _auth
