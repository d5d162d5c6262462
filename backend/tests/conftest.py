"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from mallconsole.console import MallConsole, QueuedNotifier
from mallconsole.db.session import build_engine, build_session_factory
from mallconsole.identity.provider import IdentityProvider
from mallconsole.models import Base
from mallconsole.services.identity_gateway import IdentityGateway
from mallconsole.services.offer_service import OfferService
from mallconsole.services.product_service import ProductService
from mallconsole.services.shop_service import ShopService
from mallconsole.state.context import ResourceServices
from mallconsole.store.document_store import DocumentStore

ADMIN_EMAIL = "admin@supermall.com"
USER_EMAIL = "shopper@supermall.com"
PASSWORD = "secret123"


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# DATABASE-BACKED COLLABORATORS
# ============================================================================

@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database file per test (concurrent sessions need a real file)."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def store(session_factory) -> DocumentStore:
    return DocumentStore(session_factory)


@pytest.fixture
def provider(session_factory) -> IdentityProvider:
    return IdentityProvider(session_factory, secret_key="test-secret-key")


@pytest.fixture
def gateway(provider, store) -> IdentityGateway:
    return IdentityGateway(provider, store)


@pytest.fixture
def services(store) -> ResourceServices:
    return ResourceServices(
        shops=ShopService(store),
        products=ProductService(store),
        offers=OfferService(store),
    )


@pytest.fixture
def notifier() -> QueuedNotifier:
    return QueuedNotifier()


@pytest.fixture
def console(gateway, services, notifier) -> MallConsole:
    return MallConsole(gateway, services, notifier)


@pytest_asyncio.fixture
async def admin_console(console: MallConsole) -> MallConsole:
    """Console with a freshly registered admin signed in."""
    await console.register(ADMIN_EMAIL, PASSWORD, "admin")
    await console.login(ADMIN_EMAIL, PASSWORD)
    return console


@pytest_asyncio.fixture
async def user_console(console: MallConsole) -> MallConsole:
    """Console with a plain user signed in."""
    await console.register(USER_EMAIL, PASSWORD, "user")
    await console.login(USER_EMAIL, PASSWORD)
    return console


# ============================================================================
# MOCK STORE
# ============================================================================

@pytest.fixture
def mock_store():
    """Document store double whose collection methods are AsyncMocks.

    ``mock_store.ref`` is the collection reference every ``collection()``
    call returns, so tests can assert on its call counts.
    """
    ref = MagicMock()
    ref.get_all = AsyncMock(return_value=[])
    ref.get = AsyncMock(return_value=None)
    ref.add = AsyncMock(return_value="new-id")
    ref.set = AsyncMock()
    ref.update = AsyncMock()
    ref.delete = AsyncMock()
    ref.where = MagicMock(return_value=ref)

    store = MagicMock()
    store.collection = MagicMock(return_value=ref)
    store.ref = ref
    return store
