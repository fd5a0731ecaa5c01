"""
Pytest configuration and fixtures
"""

import copy
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models.base import Base
# Import all models to ensure they are registered
from models.product import Product
from models.cache_entry import CacheEntry
from typing import Any, AsyncGenerator, Dict, List, Optional
from ingestion.base import PageSource
from schemas.source import PageResponse

# In-memory database shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

VALID_PRODUCT_ID = "d010b4af-aff6-427f-8b5d-ca41df9f57a4"
SECOND_PRODUCT_ID = "e020b4af-aff6-427f-8b5d-ca41df9f57a5"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


class FakeSleep:
    """Records requested delays instead of waiting"""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Manually advanced clock; ``sleep`` moves it forward"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


class FakePageSource(PageSource):
    """
    Serves canned pages. A page entry may be an exception (or a list of
    exceptions followed by a payload) to simulate failing fetches.
    """

    def __init__(self, pages: Dict[int, Any]):
        self.pages = {page: list(entry) if isinstance(entry, list) else [entry] for page, entry in pages.items()}
        self.requested: List[int] = []

    async def fetch_products(self, page: int = 1) -> PageResponse:
        self.requested.append(page)
        outcomes = self.pages[page]
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]

        if isinstance(outcome, Exception):
            raise outcome
        return PageResponse.from_payload(outcome)


def make_raw_product(
    product_id: str = VALID_PRODUCT_ID,
    slug: str = "test-container",
    price: Any = 1500.50,
    **overrides
) -> Dict[str, Any]:
    """Raw product as delivered by the source API"""
    product = {
        "id": product_id,
        "title": "Test Container",
        "slug": slug,
        "content": "A 20ft shipping container",
        "price": {"current": price, "old": 2000.00, "discount": 25},
        "stock": {"quantity": 10, "in_stock": True},
        "image": {
            "cover": "https://cdn.example.com/cover.jpg",
            "thumbnail": "https://cdn.example.com/thumb.jpg",
        },
        "container": {"types": ["dry", "standard"], "size": "20ft"},
        "production_year": 2020,
        "condition": "used",
        "location": {"city": "Istanbul", "district": "Tuzla", "country": "Turkey"},
        "type": "sale",
        "is_new": False,
        "is_hot_sale": True,
        "is_featured": False,
        "is_bulk_sale": False,
        "accept_offers": True,
        "status": "published",
        "colors": ["blue", "red"],
        "all_prices": [{"currency": "TRY", "amount": 1500.5}],
        "technical_specs": {"weight": "2200kg"},
        "user": {"id": 7, "name": "Seller"},
    }
    product.update(overrides)
    return product


def make_page_payload(
    products: List[Dict[str, Any]],
    current_page: int = 1,
    last_page: Optional[int] = 1,
    total: Optional[int] = None
) -> Dict[str, Any]:
    pagination: Dict[str, Any] = {"current_page": current_page, "total": total if total is not None else len(products)}
    if last_page is not None:
        pagination["last_page"] = last_page
    return {"data": {"pagination": pagination, "products": products}}


@pytest.fixture
def raw_product():
    """Complete, valid raw product"""
    return make_raw_product()


@pytest.fixture
def mapped_product(raw_product):
    """Raw product mapped to the database layout"""
    from ingestion.transformers.mapper import ProductDataMapper

    return ProductDataMapper().map_to_database_format(copy.deepcopy(raw_product))


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def fake_clock():
    return FakeClock()
