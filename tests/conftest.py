"""
Shared fixtures: an application wired to a throwaway SQLite store per test.
"""

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.database import Database
from app.main import create_app
from app.models import MenuItem, Stall


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'festival.db'}")


@pytest.fixture
async def database(settings):
    database = Database(settings.database_url)
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def client(settings, database):
    app = create_app(settings, database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def add_stall(database):
    """Insert a stall directly into the store."""
    async def _add_stall(name: str, owner_email: str = "owner@festival.com", **fields: Any) -> Stall:
        async with database.session_maker() as session:
            stall = Stall(name=name, owner_email=owner_email, **fields)
            session.add(stall)
            await session.commit()
            return stall
    return _add_stall


@pytest.fixture
def add_menu_item(database):
    """Insert a menu item directly into the store."""
    async def _add_menu_item(stall_id: str, name: str, price: float, **fields: Any) -> MenuItem:
        async with database.session_maker() as session:
            menu_item = MenuItem(stall_id=stall_id, name=name, price=price, **fields)
            session.add(menu_item)
            await session.commit()
            return menu_item
    return _add_menu_item


def order_payload(stall_id: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "stall_id": stall_id,
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "customer_phone": "555-0101",
        "pickup_time": "2024-06-01T18:30:00.000Z",
        "total_amount": 11.98,
        "items": [
            {
                "menu_item_id": "000000000000000000000001",
                "quantity": 2,
                "price": 5.99,
                "item_name": "Chicken Taco",
            }
        ],
    }
    payload.update(overrides)
    return payload
