"""
Database Seed Script

Wipes all stalls and menu items and loads the festival sample data.
Orders are left untouched. Run from project root: python scripts/seed.py

Author: Festival Stalls Team
Version: 1.0.0
"""

import asyncio
import os
import sys
from typing import Any, Optional

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete
from sqlalchemy.engine import make_url

from app.core.config import get_logger, get_settings, setup_logging
from app.database import Database
from app.models import MenuItem, Stall

logger = get_logger("seed")

STALLS: list[dict[str, str]] = [
    {
        "name": "Tasty Tacos",
        "description": "Authentic Mexican street tacos with fresh ingredients",
        "owner_email": "tacos@festival.com",
    },
    {
        "name": "Pizza Paradise",
        "description": "Wood-fired pizzas with gourmet toppings",
        "owner_email": "pizza@festival.com",
    },
    {
        "name": "Burger Bonanza",
        "description": "Juicy burgers with creative combinations",
        "owner_email": "burgers@festival.com",
    },
    {
        "name": "Sweet Treats",
        "description": "Artisan desserts and ice cream",
        "owner_email": "sweets@festival.com",
    },
]

# Keyed by the stall's position in STALLS
MENU_ITEMS: list[tuple[int, dict[str, Any]]] = [
    (0, {"name": "Chicken Taco", "description": "Grilled chicken with salsa and guacamole", "price": 5.99}),
    (0, {"name": "Beef Taco", "description": "Seasoned beef with cheese and lettuce", "price": 6.49}),
    (0, {"name": "Veggie Taco", "description": "Grilled vegetables with black beans", "price": 5.49}),
    (1, {"name": "Margherita Pizza", "description": "Classic tomato, mozzarella, and basil", "price": 12.99}),
    (1, {"name": "Pepperoni Pizza", "description": "Loaded with pepperoni and cheese", "price": 14.99}),
    (2, {"name": "Classic Burger", "description": "Beef patty with lettuce, tomato, and cheese", "price": 8.99}),
    (2, {"name": "Spicy Chicken Burger", "description": "Crispy chicken with spicy mayo", "price": 9.49}),
    (3, {"name": "Chocolate Brownie", "description": "Warm brownie with vanilla ice cream", "price": 6.99}),
    (3, {"name": "Fruit Smoothie", "description": "Fresh fruit blended with yogurt", "price": 5.49}),
]


async def seed_database(database: Database) -> dict[str, int]:
    """
    Replace all stalls and menu items with the sample data.

    Returns:
        Number of stalls and menu items created
    """
    await database.create_all()

    async with database.session_maker() as session:
        logger.info("🧹 Clearing existing data...")
        await session.execute(delete(MenuItem))
        await session.execute(delete(Stall))

        logger.info("🍽️  Creating stalls...")
        stalls = [Stall(**data) for data in STALLS]
        session.add_all(stalls)
        await session.flush()
        logger.info(f"✅ Created {len(stalls)} stalls")

        logger.info("🍴 Creating menu items...")
        menu_items = [
            MenuItem(stall_id=stalls[index].id, available=True, **data)
            for index, data in MENU_ITEMS
        ]
        session.add_all(menu_items)
        await session.commit()
        logger.info(f"✅ Created {len(menu_items)} menu items")

    return {"stalls": len(stalls), "menu_items": len(menu_items)}


async def main(database_url: Optional[str] = None) -> int:
    url = database_url or get_settings().database_url
    database = Database(url)

    logger.info(f"🔗 Connecting to {make_url(url).render_as_string(hide_password=True)}...")
    try:
        await seed_database(database)
        logger.info("🎉 Database seeded successfully!")
        return 0
    except Exception as e:
        logger.exception(f"❌ Error seeding database: {e}")
        return 1
    finally:
        await database.dispose()
        logger.info("🔌 Database connection closed")


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
