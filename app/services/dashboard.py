"""
Admin Dashboard Data

Collects every stall, menu item and order and flattens them into the rows
the dashboard template renders. No filtering, no pagination, no business
rules: this is a read-only report.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.services import store


def format_amount(value: float) -> str:
    """12.0 -> '12', 5.99 -> '5.99'"""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_pickup_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


async def build_dashboard_context(db: AsyncSession) -> dict[str, Any]:
    """Summary counts and the three tables of the admin dashboard."""
    stalls, menu_items, orders = await store.load_all(db)
    stall_names = {stall.id: stall.name for stall in stalls}

    return {
        "counts": {
            "stalls": len(stalls),
            "menu_items": len(menu_items),
            "orders": len(orders),
        },
        "stalls": [
            {
                "id": stall.id,
                "name": stall.name,
                "description": stall.description,
                "owner_email": stall.owner_email,
            }
            for stall in stalls
        ],
        "menu_items": [
            {
                "id": item.id,
                "name": item.name,
                "price": format_amount(item.price),
                "available": item.available,
                "stall": stall_names.get(item.stall_id, "Unknown"),
            }
            for item in menu_items
        ],
        "orders": [
            {
                "id": order.id,
                "customer_name": order.customer_name,
                "stall": stall_names.get(order.stall_id, "Unknown"),
                "item_count": len(order.items),
                "total_amount": format_amount(order.total_amount),
                "status": order.status,
                "pickup_time": format_pickup_time(order.pickup_time),
            }
            for order in orders
        ],
    }
