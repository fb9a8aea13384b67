"""
Store Operations

Every API endpoint is a single call into this module. Each function takes the
request's AsyncSession and performs one store operation:

    - find with filter and sort (stalls, menu, orders)
    - insert one (orders)
    - update by id returning the updated record (order status)
    - find by id with references resolved (order detail)

There is no locking and no version check: concurrent status updates on
the same order race and the last committed write wins.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Stall, MenuItem, Order, OrderStatus
from app.schemas import OrderCreate

logger = logging.getLogger(__name__)


class StallNotFoundError(LookupError):
    """An order referenced a stall that does not exist."""

    def __init__(self, stall_id: str):
        super().__init__(f"Stall {stall_id} not found")
        self.stall_id = stall_id


@dataclass
class PopulatedOrder:
    """An order together with the records its references point to."""
    order: Order
    stall: Optional[Stall]
    menu_items: Dict[str, MenuItem] = field(default_factory=dict)


async def list_stalls(db: AsyncSession) -> Sequence[Stall]:
    result = await db.execute(select(Stall).order_by(Stall.name.asc()))
    return result.scalars().all()


async def list_menu_items(db: AsyncSession, stall_id: str) -> Sequence[MenuItem]:
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.stall_id == stall_id)
        .order_by(MenuItem.name.asc())
    )
    return result.scalars().all()


async def list_orders(db: AsyncSession, stall_id: str) -> Sequence[Order]:
    """Orders for one stall, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.stall_id == stall_id)
        .order_by(Order.created_at.desc())
    )
    return result.scalars().all()


async def create_order(db: AsyncSession, order_data: OrderCreate) -> Order:
    """
    Insert a new order.

    The status always starts as pending. Line item prices and names are
    stored exactly as submitted, and so is the total.

    Raises:
        StallNotFoundError: If stall_id does not denote an existing stall
    """
    if await db.get(Stall, order_data.stall_id) is None:
        raise StallNotFoundError(order_data.stall_id)

    order = Order(
        stall_id=order_data.stall_id,
        customer_name=order_data.customer_name,
        customer_email=order_data.customer_email,
        customer_phone=order_data.customer_phone,
        pickup_time=order_data.pickup_time,
        status=OrderStatus.PENDING.value,
        total_amount=order_data.total_amount,
        items=[item.model_dump() for item in order_data.items],
    )

    db.add(order)
    await db.commit()
    await db.refresh(order)

    logger.info(f"Order {order.id} placed at stall {order.stall_id} ({len(order.items)} item(s))")
    return order


async def update_order_status(db: AsyncSession, order_id: str, status: str) -> Optional[Order]:
    """
    Set an order's status to any value.

    Returns:
        The updated order, or None if no order has this id
    """
    order = await db.get(Order, order_id)
    if order is None:
        return None

    previous = order.status
    order.status = status
    await db.commit()

    logger.info(f"Order {order_id} status: {previous} → {status}")
    return order


async def get_order_populated(db: AsyncSession, order_id: str) -> Optional[PopulatedOrder]:
    """
    Fetch one order with its stall and line item menu items resolved.

    References that no longer resolve come back as None.
    """
    order = await db.get(Order, order_id)
    if order is None:
        return None

    stall = await db.get(Stall, order.stall_id)

    menu_item_ids = {item["menu_item_id"] for item in order.items}
    menu_items: Dict[str, MenuItem] = {}
    if menu_item_ids:
        result = await db.execute(select(MenuItem).where(MenuItem.id.in_(list(menu_item_ids))))
        menu_items = {menu_item.id: menu_item for menu_item in result.scalars()}

    return PopulatedOrder(order=order, stall=stall, menu_items=menu_items)


async def load_all(db: AsyncSession) -> tuple[Sequence[Stall], Sequence[MenuItem], Sequence[Order]]:
    """Every stall, menu item and order, in insertion order."""
    stalls = (await db.execute(select(Stall).order_by(Stall.created_at))).scalars().all()
    menu_items = (await db.execute(select(MenuItem).order_by(MenuItem.created_at))).scalars().all()
    orders = (await db.execute(select(Order).order_by(Order.created_at))).scalars().all()
    return stalls, menu_items, orders
