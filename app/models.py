"""
SQLAlchemy Database Models

Three collections back the festival:
- Stall: a vendor
- MenuItem: a product a stall sells
- Order: a customer's purchase from one stall, with its line items
  embedded as a JSON list

Identifiers are opaque 24-character hex strings assigned on insert.
References between collections are plain id columns with no foreign key
constraint; deleting a stall leaves its menu items and orders dangling.

Required strings must be non-empty and amounts non-negative. CHECK
constraints enforce this for every writer, not just the API.

Author: Festival Stalls Team
Version: 1.0.0
"""

import enum
import os
import time
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Text, Boolean, JSON, CheckConstraint

from app.database import Base


def new_object_id() -> str:
    """Four bytes of epoch seconds followed by eight random bytes, hex encoded."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{os.urandom(8).hex()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """
    Declared order status workflow.

    The status column itself is a plain string: updates are not checked
    against this list and may move between any two values.
    """
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"


class Stall(Base):
    """A vendor at the festival."""
    __tablename__ = "stalls"
    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_stalls_name_not_empty"),
        CheckConstraint("length(owner_email) > 0", name="ck_stalls_owner_email_not_empty"),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    owner_email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Stall {self.id} - {self.name}>"


class MenuItem(Base):
    """An orderable product belonging to exactly one stall."""
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_menu_items_name_not_empty"),
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    stall_id = Column(String(24), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<MenuItem {self.id} - {self.name} ${self.price}>"


class Order(Base):
    """
    A customer's order against one stall.

    `items` holds the line items as a list of
    {menu_item_id, quantity, price, item_name} objects. Price and name are
    captured when the order is placed, so later menu edits do not change
    historical orders. `total_amount` is stored as submitted.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("length(customer_name) > 0", name="ck_orders_customer_name_not_empty"),
        CheckConstraint("length(customer_email) > 0", name="ck_orders_customer_email_not_empty"),
        CheckConstraint("length(customer_phone) > 0", name="ck_orders_customer_phone_not_empty"),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount_non_negative"),
    )

    id = Column(String(24), primary_key=True, default=new_object_id)
    stall_id = Column(String(24), nullable=False, index=True)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    pickup_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value, index=True)
    total_amount = Column(Float, nullable=False)
    items = Column(JSON, nullable=False, default=list)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<Order {self.id} - {self.customer_name} - {self.status}>"
