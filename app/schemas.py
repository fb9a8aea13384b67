"""
Pydantic Schemas for Request/Response Validation

Request bodies are validated here before anything reaches the store.
Responses serialize records the way the ordering frontend expects them:
the identifier under `_id` and timestamps as ISO-8601 UTC strings with
millisecond precision and a trailing `Z`.

Author: Festival Stalls Team
Version: 1.0.0
"""

from datetime import datetime, timezone
from typing import Annotated, Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator


def to_iso_timestamp(value: datetime) -> str:
    """Render a datetime as 2024-06-01T18:30:00.000Z. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


Timestamp = Annotated[datetime, PlainSerializer(to_iso_timestamp, return_type=str)]


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single line item, priced and named as the customer saw it."""
    menu_item_id: str = Field(..., min_length=1, examples=["665f1c2ab4e0a1d2c3f4a5b6"])
    quantity: int = Field(..., ge=1, examples=[2])
    price: float = Field(..., ge=0, examples=[5.99])
    item_name: str = Field(..., min_length=1, examples=["Chicken Taco"])


class OrderCreate(BaseModel):
    """
    Request schema for placing an order.

    Unknown keys are ignored, including any `status`: new orders always
    start as pending. Numbers sent for string fields (a bare phone number)
    are stored as their string form.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    stall_id: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1, examples=["Ada Lovelace"])
    customer_email: str = Field(..., min_length=1, examples=["ada@example.com"])
    customer_phone: str = Field(..., min_length=1, examples=["555-0101"])
    pickup_time: datetime = Field(..., examples=["2024-06-01T18:30:00.000Z"])
    total_amount: float = Field(..., ge=0, examples=[11.98])
    items: List[OrderItemCreate] = Field(default_factory=list)

    @field_validator("pickup_time")
    @classmethod
    def normalize_pickup_time(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class OrderStatusUpdate(BaseModel):
    """
    Any string is accepted; it is not checked against OrderStatus and no
    transition rules apply.
    """
    status: str


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class StallResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    description: str = ""
    owner_email: str
    created_at: Timestamp


class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    stall_id: str
    name: str
    description: str = ""
    price: float
    available: bool = True
    created_at: Timestamp


class OrderItemResponse(BaseModel):
    menu_item_id: str
    quantity: int
    price: float
    item_name: str


class OrderResponse(BaseModel):
    """Response schema for a single order."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., alias="_id")
    stall_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    pickup_time: Timestamp
    status: str
    total_amount: float
    items: List[OrderItemResponse]
    created_at: Timestamp


class PopulatedOrderItem(BaseModel):
    """Line item with its menu item reference resolved (None when dangling)."""
    menu_item_id: Optional[MenuItemResponse]
    quantity: int
    price: float
    item_name: str


class OrderDetailResponse(BaseModel):
    """An order with its stall and menu item references resolved."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    stall_id: Optional[StallResponse]
    customer_name: str
    customer_email: str
    customer_phone: str
    pickup_time: Timestamp
    status: str
    total_amount: float
    items: List[PopulatedOrderItem]
    created_at: Timestamp

    @classmethod
    def from_populated(cls, order: Any, stall: Any, menu_items: Dict[str, Any]) -> "OrderDetailResponse":
        items = []
        for item in order.items:
            menu_item = menu_items.get(item["menu_item_id"])
            items.append(PopulatedOrderItem(
                menu_item_id=MenuItemResponse.model_validate(menu_item) if menu_item else None,
                quantity=item["quantity"],
                price=item["price"],
                item_name=item["item_name"],
            ))
        return cls(
            id=order.id,
            stall_id=StallResponse.model_validate(stall) if stall else None,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            pickup_time=order.pickup_time,
            status=order.status,
            total_amount=order.total_amount,
            items=items,
            created_at=order.created_at,
        )


class OrderCreateResponse(BaseModel):
    """Response after successfully creating an order."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    order_id: str = Field(..., alias="orderId")


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
