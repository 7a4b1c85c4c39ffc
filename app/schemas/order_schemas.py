from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict

from app.models.order_models import OrderStatus


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    unit_price: float
    total_price: float


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    total: float
    status: OrderStatus
    created_at: datetime
    items: List[OrderItemResponse] = []


class OrderListResponse(BaseModel):
    message: str
    orders: List[OrderResponse]
    total_orders: int
    total_spent: float


class OrderDetailResponse(BaseModel):
    message: str
    order: OrderResponse
    order_items: List[OrderItemResponse]
    calculated_total: float
    items_count: int


class OrderStatusListResponse(BaseModel):
    message: str
    orders: List[OrderResponse]
    status: OrderStatus
    count: int


class OrderRecentResponse(BaseModel):
    message: str
    orders: List[OrderResponse]
    count: int
