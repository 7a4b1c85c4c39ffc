from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CartAddRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId", description="ID of the product")
    quantity: int = Field(..., description="Quantity to add")


class CartRemoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId", description="ID of the product")


class CartProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    stock_quantity: int
    image_name: Optional[str] = None


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product: CartProduct
    quantity: int
    total_price: float
    created_at: datetime
    updated_at: datetime


class ProductRef(BaseModel):
    id: int
    name: str
    quantity: Optional[int] = None


class CartResponse(BaseModel):
    message: str
    cart_items: List[CartItemResponse]
    total_items: int
    total_price: float


class CartAddResponse(CartResponse):
    added_product: ProductRef


class CartRemoveResponse(CartResponse):
    removed_product: ProductRef


class CartClearResponse(CartResponse):
    removed_items: int
