from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock_quantity: int
    image_name: Optional[str] = None
    category: Optional[str] = None
    in_stock: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        data = cls.model_validate(product)
        data.in_stock = product.is_in_stock()
        return data


class ProductEnvelope(BaseModel):
    message: str
    product: ProductResponse


class ProductListResponse(BaseModel):
    message: str
    products: List[ProductResponse]
    count: int


class MostOrderedProduct(BaseModel):
    id: int
    name: str
    total_quantity: int


class ProductStatsResponse(BaseModel):
    message: str
    total_products: int
    in_stock_products: int
    recent_products: int
    average_price: float
    most_ordered: List[MostOrderedProduct] = Field(default_factory=list)
