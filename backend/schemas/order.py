from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime


# Input schema for a single order line, as sent by the mobile client
class OrderLineIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId", min_length=1)
    name: str = Field(min_length=1)
    unit_price: int = Field(alias="unitPrice", ge=0)
    quantity: int = Field(gt=0)


# Input schema for creating a new order. Any client-side total is ignored
class OrderCreatePayload(BaseModel):
    items: List[OrderLineIn]


# Result of a successful order placement
class OrderCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(alias="orderId")
    total: int


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: str
    product_name: str
    unit_price: int
    quantity: int
    line_total: int

    class Config:
        from_attributes = True


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    total_amount: int
    created_at: datetime
    items: List[OrderItemOut]

    class Config:
        from_attributes = True


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int
