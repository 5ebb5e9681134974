# backend/models/order.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Order header. Immutable once written; total_amount is always computed server-side
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    total_amount = Column(Integer, CheckConstraint("total_amount >= 0"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")

# Single order line. Name and price are snapshots taken when the order was placed,
# so later catalog changes never alter historical orders
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    unit_price = Column(Integer, CheckConstraint("unit_price >= 0"), nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    line_total = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
