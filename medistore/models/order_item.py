from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import CheckConstraint
from typing import Optional, TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from medistore.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True, ondelete="CASCADE")
    product_id: str = Field(foreign_key="products.id")

    # snapshots taken at purchase time
    product_title: str
    unit_price: int
    quantity: int

    order: Optional["Order"] = Relationship(back_populates="items")
