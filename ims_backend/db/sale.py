from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.sql import func

from .database import Base


class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Sales outlive their item: deleting the item only clears the reference.
    product_id = Column(Integer, ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)  # snapshot of inventory.price
    sale_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": self.price,
            "sale_date": self.sale_date,
            "created_at": self.created_at,
        }
