from pos_api.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from pos_api.common.mixins import TimestampMixin


class Product(Base, TimestampMixin):
    """
    Catalog product.

    Checkout only reads products and adjusts ``stock`` for items with
    ``track_inventory`` enabled.
    """
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    sku = Column(String(50), nullable=False, unique=True)
    barcode = Column(String(50), nullable=True, unique=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=True, index=True)
    price = Column(Numeric(15, 2), nullable=False, default=0)
    cost = Column(Numeric(15, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    low_stock_alert = Column(Integer, nullable=False, default=10)
    brand = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    track_inventory = Column(Boolean, nullable=False, default=True)

    category = relationship("Category", back_populates="products", lazy="joined")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "out-of-stock"
        if self.stock <= self.low_stock_alert:
            return "low-stock"
        return "in-stock"
