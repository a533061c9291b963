from pos_api.database.database import Base
from sqlalchemy import Column, String, Boolean, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from pos_api.common.mixins import TimestampMixin


class Category(Base, TimestampMixin):
    __tablename__ = "categories"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    products = relationship("Product", back_populates="category")
