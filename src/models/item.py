"""Item database model.

This module defines the stocked Item model using SQLAlchemy.
"""

from sqlalchemy import CheckConstraint, Column, Float, Integer, String
from .base import Base


class ItemModel(Base):
    """Item database model."""

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500), nullable=True)
