from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, Relationship, mapped_column, relationship

from shopfront.db.base import Base

if TYPE_CHECKING:
    from shopfront.products.models import Product


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(200), unique=True, nullable=False, index=True,
    )
    description: Mapped[Optional[str]] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # loaded explicitly by the read paths, never eagerly
    products: Relationship[List["Product"]] = relationship(
        "Product", back_populates="category",
    )
