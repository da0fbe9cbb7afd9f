from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, func

from coffee_menu.core.database import Base


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (Index("ix_menu_items_shop_category", "coffee_shop_id", "category_id"),)

    id = Column(Integer, primary_key=True)
    coffee_shop_id = Column(Integer, ForeignKey("coffee_shops.id"), index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    price_premium = Column(Integer, nullable=True)
    has_dual_pricing = Column(Boolean, default=False, nullable=False)
    image_url = Column(String, nullable=True)
    order_index = Column(Integer, default=0, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
