from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from coffee_menu.core.database import Base


class MainAdmin(Base):
    __tablename__ = "main_admins"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ShopAdmin(Base):
    __tablename__ = "shop_admins"

    id = Column(Integer, primary_key=True, index=True)
    # The shop binding never changes for the lifetime of the admin.
    coffee_shop_id = Column(Integer, ForeignKey("coffee_shops.id"), index=True, nullable=False)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
