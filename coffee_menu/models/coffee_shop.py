from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from coffee_menu.core.database import Base


class CoffeeShop(Base):
    __tablename__ = "coffee_shops"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), index=True, nullable=False)
    name = Column(String(100), nullable=False)
    location = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    instagram_url = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    hero_image_url = Column(String, nullable=True)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
