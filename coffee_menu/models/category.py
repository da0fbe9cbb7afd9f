from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from coffee_menu.core.database import Base


class Category(Base):
    """Menu category shared by every shop on the platform."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    emoji = Column(String(10), nullable=True)
    color = Column(String(50), nullable=True)
    order_index = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
