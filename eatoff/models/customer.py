from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eatoff.models.base import Base, TimestampMixin


class Customer(TimestampMixin, Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(Text)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    membership_tier: Mapped[str] = mapped_column(String(20), default="bronze")
    loyalty_points: Mapped[int] = mapped_column(Integer, default=0)

    conversations = relationship("SupportConversation", back_populates="customer")
