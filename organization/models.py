from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base, TimestampMixin

# the one organization a deployment may hold always lives under this key
SINGLETON_ORGANIZATION_ID = 1


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, default="Asia/Dhaka")
    locale: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, default="en-US")
    logo_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # relationships
    users = relationship("User", back_populates="org", passive_deletes="all")
