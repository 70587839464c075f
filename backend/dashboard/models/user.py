"""User model - dashboard account (credentials login)."""
import uuid
from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from dashboard.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(200), nullable=False)

    files = relationship(
        "FileRecord", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    settings = relationship(
        "UserSettings", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
