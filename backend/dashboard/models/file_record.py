"""FileRecord model - file metadata (actual bytes on filesystem/blob storage)."""
import uuid
from datetime import datetime
from sqlalchemy import String, BigInteger, DateTime, Index, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from dashboard.models.base import Base, UserMixin, utcnow


class FileRecord(Base, UserMixin):
    __tablename__ = "files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Storage object key, namespaced per user by the backend
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    user = relationship("User", back_populates="files")

    __table_args__ = (
        Index("idx_files_user_uploaded_at", "user_id", "uploaded_at"),
    )
