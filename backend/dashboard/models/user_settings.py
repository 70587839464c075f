"""UserSettings model - one row of dashboard preferences per user."""
import uuid
from sqlalchemy import Boolean, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from dashboard.models.base import Base, TimestampMixin, UserMixin

DEFAULT_THEME = "light"
DEFAULT_NOTIFICATIONS = True
DEFAULT_WEATHER_LOCATION = "New York"
DEFAULT_DASHBOARD_LAYOUT = "grid"


class UserSettings(Base, TimestampMixin, UserMixin):
    __tablename__ = "user_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    theme: Mapped[str] = mapped_column(String(20), default=DEFAULT_THEME)
    notifications: Mapped[bool] = mapped_column(Boolean, default=DEFAULT_NOTIFICATIONS)
    weather_location: Mapped[str] = mapped_column(String(200), default=DEFAULT_WEATHER_LOCATION)
    dashboard_layout: Mapped[str] = mapped_column(String(20), default=DEFAULT_DASHBOARD_LAYOUT)

    user = relationship("User", back_populates="settings")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_user_settings_user"),
    )
