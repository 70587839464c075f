"""User settings request/response schemas."""
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from dashboard.schemas.base import CamelModel, CamelORMModel

Theme = Literal["light", "dark", "system"]
DashboardLayout = Literal["grid", "list"]


class SettingsUpdate(CamelModel):
    """Partial update. Omitted fields keep their stored value."""
    theme: Optional[Theme] = None
    notifications: Optional[bool] = None
    weather_location: Optional[str] = Field(None, min_length=1, max_length=200)
    dashboard_layout: Optional[DashboardLayout] = None


class SettingsResponse(CamelORMModel):
    id: uuid.UUID
    user_id: uuid.UUID
    theme: str
    notifications: bool
    weather_location: str
    dashboard_layout: str
    updated_at: datetime
