"""Import all models so SQLAlchemy metadata knows about them."""
from dashboard.models.base import Base
from dashboard.models.user import User
from dashboard.models.file_record import FileRecord
from dashboard.models.user_settings import UserSettings

__all__ = ["Base", "User", "FileRecord", "UserSettings"]
