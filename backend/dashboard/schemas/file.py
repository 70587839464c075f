"""File request/response schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel

from dashboard.schemas.base import CamelORMModel


class FileResponse(CamelORMModel):
    id: uuid.UUID
    name: str
    original_name: str
    size: int
    type: str
    url: str
    uploaded_at: datetime
    user_id: uuid.UUID


class UploadResponse(BaseModel):
    message: str = "File uploaded successfully"
    file: FileResponse
