from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LinkCreate(BaseModel):
    target_url: str | None = None
    code: str | None = None


class LinkOut(BaseModel):
    id: int
    code: str
    target_url: str
    click_count: int
    last_clicked_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    is_deleted: bool

    model_config = ConfigDict(from_attributes=True)


class DeleteOut(BaseModel):
    success: bool


class QrOut(BaseModel):
    short_url: str
    qr_base64: str


class ErrorOut(BaseModel):
    error: str
