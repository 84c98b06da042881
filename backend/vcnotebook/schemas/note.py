"""Note and attachment records as stored by the hosted backend."""

import os
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Untitled"

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/heic", "image/webp"}
VIDEO_TYPES = {"video/mp4", "video/quicktime", "video/mov", "video/webm"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".heic", ".webp", ".bmp", ".svg"}
VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv"}


class Note(BaseModel):
    """A note row (`notes` table) or its local-store mirror."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    content: str = ""
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("title", "content", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @property
    def display_title(self) -> str:
        return self.title or DEFAULT_TITLE

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match over title and content."""
        needle = term.lower()
        return needle in self.title.lower() or needle in self.content.lower()


def format_file_size(size: int) -> str:
    """Human readable size in decimal units (1 KB = 1000 bytes)."""
    if size < 1000:
        return f"{size} bytes"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1000.0
        if value < 1000 or unit == "TB":
            text = f"{value:.1f}"
            if text.endswith(".0"):
                text = text[:-2]
            return f"{text} {unit}"
    return f"{size} bytes"


class Attachment(BaseModel):
    """A `file_attachments` row, or a staged upload whose note is not saved yet."""

    model_config = ConfigDict(extra="ignore")

    id: str
    note_id: Optional[str] = None
    user_id: str
    file_name: str
    file_size: int
    file_type: str = "application/octet-stream"
    storage_path: str
    storage_bucket: str
    created_at: Optional[datetime] = None
    is_temporary: bool = Field(default=False, exclude=True)

    @field_validator("id", "note_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return str(v) if v is not None else v

    @property
    def extension(self) -> str:
        return os.path.splitext(self.file_name)[1].lower()

    @property
    def is_image(self) -> bool:
        return self.file_type.lower() in IMAGE_TYPES or self.extension in IMAGE_EXTENSIONS

    @property
    def is_video(self) -> bool:
        return self.file_type.lower() in VIDEO_TYPES or self.extension in VIDEO_EXTENSIONS

    @property
    def is_media(self) -> bool:
        return self.is_image or self.is_video

    @property
    def formatted_file_size(self) -> str:
        return format_file_size(self.file_size)

    @property
    def file_icon(self) -> str:
        if self.is_image:
            return "photo"
        if self.is_video:
            return "video"
        if "pdf" in self.file_type.lower():
            return "doc.text"
        return "doc"

    def to_row(self, note_id: str) -> dict:
        """Insert payload binding this record to a persisted note."""
        return {
            "note_id": note_id,
            "user_id": self.user_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "file_type": self.file_type,
            "storage_path": self.storage_path,
            "storage_bucket": self.storage_bucket,
        }
