"""View models for the note list."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from vcnotebook.schemas.note import Note

SNIPPET_LENGTH = 100
EMPTY_SNIPPET = "No content"


def snippet(content: str, length: int = SNIPPET_LENGTH) -> str:
    text = content or ""
    if not text.strip():
        return EMPTY_SNIPPET
    if len(text) <= length:
        return text
    return text[:length] + "..."


def relative_date(value: Optional[datetime], today: Optional[date] = None) -> str:
    """'Today', 'Yesterday', 'N days ago' within a week, else a short date.

    The year is shown only when it differs from the current one.
    """
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    today = today or datetime.now(timezone.utc).date()
    days = (today - value.date()).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    label = f"{value.strftime('%b')} {value.day}"
    if value.year != today.year:
        label += f", {value.year}"
    return label


@dataclass(frozen=True)
class NoteListItem:
    note_id: str
    title: str
    snippet: str
    date_label: str
    is_active: bool = False

    @classmethod
    def from_note(
        cls,
        note: Note,
        current_note_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> "NoteListItem":
        return cls(
            note_id=note.id,
            title=note.display_title,
            snippet=snippet(note.content),
            date_label=relative_date(note.updated_at or note.created_at, today=today),
            is_active=note.id == current_note_id,
        )
