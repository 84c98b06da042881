"""Tests for note and attachment records."""

import pytest

from vcnotebook.schemas.note import Attachment, Note, format_file_size


def attachment(**overrides):
    fields = {
        "id": 7,
        "note_id": 3,
        "user_id": "uid-1",
        "file_name": "Holiday.JPG",
        "file_size": 2_500_000,
        "file_type": "image/jpeg",
        "storage_path": "uid-1/1-abc.jpg",
        "storage_bucket": "note-attachments",
    }
    fields.update(overrides)
    return Attachment(**fields)


def test_note_coerces_backend_values():
    note = Note.model_validate({"id": 12, "title": None, "content": None, "user_id": "u"})
    assert note.id == "12"
    assert note.title == ""
    assert note.display_title == "Untitled"


def test_note_matches_case_insensitive():
    note = Note(id="1", title="Shopping List", content="Milk and EGGS", user_id="u")
    assert note.matches("shopping")
    assert note.matches("eggs")
    assert not note.matches("bread")


@pytest.mark.parametrize(
    "size,expected",
    [(0, "0 bytes"), (999, "999 bytes"), (1000, "1 KB"), (1536, "1.5 KB"), (2_500_000, "2.5 MB"), (3 * 10**9, "3 GB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_attachment_kinds():
    photo = attachment()
    assert photo.id == "7" and photo.note_id == "3"
    assert photo.is_image and photo.is_media and not photo.is_video
    assert photo.file_icon == "photo"
    assert photo.formatted_file_size == "2.5 MB"

    clip = attachment(file_name="clip.mov", file_type="video/quicktime")
    assert clip.is_video and clip.file_icon == "video"

    doc = attachment(file_name="a.pdf", file_type="application/pdf")
    assert not doc.is_media and doc.file_icon == "doc.text"

    other = attachment(file_name="a.zip", file_type="application/zip")
    assert other.file_icon == "doc"


def test_temporary_flag_not_serialized():
    staged = attachment(note_id=None, is_temporary=True)
    assert "is_temporary" not in staged.model_dump()
    row = staged.to_row("99")
    assert row["note_id"] == "99"
    assert "id" not in row
