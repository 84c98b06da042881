"""Local note persistence used when the hosted backend is unavailable."""

import contextlib
import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from vcnotebook.schemas.note import Note

logger = logging.getLogger(__name__)

KEY_PREFIX = "notes-app-notes-"


class LocalStoreError(Exception):
    """Raised when the local note list cannot be written."""


class LocalNoteStore:
    """Per-user JSON array of notes, one file per key.

    Mirrors the browser storage layout: key `notes-app-notes-<user_id>`,
    value a JSON array of note records, newest first.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def key_for(self, user_id: str) -> str:
        return f"{KEY_PREFIX}{user_id}"

    def path_for(self, user_id: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", self.key_for(user_id))
        return self.directory / f"{safe_key}.json"

    def load(self, user_id: str) -> List[Note]:
        """Read the user's notes; missing or unreadable data loads as empty."""
        path = self.path_for(user_id)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Error loading notes from local store: {e}", extra={"path": str(path)})
            return []
        if not isinstance(raw, list):
            logger.error("Local store does not hold a note array", extra={"path": str(path)})
            return []

        notes = []
        for item in raw:
            try:
                notes.append(Note.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed local note: {e.error_count()} errors")
        return notes

    def save(self, user_id: str, notes: List[Note]) -> None:
        """Replace the stored list atomically."""
        path = self.path_for(user_id)
        payload = json.dumps([n.model_dump(mode="json") for n in notes], ensure_ascii=False)
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            logger.error(f"Error saving notes to local store: {e}", extra={"path": str(path)})
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise LocalStoreError(str(e)) from e

    def adopt(self, user_id: str, notes: List[Note]) -> int:
        """Add notes the store does not hold yet, keeping `notes` order first.

        Used when a hosted session goes offline with notes already loaded.
        Returns how many were added.
        """
        stored = self.load(user_id)
        stored_ids = {n.id for n in stored}
        missing = [n for n in notes if n.id not in stored_ids]
        if not missing:
            return 0
        current_ids = {n.id for n in notes}
        merged = list(notes) + [n for n in stored if n.id not in current_ids]
        self.save(user_id, merged)
        return len(missing)

    def _new_id(self, existing: List[Note]) -> str:
        """Millisecond timestamp id, bumped past any id already taken."""
        taken = {n.id for n in existing}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def create(self, user_id: str, data: dict) -> Note:
        notes = self.load(user_id)
        note = Note.model_validate({**data, "id": self._new_id(notes), "user_id": user_id})
        notes.insert(0, note)
        self.save(user_id, notes)
        return note

    def update(self, user_id: str, note_id: str, data: dict) -> Optional[Note]:
        """Merge `data` into the stored note; None when it does not exist."""
        notes = self.load(user_id)
        for index, existing in enumerate(notes):
            if existing.id == note_id:
                merged = {**existing.model_dump(), **data, "id": note_id}
                notes[index] = Note.model_validate(merged)
                self.save(user_id, notes)
                return notes[index]
        return None

    def delete(self, user_id: str, note_id: str) -> bool:
        notes = self.load(user_id)
        remaining = [n for n in notes if n.id != note_id]
        if len(remaining) == len(notes):
            return False
        self.save(user_id, remaining)
        return True
