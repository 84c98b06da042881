"""Note synchronization: in-memory list, filtered view and current selection."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from vcnotebook.client.backend import BackendError, parse_row, parse_rows
from vcnotebook.client.local_store import LocalNoteStore, LocalStoreError
from vcnotebook.client.messages import Notifier
from vcnotebook.client.session import ClientSession
from vcnotebook.schemas.note import DEFAULT_TITLE, Note

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class NoteSyncController:
    """Mediates note operations between the UI, the hosted backend and the local store.

    Owns `notes` (full list, most recently updated first), `filtered_notes`
    (what the list shows), `search_term` and `current_note_id`.
    """

    def __init__(self, session: ClientSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or Notifier()
        self.notes: List[Note] = []
        self.filtered_notes: List[Note] = []
        self.search_term: str = ""
        self.current_note_id: Optional[str] = None

    @property
    def table(self) -> str:
        return self.session.settings.NOTES_TABLE

    @property
    def current_note(self) -> Optional[Note]:
        return self.get(self.current_note_id) if self.current_note_id else None

    def get(self, note_id: str) -> Optional[Note]:
        return next((n for n in self.notes if n.id == note_id), None)

    # ========== Selection ==========

    def select_note(self, note_id: str) -> Optional[Note]:
        note = self.get(note_id)
        if note is not None:
            self.current_note_id = note_id
        return note

    def new_note(self) -> None:
        """Start editing an unsaved note."""
        self.current_note_id = None

    # ========== Loading ==========

    async def load_all(self, user_id: str) -> List[Note]:
        """Load every note of the user, newest update first.

        Any hosted failure falls back to the local store and puts the
        session offline for good.
        """
        await self.session.ensure_ready()

        if self.session.is_hosted:
            try:
                rows = await self.session.backend.select(
                    self.table, filters={"user_id": user_id}, order="updated_at"
                )
                self.notes = parse_rows(Note, rows)
            except BackendError as e:
                logger.error(f"Error loading notes, falling back to local store: {e}")
                self.notifier.error("Error loading notes")
                self.session.go_offline(f"load failed: {e}")
            else:
                logger.info(f"Loaded {len(self.notes)} notes from hosted backend")
                await self._refresh_filtered(user_id)
                return self.notes

        try:
            store = self._offline_store(user_id)
        except LocalStoreError as e:
            logger.error(f"Could not keep loaded notes locally: {e}")
            store = self.session.local_store
        self.notes = store.load(user_id)
        logger.info(f"Loaded {len(self.notes)} notes from local store")

        await self._refresh_filtered(user_id)
        return self.notes

    # ========== Writes ==========

    @staticmethod
    def _is_blank(title: str, content: str) -> bool:
        return not (title or "").strip() and not (content or "").strip()

    async def create(self, title: str, content: str, user_id: str) -> Optional[Note]:
        """Persist a new note; a blank title and content is a no-op."""
        if self._is_blank(title, content):
            return None
        await self.session.ensure_ready()

        now = _now_iso()
        data = {
            "title": title.strip() or DEFAULT_TITLE,
            "content": (content or "").strip(),
            "user_id": user_id,
            "created_at": now,
            "updated_at": now,
        }

        try:
            if self.session.is_hosted:
                rows = await self.session.backend.insert(self.table, [data])
                if not rows:
                    raise BackendError("Insert returned no row")
                saved = parse_row(Note, rows[0])
            else:
                saved = self._offline_store(user_id).create(user_id, data)
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error(f"Error saving note: {e.message}")
            return None
        except LocalStoreError as e:
            self.notifier.error(f"Error saving note: {e}")
            return None

        await self._apply_saved(saved, user_id)
        return saved

    async def update(self, note_id: str, title: str, content: str) -> Optional[Note]:
        """Save new title/content for an existing note; blank input is a no-op."""
        if self._is_blank(title, content):
            return None
        await self.session.ensure_ready()

        user_id = self.session.user_id
        data = {
            "title": title.strip() or DEFAULT_TITLE,
            "content": (content or "").strip(),
            "user_id": user_id,
            "updated_at": _now_iso(),
        }

        try:
            if self.session.is_hosted:
                rows = await self.session.backend.update(
                    self.table, data, filters={"id": note_id, "user_id": user_id}
                )
                if not rows:
                    raise BackendError("Note not found", status_code=404)
                saved = parse_row(Note, rows[0])
            else:
                saved = self._offline_store(user_id).update(user_id, note_id, data)
                if saved is None:
                    self.notifier.error("Error saving note: note not found")
                    return None
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error(f"Error saving note: {e.message}")
            return None
        except LocalStoreError as e:
            self.notifier.error(f"Error saving note: {e}")
            return None

        await self._apply_saved(saved, user_id)
        return saved

    async def delete(self, note_id: str) -> bool:
        """Remove a note everywhere; clears the selection if it was current."""
        await self.session.ensure_ready()
        user_id = self.session.user_id

        try:
            if self.session.is_hosted:
                await self.session.backend.delete(
                    self.table, filters={"id": note_id, "user_id": user_id}
                )
            else:
                self._offline_store(user_id).delete(user_id, note_id)
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error("Error deleting note")
            return False
        except LocalStoreError as e:
            self.notifier.error(f"Error deleting note: {e}")
            return False

        self.notes = [n for n in self.notes if n.id != note_id]
        if self.current_note_id == note_id:
            self.current_note_id = None
        await self._refresh_filtered(user_id)
        self.notifier.success("Note deleted")
        return True

    def _offline_store(self, user_id: str) -> LocalNoteStore:
        """The local store, holding every note loaded while hosted."""
        store = self.session.local_store
        added = store.adopt(user_id, self.notes)
        if added:
            logger.info(f"Copied {added} hosted notes to the local store")
        return store

    async def _apply_saved(self, saved: Note, user_id: str) -> None:
        for index, existing in enumerate(self.notes):
            if existing.id == saved.id:
                self.notes[index] = saved
                break
        else:
            self.notes.insert(0, saved)
        await self._refresh_filtered(user_id)
        self.notifier.success("Note saved successfully!")

    async def _refresh_filtered(self, user_id: str) -> None:
        # Re-run the search instead of guessing whether the write matches it
        if self.search_term:
            await self.search(self.search_term, user_id)
        else:
            self.filtered_notes = list(self.notes)

    # ========== Search ==========

    def local_search(self, term: str) -> List[Note]:
        return [n for n in self.notes if n.matches(term)]

    async def search(self, term: str, user_id: str) -> List[Note]:
        """Update the filtered view for `term`. Degrades, never fails.

        Hosted full-text search first; any error drops to a local
        case-insensitive substring match over title and content.
        """
        self.search_term = (term or "").strip()
        if not self.search_term:
            self.filtered_notes = list(self.notes)
            return self.filtered_notes

        await self.session.ensure_ready()

        if self.session.is_hosted:
            try:
                rows = await self.session.backend.text_search(
                    self.table,
                    self.session.settings.SEARCH_COLUMN,
                    self.search_term,
                    filters={"user_id": user_id},
                    order="updated_at",
                )
                self.filtered_notes = parse_rows(Note, rows)
                return self.filtered_notes
            except BackendError as e:
                logger.warning(f"Full-text search failed, using local match: {e}")
                self.session.handle_backend_error(e)

        self.filtered_notes = self.local_search(self.search_term)
        return self.filtered_notes
