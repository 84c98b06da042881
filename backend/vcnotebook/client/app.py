"""Application facade driven by a UI: one method per user action."""

import logging
from typing import Iterable, List, Optional

from vcnotebook.client.attachments import AttachmentController, LocalFile
from vcnotebook.client.messages import Notifier
from vcnotebook.client.notes import NoteSyncController
from vcnotebook.client.premium import PremiumController
from vcnotebook.client.presentation import NoteListItem
from vcnotebook.client.session import AppUser, BackendMode, ClientSession
from vcnotebook.core.config import ClientSettings
from vcnotebook.schemas.note import Attachment, Note

logger = logging.getLogger(__name__)


class NotesApp:
    """Wires the session and controllers for one signed-in user."""

    def __init__(self, session: ClientSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or Notifier()
        self.notes = NoteSyncController(session, self.notifier)
        self.attachments = AttachmentController(session, self.notes, self.notifier)
        self.premium = PremiumController(session.proxy, self.notifier)

    @classmethod
    def for_user(
        cls,
        user: AppUser,
        settings: Optional[ClientSettings] = None,
        access_token: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ) -> "NotesApp":
        session = ClientSession.from_settings(user, settings=settings, access_token=access_token)
        return cls(session, notifier=notifier)

    @property
    def user(self) -> AppUser:
        return self.session.user

    @property
    def mode(self) -> BackendMode:
        return self.session.mode

    @property
    def current_note(self) -> Optional[Note]:
        return self.notes.current_note

    @property
    def visible_attachments(self) -> List[Attachment]:
        return self.attachments.visible_attachments

    async def start(self) -> BackendMode:
        """Connect, load the user's notes and check premium status."""
        mode = await self.session.connect()
        logger.info(f"Starting notes app in {mode.value} mode", extra={"user_id": self.user.uid})
        await self.notes.load_all(self.user.uid)
        await self.premium.refresh(self.user.uid)
        return self.session.mode

    async def close(self) -> None:
        await self.session.close()

    # ========== Editor ==========

    async def new_note(self) -> None:
        self.notes.new_note()
        await self.attachments.load_for_note(None)

    async def select_note(self, note_id: str) -> Optional[Note]:
        note = self.notes.select_note(note_id)
        if note is None:
            return None
        await self.attachments.load_for_note(note_id)
        return note

    async def save_current_note(self, title: str, content: str) -> Optional[Note]:
        """Create or update the note in the editor.

        The first save of a new note binds the uploads staged for it.
        """
        note_id = self.notes.current_note_id
        if note_id is not None:
            return await self.notes.update(note_id, title, content)

        saved = await self.notes.create(title, content, self.user.uid)
        if saved is None:
            return None
        self.notes.current_note_id = saved.id
        if self.attachments.temporary_attachments:
            await self.attachments.associate_temporary_with_note(saved.id)
        return saved

    async def delete_current_note(self, confirmed: bool) -> bool:
        note_id = self.notes.current_note_id
        if note_id is None or not confirmed:
            return False
        # Rows go with the note, so collect object paths first
        paths = await self.attachments.storage_paths_for_note(note_id)
        deleted = await self.notes.delete(note_id)
        if deleted:
            await self.attachments.purge_objects(paths)
        return deleted

    async def upload_files(self, files: Iterable[LocalFile]) -> List[Attachment]:
        """Upload one file at a time, in selection order."""
        uploaded = []
        for file in files:
            attachment = await self.attachments.upload(file, self.notes.current_note_id)
            if attachment is not None:
                uploaded.append(attachment)
        return uploaded

    async def preview_url(self, attachment: Attachment) -> Optional[str]:
        return await self.attachments.get_preview_url(attachment)

    async def delete_attachment(self, attachment_id: str) -> bool:
        return await self.attachments.delete(attachment_id)

    # ========== List ==========

    async def set_search_term(self, term: str) -> List[Note]:
        return await self.notes.search(term, self.user.uid)

    def list_items(self) -> List[NoteListItem]:
        current = self.notes.current_note_id
        return [NoteListItem.from_note(n, current_note_id=current) for n in self.notes.filtered_notes]

    # ========== Premium ==========

    async def upgrade(self) -> Optional[str]:
        return await self.premium.start_checkout(self.user.email, self.user.uid)
