"""File attachments: uploads, staging for unsaved notes, previews."""

import logging
import mimetypes
import os
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from vcnotebook.client.backend import BackendError, parse_row, parse_rows
from vcnotebook.client.messages import Notifier
from vcnotebook.client.notes import NoteSyncController
from vcnotebook.client.session import ClientSession
from vcnotebook.schemas.note import Attachment, format_file_size

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """A file picked by the user, ready to upload."""

    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        ext = os.path.splitext(self.name)[1].lstrip(".").lower()
        return ext or "bin"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LocalFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            data=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


class AttachmentController:
    """Keeps the permanent and staged attachment lists for the editor.

    Uploads made while the current note is unsaved are staged in
    `temporary_attachments` and bound to the note on its first save.
    """

    def __init__(
        self,
        session: ClientSession,
        notes: NoteSyncController,
        notifier: Optional[Notifier] = None,
    ):
        self.session = session
        self.notes = notes
        self.notifier = notifier or notes.notifier
        self.attachments: List[Attachment] = []
        self.temporary_attachments: List[Attachment] = []
        self.preview_urls: Dict[str, str] = {}

    @property
    def table(self) -> str:
        return self.session.settings.ATTACHMENTS_TABLE

    @property
    def bucket(self) -> str:
        return self.session.settings.STORAGE_BUCKET

    @property
    def visible_attachments(self) -> List[Attachment]:
        """Attachments for the editor: staged ones while the note is unsaved."""
        if self.notes.current_note_id is None:
            return self.temporary_attachments
        return self.attachments

    def storage_path_for(self, file: LocalFile) -> str:
        timestamp = int(time.time() * 1000)
        return f"{self.session.user_id}/{timestamp}-{secrets.token_hex(6)}.{file.extension}"

    # ========== Upload ==========

    async def upload(self, file: LocalFile, current_note_id: Optional[str]) -> Optional[Attachment]:
        max_size = self.session.settings.MAX_FILE_UPLOAD_SIZE
        if file.size > max_size:
            self.notifier.error(
                f'File "{file.name}" is too large. Maximum size is {format_file_size(max_size)}.'
            )
            return None

        await self.session.ensure_ready()
        if not self.session.is_hosted:
            self.notifier.error("File uploads are not available offline")
            return None

        backend = self.session.backend
        storage_path = self.storage_path_for(file)

        try:
            await backend.upload(self.bucket, storage_path, file.data, file.content_type)

            if current_note_id is not None:
                rows = await backend.insert(
                    self.table,
                    [
                        {
                            "note_id": current_note_id,
                            "user_id": self.session.user_id,
                            "file_name": file.name,
                            "file_size": file.size,
                            "file_type": file.content_type,
                            "storage_path": storage_path,
                            "storage_bucket": self.bucket,
                        }
                    ],
                )
                if not rows:
                    raise BackendError("Insert returned no row")
                attachment = parse_row(Attachment, rows[0])
                self.attachments.insert(0, attachment)
            else:
                attachment = Attachment(
                    id=f"temp-{uuid.uuid4()}",
                    note_id=None,
                    user_id=self.session.user_id,
                    file_name=file.name,
                    file_size=file.size,
                    file_type=file.content_type,
                    storage_path=storage_path,
                    storage_bucket=self.bucket,
                    created_at=datetime.now(timezone.utc),
                    is_temporary=True,
                )
                self.temporary_attachments.append(attachment)
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error(f'Error uploading "{file.name}": {e.message}')
            return None

        logger.info(
            "Attachment uploaded",
            extra={"storage_path": storage_path, "size": file.size, "temporary": attachment.is_temporary},
        )

        if attachment.is_media:
            await self.get_preview_url(attachment)

        self.notifier.success(f'"{file.name}" uploaded')
        return attachment

    async def associate_temporary_with_note(self, note_id: str) -> List[Attachment]:
        """Bind every staged upload to a freshly saved note in one insert.

        On failure the staged records stay as they are.
        """
        if not self.temporary_attachments:
            return []
        await self.session.ensure_ready()
        if not self.session.is_hosted:
            self.notifier.error("Could not attach files: backend unavailable")
            return []

        staged = list(self.temporary_attachments)
        try:
            rows = await self.session.backend.insert(
                self.table, [a.to_row(note_id) for a in staged]
            )
            saved = parse_rows(Attachment, rows)
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error(f"Error saving attachments: {e.message}")
            return []

        # Previews were keyed by the temporary ids; storage paths are unique per upload
        staged_ids = {a.storage_path: a.id for a in staged}
        for attachment in saved:
            url = self.preview_urls.pop(staged_ids.get(attachment.storage_path), None)
            if url:
                self.preview_urls[attachment.id] = url

        self.attachments = saved + self.attachments
        self.temporary_attachments = []
        logger.info(f"Associated {len(saved)} staged attachments with note {note_id}")
        return saved

    # ========== Loading ==========

    async def load_for_note(self, note_id: Optional[str]) -> List[Attachment]:
        """Switch the permanent list to `note_id`.

        For an unsaved note the staged list is returned untouched. Selecting a
        persisted note abandons whatever was staged.
        """
        self.attachments = []
        if note_id is None:
            return self.temporary_attachments

        await self.discard_temporary()

        await self.session.ensure_ready()
        if not self.session.is_hosted:
            return self.attachments

        try:
            rows = await self.session.backend.select(
                self.table,
                filters={"note_id": note_id, "user_id": self.session.user_id},
                order="created_at",
            )
            self.attachments = parse_rows(Attachment, rows)
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error("Error loading attachments")
        return self.attachments

    async def discard_temporary(self) -> None:
        """Drop staged uploads and try to remove their objects."""
        if not self.temporary_attachments:
            return
        staged = self.temporary_attachments
        self.temporary_attachments = []
        for attachment in staged:
            self.preview_urls.pop(attachment.id, None)
        await self._remove_objects([a.storage_path for a in staged])

    # ========== Delete ==========

    async def delete(self, attachment_id: str) -> bool:
        temporary = next((a for a in self.temporary_attachments if a.id == attachment_id), None)
        if temporary is not None:
            self.temporary_attachments = [
                a for a in self.temporary_attachments if a.id != attachment_id
            ]
            self.preview_urls.pop(attachment_id, None)
            await self._remove_objects([temporary.storage_path])
            return True

        attachment = next((a for a in self.attachments if a.id == attachment_id), None)
        if attachment is None:
            return False

        await self.session.ensure_ready()
        if not self.session.is_hosted:
            self.notifier.error("Error deleting attachment: backend unavailable")
            return False

        await self._remove_objects([attachment.storage_path])
        try:
            await self.session.backend.delete(
                self.table, filters={"id": attachment_id, "user_id": self.session.user_id}
            )
        except BackendError as e:
            self.session.handle_backend_error(e)
            self.notifier.error("Error deleting attachment")
            return False

        self.attachments = [a for a in self.attachments if a.id != attachment_id]
        self.preview_urls.pop(attachment_id, None)
        self.notifier.success("Attachment deleted")
        return True

    async def storage_paths_for_note(self, note_id: str) -> List[str]:
        """Object paths of every attachment row of a note; empty on failure."""
        if not self.session.is_hosted:
            return []
        try:
            rows = await self.session.backend.select(
                self.table, filters={"note_id": note_id, "user_id": self.session.user_id}
            )
        except BackendError as e:
            logger.warning(f"Could not list attachments of note {note_id}: {e}")
            return []
        return [row["storage_path"] for row in rows if isinstance(row, dict) and row.get("storage_path")]

    async def purge_objects(self, paths: List[str]) -> None:
        """Remove stored objects left behind by a deleted note. Best effort."""
        self.attachments = []
        await self._remove_objects(paths)

    async def _remove_objects(self, paths: List[str]) -> None:
        if not paths or not self.session.is_hosted:
            return
        try:
            await self.session.backend.remove(self.bucket, paths)
        except BackendError as e:
            logger.warning(f"Storage removal failed for {len(paths)} objects: {e}")

    # ========== Preview ==========

    async def get_preview_url(self, attachment: Attachment) -> Optional[str]:
        """Fresh signed read URL for the attachment; None on failure."""
        if not self.session.is_hosted:
            return None
        try:
            url = await self.session.backend.create_signed_url(
                attachment.storage_bucket or self.bucket,
                attachment.storage_path,
                self.session.settings.SIGNED_URL_EXPIRES_IN,
            )
        except BackendError as e:
            logger.warning(f"Error creating preview URL: {e}")
            return None
        self.preview_urls[attachment.id] = url
        return url
