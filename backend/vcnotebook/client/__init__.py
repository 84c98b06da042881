"""Client core: note sync, attachments, offline fallback and premium status."""

from vcnotebook.client.app import NotesApp
from vcnotebook.client.attachments import AttachmentController, LocalFile
from vcnotebook.client.backend import BackendError, BackendUnavailableError, HostedBackend
from vcnotebook.client.local_store import LocalNoteStore, LocalStoreError
from vcnotebook.client.messages import Message, MessageLevel, Notifier
from vcnotebook.client.notes import NoteSyncController
from vcnotebook.client.premium import PremiumController
from vcnotebook.client.proxy import ProxyClient, ProxyRequestError
from vcnotebook.client.session import AppUser, BackendMode, ClientSession

__all__ = [
    "AppUser",
    "AttachmentController",
    "BackendError",
    "BackendMode",
    "BackendUnavailableError",
    "ClientSession",
    "HostedBackend",
    "LocalFile",
    "LocalNoteStore",
    "LocalStoreError",
    "Message",
    "MessageLevel",
    "NoteSyncController",
    "NotesApp",
    "Notifier",
    "PremiumController",
    "ProxyClient",
    "ProxyRequestError",
]
