"""VCNotebook - notes with attachments, a config proxy and a premium tier."""

__version__ = "1.0.0"
