"""
Client Enumerations

Core enums for the attachment types and variants served by CoMapeo Cloud.
"""

from enum import Enum


class AttachmentType(str, Enum):
    """Media types of observation attachments."""
    PHOTO = "photo"
    AUDIO = "audio"


class AttachmentVariant(str, Enum):
    """Renditions the server can return for an attachment."""
    ORIGINAL = "original"   # Photos and audio
    PREVIEW = "preview"     # Photos only
    THUMBNAIL = "thumbnail" # Photos only
