"""
Domain Models and Types

This module contains the core domain models and enumerations used by the client.

Models:
- Observation: Observation snapshot with tags, position and attachments
- Attachment: Attachment reference embedded in an observation
- RemoteDetectionAlert: Alert payload for the remoteDetectionAlerts endpoint

Enums:
- AttachmentType: Attachment media types (photo, audio)
- AttachmentVariant: Attachment renditions (original, preview, thumbnail)
"""

from .enums import AttachmentType, AttachmentVariant
from .models import Attachment, Observation, PointGeometry, RemoteDetectionAlert

__all__ = [
    "Attachment", "Observation", "PointGeometry", "RemoteDetectionAlert",
    "AttachmentType", "AttachmentVariant"
]
