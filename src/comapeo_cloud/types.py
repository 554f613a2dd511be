"""
Type definitions for the CoMapeo Cloud client.

This module provides the small value objects passed between the attachment
fetcher and the export pipeline, plus the client's exception hierarchy.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class AttachmentPath:
    """Structured reference parsed from an attachment URL."""
    project_id: str
    drive_id: str
    type: str
    name: str

    @property
    def api_path(self) -> str:
        return f"/projects/{self.project_id}/attachments/{self.drive_id}/{self.type}/{self.name}"


@dataclass(frozen=True)
class DownloadedAttachment:
    """Attachment bytes held in memory until staged into the scratch workspace."""
    filename: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class ExportResult:
    """Outcome of one export run.

    Counts are informational only; partial attachment failures do not
    change the success of the export.
    """
    output_path: Path
    feature_count: int = 0
    attachment_count: int = 0
    downloaded_count: int = 0
    failed_filenames: tuple[str, ...] = ()

    @property
    def failed_count(self) -> int:
        return len(self.failed_filenames)


# Client exception hierarchy
class ComapeoError(Exception):
    """Base exception for CoMapeo Cloud client operations."""
    pass


class ApiError(ComapeoError):
    """Request to the CoMapeo Cloud server failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AttachmentUrlError(ComapeoError, ValueError):
    """Attachment URL does not have the expected path shape."""
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid attachment URL format: {url}")


class AttachmentFetchError(ComapeoError):
    """Download of a single attachment failed."""
    def __init__(self, filename: str, cause: Exception):
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to download attachment {filename}: {cause}")


class ScratchWorkspaceError(ComapeoError):
    """Scratch workspace could not be created."""
    pass
