"""
Attachment resolution and download.

Parses attachment URLs into their project/drive/type/name components and
fetches the raw bytes of one attachment from the server.
"""

import logging
from typing import Optional, Union
from urllib.parse import urlsplit

from ..client import ComapeoClient
from ..domain.enums import AttachmentType, AttachmentVariant
from ..types import ApiError, AttachmentFetchError, AttachmentPath, AttachmentUrlError

logger = logging.getLogger(__name__)

PHOTO_EXTENSION = ".jpg"
AUDIO_EXTENSION = ".mp3"


def parse_attachment_url(url: str) -> AttachmentPath:
    """
    Split an attachment URL into its path components.

    The path must end in
    ``/projects/{projectId}/attachments/{driveId}/{type}/{name}``; anything
    before ``/projects`` (scheme, host, path prefix) is ignored, as are the
    query string and fragment.

    Raises:
        AttachmentUrlError: If the path does not have that shape
    """
    segments = urlsplit(url).path.split("/")

    # "", "projects", pid, "attachments", drive, type, name
    if len(segments) < 7:
        raise AttachmentUrlError(url)

    projects, project_id, attachments, drive_id, type_, name = segments[-6:]
    if projects != "projects" or attachments != "attachments":
        raise AttachmentUrlError(url)
    if not all((project_id, drive_id, type_, name)):
        raise AttachmentUrlError(url)

    return AttachmentPath(project_id=project_id, drive_id=drive_id, type=type_, name=name)


def get_output_filename(name: str, type_: str, output: Optional[str] = None) -> str:
    """Explicit output wins; otherwise `.jpg` for photos and `.mp3` for anything else."""
    if output:
        return output
    extension = PHOTO_EXTENSION if type_ == AttachmentType.PHOTO.value else AUDIO_EXTENSION
    return f"{name}{extension}"


def download_attachment(
    client: ComapeoClient,
    project_id: str,
    drive_id: str,
    type_: str,
    name: str,
    variant: Optional[Union[AttachmentVariant, str]] = None
) -> bytes:
    """
    Fetch one attachment's bytes.

    Args:
        client: Authenticated API client
        project_id: Project public ID
        drive_id: Drive discovery ID
        type_: Attachment media type
        name: Attachment name
        variant: Optional rendition, sent as ``?variant=``

    Raises:
        AttachmentFetchError: Wrapping the transport or HTTP failure
    """
    path = AttachmentPath(project_id=project_id, drive_id=drive_id, type=type_, name=name).api_path
    params = None
    if variant:
        params = {"variant": variant.value if isinstance(variant, AttachmentVariant) else variant}

    try:
        return client.get_bytes(path, params=params)
    except ApiError as e:
        raise AttachmentFetchError(get_output_filename(name, type_), e) from e
