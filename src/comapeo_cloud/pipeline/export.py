"""
Exporter - GeoJSON/ZIP Project Export

Fetches every observation of a project, downloads all attachments
concurrently, and packages a GeoJSON FeatureCollection together with the
attachment binaries into a single zip archive.

Attachment failures are isolated: a failed download is logged and left out
of both the feature's `$photos` list and the archive, and the export carries
on. Failing to fetch the observation list, to create the scratch workspace,
or to write the archive aborts the export.
"""

import logging
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from ..cleanup import IMAGES_DIRNAME, check_scratch_location, scratch_workspace
from ..client import ComapeoClient
from ..config.settings import DEFAULT_EXPORT_OUTPUT, DEFAULT_SCRATCH_DIR
from ..domain.models import Attachment, Observation
from ..types import (
    AttachmentFetchError,
    AttachmentUrlError,
    DownloadedAttachment,
    ExportResult,
)
from ..utils import timer
from .attachments import download_attachment, get_output_filename, parse_attachment_url
from .transform import Transformer

logger = logging.getLogger(__name__)

GEOJSON_FILENAME = "comapeo_data.geojson"

# Per-task outcome of the download fan-out
Outcome = Union[DownloadedAttachment, AttachmentFetchError, AttachmentUrlError]


class Exporter:
    """
    Project exporter producing a zip archive of GeoJSON plus attachments.

    The scratch workspace is created after the observation list has been
    fetched and is removed on every exit path once it exists.
    """

    def __init__(
        self,
        client: ComapeoClient,
        project_id: str,
        out_path: Optional[Path] = None,
        scratch_dir: Optional[Path] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize exporter.

        Args:
            client: Authenticated API client
            project_id: Project public ID
            out_path: Archive path (defaults to comapeo_export.zip)
            scratch_dir: Scratch workspace root (defaults to tmp_export)
            max_workers: Cap on concurrent downloads; one per attachment if None
        """
        self.client = client
        self.project_id = project_id
        self.out_path = Path(out_path) if out_path else Path(DEFAULT_EXPORT_OUTPUT)
        self.scratch_dir = Path(scratch_dir) if scratch_dir else Path(DEFAULT_SCRATCH_DIR)
        self.max_workers = max_workers
        self.transformer = Transformer()

    @timer
    def export(self) -> ExportResult:
        """
        Run the export end to end.

        Returns:
            ExportResult with the archive path and attachment counts

        Raises:
            ApiError: If the observation list cannot be fetched
            ScratchWorkspaceError: If the scratch workspace overlaps the
                working directory or the output, or cannot be created
            OSError: If the GeoJSON or the archive cannot be written
        """
        check_scratch_location(self.scratch_dir, self.out_path)

        logger.info("Fetching observations...")
        observations = self.client.list_observations(self.project_id)
        logger.info(f"Found {len(observations)} observations")

        logger.info("Creating temporary directory...")
        with scratch_workspace(self.scratch_dir) as workspace:
            images_dir = workspace / IMAGES_DIRNAME

            outcomes = self.download_attachments(observations)
            photos, failed = self.stage_attachments(outcomes, images_dir)

            features = [
                self.transformer.to_feature(observation, files)
                for observation, files in zip(observations, photos)
            ]
            geojson_path = self.write_geojson(self.transformer.to_feature_collection(features), workspace)
            staged = [filename for files in photos for filename in files]
            self.write_archive(geojson_path, images_dir, staged)

        attachment_count = sum(len(row) for row in outcomes)
        logger.info(f"Export completed successfully: {self.out_path}")
        return ExportResult(
            output_path=self.out_path,
            feature_count=len(features),
            attachment_count=attachment_count,
            downloaded_count=sum(len(files) for files in photos),
            failed_filenames=tuple(failed),
        )

    def download_attachments(self, observations: list[Observation]) -> list[list[Outcome]]:
        """
        Download every attachment of every observation concurrently.

        Waits for all downloads to settle. Each task yields either the
        downloaded attachment or the error that stopped it, so one failure
        never cancels its siblings.

        Returns:
            One list of outcomes per observation, in attachment order
        """
        total = sum(len(observation.attachments) for observation in observations)
        if total == 0:
            return [[] for _ in observations]

        workers = min(self.max_workers, total) if self.max_workers else total
        logger.debug(f"Downloading {total} attachments with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = []
            for observation in observations:
                logger.info(f"Processing observation {observation.doc_id}...")
                futures.append([
                    executor.submit(self._fetch, attachment)
                    for attachment in observation.attachments
                ])

        return [[future.result() for future in row] for row in futures]

    def _fetch(self, attachment: Attachment) -> Outcome:
        try:
            reference = parse_attachment_url(attachment.url)
        except AttachmentUrlError as e:
            logger.warning(f"Skipping attachment with unrecognized URL {attachment.url}")
            return e

        filename = get_output_filename(reference.name, reference.type)
        logger.info(f"Downloading {filename}...")
        try:
            data = download_attachment(
                self.client,
                self.project_id,
                reference.drive_id,
                reference.type,
                reference.name,
            )
        except AttachmentFetchError as e:
            logger.warning(f"Failed to download attachment {filename}: {e.cause}")
            return e
        except Exception as e:
            # Anything else escaping a worker would abort the join
            logger.warning(f"Failed to download attachment {filename}: {e}")
            return AttachmentFetchError(filename, e)

        logger.info(f"Successfully downloaded {filename}")
        return DownloadedAttachment(filename=filename, data=data)

    def stage_attachments(
        self,
        outcomes: list[list[Outcome]],
        images_dir: Path
    ) -> tuple[list[list[str]], list[str]]:
        """
        Write downloaded attachments into the scratch images/ directory.

        Returns:
            Tuple of (staged filenames per observation, failed attachment labels)
        """
        photos: list[list[str]] = []
        failed: list[str] = []

        for row in outcomes:
            staged = []
            for outcome in row:
                if isinstance(outcome, AttachmentUrlError):
                    failed.append(outcome.url)
                    continue
                if isinstance(outcome, AttachmentFetchError):
                    failed.append(outcome.filename)
                    continue
                try:
                    (images_dir / outcome.filename).write_bytes(outcome.data)
                except OSError as e:
                    logger.warning(f"Failed to stage attachment {outcome.filename}: {e}")
                    failed.append(outcome.filename)
                    continue
                staged.append(outcome.filename)
            photos.append(staged)

        return photos, failed

    def write_geojson(self, collection: dict, workspace: Path) -> Path:
        logger.info("Writing GeoJSON file...")
        geojson_path = workspace / GEOJSON_FILENAME
        geojson_path.write_text(self.transformer.dumps(collection), encoding="utf-8")
        return geojson_path

    def write_archive(self, geojson_path: Path, images_dir: Path, filenames: list[str]) -> Path:
        """
        Package the GeoJSON and staged attachments into the output archive.

        Only the given filenames are taken from images/, so leftovers in a
        reused scratch workspace are not archived. A partially written
        archive is removed before the error propagates.
        """
        logger.info("Creating ZIP archive...")
        self.out_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with zipfile.ZipFile(self.out_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.write(geojson_path, arcname=GEOJSON_FILENAME)
                for filename in sorted(set(filenames)):
                    archive.write(images_dir / filename, arcname=f"{IMAGES_DIRNAME}/{filename}")
        except Exception:
            self.out_path.unlink(missing_ok=True)
            raise

        return self.out_path
