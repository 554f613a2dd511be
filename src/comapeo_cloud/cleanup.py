"""Scratch workspace management for export runs."""

from __future__ import annotations

import logging
import shutil
import signal
import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from .types import ScratchWorkspaceError

IMAGES_DIRNAME = "images"


def _contains(parent: Path, child: Path) -> bool:
    return child == parent or parent in child.parents


def check_scratch_location(path: Path, out_path: Path) -> None:
    """
    Refuse scratch locations whose removal would destroy other files.

    The workspace is deleted wholesale after an export, so it must not be
    (or contain) the working directory or the output archive.

    Raises:
        ScratchWorkspaceError: If the scratch directory overlaps either
    """
    scratch = path.resolve()
    if _contains(scratch, Path.cwd().resolve()):
        raise ScratchWorkspaceError(
            f"Scratch workspace {path} must not be or contain the working directory"
        )
    if _contains(scratch, out_path.resolve()):
        raise ScratchWorkspaceError(
            f"Output file {out_path} must not be inside scratch workspace {path}"
        )


def create_scratch_workspace(path: Path) -> Path:
    """
    Create the scratch workspace and its images/ subdirectory.

    Existing directories are reused.

    Args:
        path: Scratch workspace root

    Returns:
        Path to the images/ subdirectory

    Raises:
        ScratchWorkspaceError: If the directories cannot be created
    """
    images_dir = path / IMAGES_DIRNAME
    try:
        images_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ScratchWorkspaceError(f"Could not create scratch workspace {path}: {e}") from e
    logging.debug(f"Scratch workspace ready: {path}")
    return images_dir


def remove_scratch_workspace(path: Path) -> bool:
    """
    Remove the scratch workspace and everything in it.

    Failures are logged, never raised.

    Returns:
        True if the workspace is gone afterwards
    """
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
        logging.debug(f"Removed scratch workspace: {path}")
        return True
    except OSError as e:
        logging.warning(f"Could not remove scratch workspace {path}: {e}")
        return False


@contextmanager
def scratch_workspace(path: Path) -> Generator[Path, None, None]:
    """Create the scratch workspace and remove it on every exit path."""
    create_scratch_workspace(path)
    try:
        yield path
    finally:
        logging.info("Cleaning up temporary files...")
        remove_scratch_workspace(path)


@contextmanager
def cleanup_on_signal(path: Path) -> Generator[None, None, None]:
    """
    Remove the scratch workspace when interrupted by SIGINT or SIGTERM.

    Previous handlers are restored on exit. Outside the main thread signal
    handlers cannot be installed, so the block runs unguarded.
    """
    def signal_handler(signum: int, frame) -> None:
        logging.info(f"Received signal {signum}, cleaning up temp files...")
        remove_scratch_workspace(path)
        sys.exit(1)

    previous = {}
    try:
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, signal_handler)
    except ValueError:
        logging.debug("Signal handlers unavailable outside the main thread")

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
