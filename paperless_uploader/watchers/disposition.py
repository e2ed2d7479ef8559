"""
Post-upload handling of source files.

Once Paperless has accepted a document the local copy is either left
alone, deleted, or moved into the processed folder. Failures are logged
and never reported back as upload failures.
"""

import shutil
from pathlib import Path

from loguru import logger

from paperless_uploader.models.schemas import DispositionPolicy, PostUploadAction


def apply_disposition(policy: DispositionPolicy, file_path: Path) -> None:
    """
    Apply the configured post-upload action to ``file_path``.

    Args:
        policy: Action and processed folder
        file_path: Source file that was uploaded successfully
    """
    file_path = Path(file_path)

    if policy.action == PostUploadAction.DELETE:
        _delete(file_path)
    elif policy.action == PostUploadAction.MOVE:
        _move(file_path, policy.processed_folder)


def _delete(file_path: Path) -> None:
    try:
        file_path.unlink()
    except OSError as e:
        logger.error(f"Failed to delete file {file_path}: {e}")
        return

    logger.info(f"Deleted file {file_path}")


def _move(file_path: Path, processed_folder: Path) -> None:
    if not processed_folder.is_dir():
        try:
            processed_folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create processed folder '{processed_folder}': {e}")
            return

    new_path = processed_folder / file_path.name

    try:
        shutil.move(str(file_path), str(new_path))
    except OSError as e:
        logger.error(f"Failed to move file {file_path} to {new_path}: {e}")
        return

    logger.info(f"Moved file {file_path} to {new_path}")
