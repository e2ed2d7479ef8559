"""Resolution of configured tag names against the Paperless tag catalog."""

from typing import Dict, Iterable, List

from loguru import logger

from paperless_uploader.models.schemas import Tag


def build_tag_catalog(tags: Iterable[Tag]) -> Dict[str, int]:
    """Map tag name to tag id."""
    return {tag.name: tag.id for tag in tags}


def resolve_tag_ids(catalog: Dict[str, int], names: Iterable[str]) -> List[int]:
    """
    Convert configured tag names to Paperless tag ids.

    Names missing from the catalog are dropped with a warning.

    Args:
        catalog: Tag name to id mapping
        names: Configured tag names

    Returns:
        Tag ids in configuration order, without duplicates
    """
    tag_ids: List[int] = []

    for name in names:
        tag_id = catalog.get(name)
        if tag_id is None:
            logger.warning(f"Tag '{name}' not found in Paperless and will be ignored.")
            continue
        if tag_id not in tag_ids:
            tag_ids.append(tag_id)

    return tag_ids
