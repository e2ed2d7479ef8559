"""
Data models for the Paperless uploader.

Wire models for the Paperless-ngx API plus the small value objects that
flow through the watch-and-upload pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel


# =====================================================
# Paperless API Models
# =====================================================

class Tag(BaseModel):
    """Tag record as returned by the Paperless tag endpoint."""
    id: int
    name: str


class TagPage(BaseModel):
    """One page of the paginated tag listing."""
    results: List[Tag]
    next: Optional[str] = None


# =====================================================
# Pipeline Models
# =====================================================

class PostUploadAction(str, Enum):
    """What happens to a source file once Paperless accepted it."""
    NONE = ""
    DELETE = "delete"
    MOVE = "move"


class DispositionPolicy(BaseModel):
    """Post-upload action plus its destination folder."""
    action: PostUploadAction = PostUploadAction.NONE
    processed_folder: Path = Path("processed")


@dataclass(slots=True)
class UploadRequest:
    """A single upload attempt for one file."""

    path: Path
    tag_ids: List[int] = field(default_factory=list)


@dataclass(slots=True)
class UploadOutcome:
    """Result of one upload attempt."""

    path: Path
    success: bool
    error: Optional[str] = None
