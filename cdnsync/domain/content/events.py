"""
Content Events

Inbound event shapes produced by the content, theme and storage sources.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ContentSnapshot(BaseModel):
    """State of a content record on one side of a write."""

    path: Optional[List[str]] = Field(
        None, description="Equivalent public paths, canonical first"
    )

    @property
    def primary_path(self) -> Optional[str]:
        """Canonical path, or None when the record has no path."""
        if not self.path:
            return None
        return self.path[0] or None


class ContentChange(BaseModel):
    """Before/after snapshots of a content write. None means absent."""

    before: Optional[ContentSnapshot] = None
    after: Optional[ContentSnapshot] = None


class ThemeChange(BaseModel):
    """Previous and new theme name of the site."""

    before: Optional[str] = None
    after: Optional[str] = None


class StorageObject(BaseModel):
    """An object in the site's file storage."""

    name: str = Field(..., min_length=1, description="Object name in the bucket")
