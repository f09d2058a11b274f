"""Pydantic models for file scanning and hotspot classification.

``ScannedFile`` is the record produced by the file reader; the classifier
and prompt builder only read it. ``SecurityHotspot`` and
``HotspotAnalysis`` are the classifier's output.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class HotspotCategory(str, Enum):
    """Security categories, in declaration (tie-break) order."""

    AUTH = "auth"
    API = "api"
    DATABASE_RULES = "database-rules"
    SECRETS_ENV = "secrets-env"
    DEPENDENCIES = "dependencies"
    DATA_FLOW = "data-flow"


class HotspotPriority(str, Enum):
    """Review priority of a category."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        """Sort key: critical first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    HotspotPriority.CRITICAL: 0,
    HotspotPriority.HIGH: 1,
    HotspotPriority.MEDIUM: 2,
}


class ScannedFile(BaseModel):
    """A file read from the codebase under review.

    Attributes:
        path: Relative, forward-slash separated path.
        content: Full text content.
        size: Size in bytes.
        extension: Lowercase extension including the leading dot, or "".
    """

    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    size: int
    extension: str = ""


class SecurityHotspot(BaseModel):
    """Files that matched one security category.

    Files keep scan order. The same file may appear in several hotspots.
    """

    model_config = ConfigDict(frozen=True)

    category: HotspotCategory
    files: list[ScannedFile] = Field(default_factory=list)
    priority: HotspotPriority
    reason: str


class HotspotAnalysis(BaseModel):
    """Result of classifying a set of files.

    Attributes:
        hotspots: Hotspots sorted critical, high, medium; ties keep
            category declaration order.
        skipped_files: Paths excluded by a skip pattern.
        total_files: Number of files given to the classifier.
        security_relevant_files: Distinct paths across all hotspots.
    """

    hotspots: list[SecurityHotspot] = Field(default_factory=list)
    skipped_files: list[str] = Field(default_factory=list)
    total_files: int = 0
    security_relevant_files: int = 0

    @property
    def categories(self) -> list[HotspotCategory]:
        return [hotspot.category for hotspot in self.hotspots]
