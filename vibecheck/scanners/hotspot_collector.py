"""Hotspot collection: deterministic triage of files by security relevance.

No AI is involved here. The collector decides which files are worth
sending to the external reviewer and groups them by category.
"""

import logging
from collections.abc import Iterable, Sequence

from .models import (
    HotspotAnalysis,
    HotspotCategory,
    HotspotPriority,
    ScannedFile,
    SecurityHotspot,
)
from .patterns import CATEGORY_PATTERNS, SKIP_PATTERNS, SkipPattern, get_category_pattern

logger = logging.getLogger("vibecheck.hotspots")

# Position of each category in the registry, used as the sort tie-break
_CATEGORY_ORDER = {pattern.category: index for index, pattern in enumerate(CATEGORY_PATTERNS)}


def should_skip_file(file: ScannedFile) -> SkipPattern | None:
    """Return the first skip pattern matching the file path, if any."""
    for pattern in SKIP_PATTERNS:
        if pattern.pattern.search(file.path):
            return pattern
    return None


def categorize_file(file: ScannedFile) -> list[HotspotCategory]:
    """Return every category the file matches, in registry order."""
    return [
        pattern.category
        for pattern in CATEGORY_PATTERNS
        if pattern.matches(file.path, file.content)
    ]


def _category_priority(category: HotspotCategory) -> HotspotPriority:
    pattern = get_category_pattern(category)
    return pattern.priority if pattern else HotspotPriority.MEDIUM


def _category_description(category: HotspotCategory) -> str:
    pattern = get_category_pattern(category)
    return pattern.description if pattern else category.value


def collect_security_hotspots(files: Sequence[ScannedFile]) -> HotspotAnalysis:
    """Classify files into prioritized security hotspots.

    Each file is first tested against the skip registry; skipped files are
    recorded and never categorized. Remaining files are tested against
    every category, so one file can land in several hotspots.

    Args:
        files: Files to classify

    Returns:
        HotspotAnalysis with hotspots sorted by priority (critical first,
        ties in category declaration order)
    """
    buckets: dict[HotspotCategory, list[ScannedFile]] = {}
    skipped_files: list[str] = []

    for file in files:
        skip = should_skip_file(file)
        if skip:
            logger.debug(f"Skipping {file.path}: {skip.reason}")
            skipped_files.append(file.path)
            continue

        for category in categorize_file(file):
            buckets.setdefault(category, []).append(file)

    hotspots = [
        SecurityHotspot(
            category=category,
            files=category_files,
            priority=_category_priority(category),
            reason=_category_description(category),
        )
        for category, category_files in buckets.items()
    ]
    hotspots.sort(key=lambda h: (h.priority.rank, _CATEGORY_ORDER[h.category]))

    # Distinct paths; a multi-category file counts once
    relevant_paths = {file.path for hotspot in hotspots for file in hotspot.files}

    logger.info(
        f"Classified {len(files)} files: {len(relevant_paths)} security-relevant, "
        f"{len(skipped_files)} skipped, {len(hotspots)} categories"
    )

    return HotspotAnalysis(
        hotspots=hotspots,
        skipped_files=skipped_files,
        total_files=len(files),
        security_relevant_files=len(relevant_paths),
    )


def filter_hotspots(
    analysis: HotspotAnalysis, categories: Iterable[HotspotCategory | str]
) -> HotspotAnalysis:
    """Restrict an analysis to the given categories.

    This is a view, not a re-analysis: ``skipped_files``, ``total_files``
    and ``security_relevant_files`` keep the values computed over the
    full file set.
    """
    wanted = {HotspotCategory(category) for category in categories}
    return analysis.model_copy(
        update={"hotspots": [h for h in analysis.hotspots if h.category in wanted]}
    )
