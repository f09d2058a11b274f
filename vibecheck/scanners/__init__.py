"""File reading, hotspot classification, and dependency auditing."""

from .file_reader import (
    get_package_json,
    has_package_lock,
    parse_file_inputs,
    read_files_from_path,
)
from .hotspot_collector import (
    categorize_file,
    collect_security_hotspots,
    filter_hotspots,
    should_skip_file,
)
from .models import (
    HotspotAnalysis,
    HotspotCategory,
    HotspotPriority,
    ScannedFile,
    SecurityHotspot,
)
from .npm_audit import (
    AuditSummary,
    DependencyVulnerability,
    NpmAuditResponse,
    is_npm_available,
    run_npm_audit,
)
from .patterns import CATEGORY_PATTERNS, SKIP_PATTERNS, CategoryPattern, SkipPattern
from .project_context import ProjectContext, detect_project_context

__all__ = [
    # Models
    "ScannedFile",
    "HotspotCategory",
    "HotspotPriority",
    "SecurityHotspot",
    "HotspotAnalysis",
    "ProjectContext",
    # Patterns
    "CATEGORY_PATTERNS",
    "SKIP_PATTERNS",
    "CategoryPattern",
    "SkipPattern",
    # Classification
    "should_skip_file",
    "categorize_file",
    "collect_security_hotspots",
    "filter_hotspots",
    # File reading
    "read_files_from_path",
    "parse_file_inputs",
    "get_package_json",
    "has_package_lock",
    "detect_project_context",
    # npm audit
    "run_npm_audit",
    "is_npm_available",
    "DependencyVulnerability",
    "AuditSummary",
    "NpmAuditResponse",
]
