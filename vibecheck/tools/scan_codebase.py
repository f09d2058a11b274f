"""
Tool implementation for scanning a codebase for security hotspots.
"""

import logging
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.exceptions import InvalidInputError
from ..scanners.file_reader import parse_file_inputs, read_files_from_path
from ..scanners.hotspot_collector import collect_security_hotspots, filter_hotspots
from ..scanners.models import HotspotCategory, HotspotPriority, ScannedFile, SecurityHotspot
from ..scanners.npm_audit import DependencyVulnerability, run_npm_audit
from ..scanners.project_context import ProjectContext, detect_project_context
from ..security.prompt_builder import (
    HotspotPrompt,
    build_system_prompt,
    build_user_prompt,
    get_category_cwe_ids,
)

logger = logging.getLogger("vibecheck.tools.scan_codebase")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HotspotFile(BaseModel):
    path: str
    content: str
    size: int


class CategoryHotspot(_CamelModel):
    """A hotspot as returned to the caller, with file contents and CWE references."""

    category: HotspotCategory
    priority: HotspotPriority
    reason: str
    files: list[HotspotFile] = Field(default_factory=list)
    relevant_cwes: list[str] = Field(default_factory=list, alias="relevantCWEs")
    prompts: HotspotPrompt | None = None


class ScanSummary(_CamelModel):
    total_files: int
    security_relevant_files: int
    skipped_files: int
    hotspot_categories: int
    vulnerable_dependencies: int


class ScanCodebaseResult(_CamelModel):
    hotspots: list[CategoryHotspot] = Field(default_factory=list)
    dependency_vulnerabilities: list[DependencyVulnerability] = Field(default_factory=list)
    project_context: ProjectContext
    summary: ScanSummary
    scan_duration: int
    severity_threshold: str | None = None
    audit_error: str | None = None

    def to_output(self) -> dict[str, Any]:
        """Wire form: camelCase keys, absent optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _load_files(path: str | None, files: Sequence[Mapping[str, Any]] | None) -> list[ScannedFile]:
    if path:
        return read_files_from_path(path)
    if files:
        return parse_file_inputs(files)
    raise InvalidInputError("Either path or files must be provided")


def _transform_hotspot(hotspot: SecurityHotspot, prompts: HotspotPrompt | None = None) -> CategoryHotspot:
    return CategoryHotspot(
        category=hotspot.category,
        priority=hotspot.priority,
        reason=hotspot.reason,
        files=[HotspotFile(path=f.path, content=f.content, size=f.size) for f in hotspot.files],
        relevant_cwes=get_category_cwe_ids(hotspot.category),
        prompts=prompts,
    )


async def execute_scan_codebase(
    path: str | None = None,
    files: Sequence[Mapping[str, Any]] | None = None,
    categories: Sequence[HotspotCategory | str] | None = None,
    severity_threshold: str | None = None,
    include_prompts: bool = False,
) -> ScanCodebaseResult:
    """
    Scan a codebase and group its security-relevant files into hotspots.

    Args:
        path: Directory or single file to scan; takes precedence over ``files``
        files: Explicit ``{"path", "content"}`` objects to scan instead of a path
        categories: Only return hotspots in these categories
        severity_threshold: Minimum severity the caller will act on; echoed back only
        include_prompts: Attach the reviewer system/user prompts to each hotspot

    Returns:
        ScanCodebaseResult

    Raises:
        InvalidInputError: If no input was given, the path is invalid, or no files were found
    """
    start_time = time.monotonic()

    scanned = _load_files(path, files)
    if not scanned:
        raise InvalidInputError("No files found to scan")

    root_path = path if path and Path(path).is_dir() else None
    project_context = detect_project_context(scanned, root_path=root_path)

    analysis = collect_security_hotspots(scanned)
    if categories:
        analysis = filter_hotspots(analysis, categories)

    # Content-only input never triggers an audit
    dependency_vulnerabilities: list[DependencyVulnerability] = []
    audit_error = None
    if root_path and project_context.has_package_lock:
        audit_result = await run_npm_audit(root_path)
        if audit_result.error:
            audit_error = audit_result.error
        else:
            dependency_vulnerabilities = audit_result.vulnerabilities

    hotspots = []
    for hotspot in analysis.hotspots:
        prompts = None
        if include_prompts:
            prompts = HotspotPrompt(
                system_prompt=await build_system_prompt(hotspot.category, project_context),
                user_prompt=build_user_prompt(hotspot),
            )
        hotspots.append(_transform_hotspot(hotspot, prompts))

    scan_duration = int((time.monotonic() - start_time) * 1000)
    logger.info(
        f"Scanned {analysis.total_files} files: {len(hotspots)} hotspot categories, "
        f"{len(dependency_vulnerabilities)} vulnerable dependencies",
        extra={"event": "scan_complete", "tool": "scan_codebase", "duration_ms": scan_duration},
    )

    return ScanCodebaseResult(
        hotspots=hotspots,
        dependency_vulnerabilities=dependency_vulnerabilities,
        project_context=project_context,
        summary=ScanSummary(
            total_files=analysis.total_files,
            security_relevant_files=analysis.security_relevant_files,
            skipped_files=len(analysis.skipped_files),
            hotspot_categories=len(hotspots),
            vulnerable_dependencies=len(dependency_vulnerabilities),
        ),
        scan_duration=scan_duration,
        severity_threshold=severity_threshold,
        audit_error=audit_error,
    )
