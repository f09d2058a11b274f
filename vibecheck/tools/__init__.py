"""MCP tool implementations."""

from .check_dependencies import CheckDependenciesResult, execute_check_dependencies
from .scan_codebase import CategoryHotspot, ScanCodebaseResult, execute_scan_codebase

__all__ = [
    "execute_scan_codebase",
    "execute_check_dependencies",
    "ScanCodebaseResult",
    "CategoryHotspot",
    "CheckDependenciesResult",
]
