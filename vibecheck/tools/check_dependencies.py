"""
Tool implementation for a quick npm audit of a project directory.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import Field

from ..core.exceptions import InvalidInputError
from ..scanners.npm_audit import NpmAuditResponse, is_npm_available, run_npm_audit

logger = logging.getLogger("vibecheck.tools.check_dependencies")

NPM_UNAVAILABLE_ERROR = "npm is not available. Please install Node.js/npm."


class CheckDependenciesResult(NpmAuditResponse):
    tool_available: bool = Field(alias="toolAvailable")

    def to_output(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


async def execute_check_dependencies(
    path: str, include_dev_dependencies: bool = False
) -> CheckDependenciesResult:
    """
    Run npm audit against a directory.

    Args:
        path: Directory containing package.json and a lock file
        include_dev_dependencies: Include devDependencies in the audit

    Returns:
        CheckDependenciesResult; audit failures are reported in ``error``

    Raises:
        InvalidInputError: If npm is available but the path is not a directory
    """
    if not await is_npm_available():
        logger.warning(NPM_UNAVAILABLE_ERROR)
        return CheckDependenciesResult(error=NPM_UNAVAILABLE_ERROR, toolAvailable=False)

    if not Path(path).is_dir():
        raise InvalidInputError(f"Directory does not exist: {path}")

    result = await run_npm_audit(path, include_dev_dependencies=include_dev_dependencies)

    return CheckDependenciesResult(
        vulnerabilities=result.vulnerabilities,
        summary=result.summary,
        error=result.error,
        toolAvailable=True,
    )
