import asyncio
import json
import logging
import sys
from typing import Annotated, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from . import __version__
from .constants import LOG_FILE, LOG_JSON, LOG_LEVEL, MCP_DEFAULT_PORT, MCP_TRANSPORT
from .core import InvalidInputError, configure_logging
from .tools import execute_check_dependencies, execute_scan_codebase

# Logging goes to stderr to avoid interfering with JSON-RPC on stdout
configure_logging(LOG_LEVEL, LOG_FILE, LOG_JSON)
logger = logging.getLogger("vibecheck.server")

# Initialize FastMCP server
mcp: FastMCP = FastMCP("vibecheck")

CategoryName = Literal["auth", "api", "database-rules", "secrets-env", "dependencies", "data-flow"]
SeverityName = Literal["critical", "high", "medium", "low"]


@mcp.tool
async def scan_codebase(
    path: Annotated[
        str | None,
        Field(
            description="Absolute path to the repository, directory, or single file to scan",
            default=None,
        ),
    ] = None,
    files: Annotated[
        list[dict[str, str]] | None,
        Field(
            description="File contents provided directly as [{'path': ..., 'content': ...}] (alternative to path)",
            default=None,
        ),
    ] = None,
    categories: Annotated[
        list[CategoryName] | None,
        Field(
            description="Limit the scan to specific categories (default: all)",
            default=None,
        ),
    ] = None,
    severity_threshold: Annotated[
        SeverityName | None,
        Field(
            description="Minimum severity of findings you intend to act on; echoed back, not applied here",
            default=None,
        ),
    ] = None,
    include_prompts: Annotated[
        bool,
        Field(
            description="Attach expert system/user review prompts (with live CWE context) to each hotspot"
        ),
    ] = False,
) -> str:
    """Find the security-relevant files of a codebase and group them for AI review.

    USE THIS TOOL WHEN:
    - You want to security-review a JavaScript/TypeScript (or similar) project
    - You need to know which files handle auth, APIs, database rules, secrets, or untrusted data
    - You want ready-made expert review prompts per security category

    DO NOT USE THIS TOOL FOR:
    - A quick dependency-only audit (use check_dependencies instead)

    Categories analyzed:
    - auth: authentication and authorization
    - api: route handlers and endpoints
    - database-rules: Firebase/Supabase rules, schemas, RLS policies
    - secrets-env: environment files and hardcoded credentials
    - dependencies: package manifests (plus npm audit when a lock file exists)
    - data-flow: request input reaching queries, commands, or HTML

    Each hotspot lists its files, priority, and relevant CWE IDs. No
    vulnerabilities are detected here: the hotspots and prompts are input
    for your own review."""
    logger.info(f"Scanning {path or f'{len(files or [])} provided files'}")

    try:
        result = await execute_scan_codebase(
            path=path,
            files=files,
            categories=categories,
            severity_threshold=severity_threshold,
            include_prompts=include_prompts,
        )
    except InvalidInputError as e:
        logger.warning(f"Invalid scan_codebase input: {e}", extra={"tool": "scan_codebase"})
        raise ToolError(str(e)) from e

    return json.dumps(result.to_output(), indent=2)


@mcp.tool
async def check_dependencies(
    path: Annotated[
        str,
        Field(description="Path to directory containing package.json and package-lock.json"),
    ],
    include_dev_dependencies: Annotated[
        bool,
        Field(description="Include devDependencies in the audit"),
    ] = False,
) -> str:
    """Run npm audit to check dependencies for known vulnerabilities.

    Uses the GitHub Advisory Database (same as npm audit).
    Returns known CVEs, severity levels, and patched versions.

    Requirements:
    - npm must be installed
    - Directory must contain package-lock.json (or yarn.lock/pnpm-lock.yaml)"""
    logger.info(f"Checking dependencies in {path}")

    try:
        result = await execute_check_dependencies(path, include_dev_dependencies)
    except InvalidInputError as e:
        logger.warning(f"Invalid check_dependencies input: {e}", extra={"tool": "check_dependencies"})
        raise ToolError(str(e)) from e

    return json.dumps(result.to_output(), indent=2)


def main() -> None:
    """Run the MCP server over stdio, or streamable HTTP when configured."""
    print(f"VibeCheck MCP Server v{__version__}", file=sys.stderr)
    print("=" * 50, file=sys.stderr)

    try:
        if MCP_TRANSPORT == "http":
            print(f"Starting HTTP streaming server on port {MCP_DEFAULT_PORT}...", file=sys.stderr)
            print(
                f"HTTP endpoint will be available at: http://localhost:{MCP_DEFAULT_PORT}/mcp",
                file=sys.stderr,
            )
            asyncio.run(
                mcp.run_http_async(transport="streamable-http", host="0.0.0.0", port=MCP_DEFAULT_PORT)
            )
        else:
            mcp.run(transport="stdio")
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
