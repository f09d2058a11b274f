"""npm audit integration.

Runs ``npm audit --json`` (GitHub Advisory Database) against a directory
with a lock file and normalizes the report. Failures never raise: they are
returned in the ``error`` field of the response.
"""

import asyncio
import contextlib
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..constants import LOCK_FILES, NPM_AUDIT_TIMEOUT, NPM_PROBE_TIMEOUT
from ..core.exceptions import AuditError

logger = logging.getLogger("vibecheck.npm_audit")

Severity = Literal["critical", "high", "medium", "low", "info"]

SEVERITY_MAP: dict[str, Severity] = {
    "critical": "critical",
    "high": "high",
    "moderate": "medium",
    "low": "low",
    "info": "info",
}

NO_LOCK_FILE_ERROR = "No lock file found. Run npm install, yarn install, or pnpm install first."


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DependencyVulnerability(_CamelModel):
    """A vulnerable package reported by the audit."""

    package_name: str
    version: str = ""
    severity: Severity = "low"
    title: str
    description: str
    cve_ids: list[str] = Field(default_factory=list)
    patched_version: str | None = None
    url: str | None = None


class AuditSummary(BaseModel):
    """Vulnerability counts by npm severity."""

    info: int = 0
    low: int = 0
    moderate: int = 0
    high: int = 0
    critical: int = 0
    total: int = 0


class NpmAuditResponse(BaseModel):
    vulnerabilities: list[DependencyVulnerability] = Field(default_factory=list)
    summary: AuditSummary = Field(default_factory=AuditSummary)
    error: str | None = None


def map_severity(npm_severity: str | None) -> Severity:
    """Map an npm severity to ours; unknown values become "low"."""
    return SEVERITY_MAP.get((npm_severity or "").lower(), "low")


def _transform_vulnerability(name: str, vuln: dict[str, Any]) -> DependencyVulnerability:
    npm_severity = str(vuln.get("severity") or "low")

    patched_version = None
    fix_available = vuln.get("fixAvailable")
    if isinstance(fix_available, dict) and fix_available.get("version"):
        patched_version = str(fix_available["version"])

    # `via` mixes names of vulnerable transitive packages (str) and advisories (dict)
    via = vuln.get("via") if isinstance(vuln.get("via"), list) else []
    via_names = [v for v in via if isinstance(v, str)]
    advisories = [v for v in via if isinstance(v, dict)]

    advisory_titles = [str(a["title"]) for a in advisories if a.get("title")]
    description = ", ".join(via_names) or "; ".join(advisory_titles) or f"Vulnerability in {name}"

    cve_ids: list[str] = []
    for advisory in advisories:
        cves = advisory.get("cve")
        if isinstance(cves, str):
            cves = [cves]
        elif not isinstance(cves, list):
            cves = []
        for cve in cves:
            if cve and cve not in cve_ids:
                cve_ids.append(str(cve))

    url = next((str(a["url"]) for a in advisories if a.get("url")), None)

    return DependencyVulnerability(
        package_name=name,
        version=str(vuln.get("range") or ""),
        severity=map_severity(npm_severity),
        title=f"{npm_severity.upper()}: {name}",
        description=description,
        cve_ids=cve_ids,
        patched_version=patched_version,
        url=url,
    )


def parse_audit_output(stdout: str) -> NpmAuditResponse:
    """Parse ``npm audit --json`` output.

    Raises:
        AuditError: If the output is not an npm audit report
    """
    try:
        data = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise AuditError(f"Could not parse npm audit output: {e}") from e

    if not isinstance(data, dict):
        raise AuditError("Unexpected npm audit output format")
    if "error" in data and "vulnerabilities" not in data:
        error = data["error"]
        summary = error.get("summary") if isinstance(error, dict) else error
        raise AuditError(f"npm audit reported an error: {summary}")

    raw_vulns = data.get("vulnerabilities")
    if not isinstance(raw_vulns, dict):
        raw_vulns = {}
    vulnerabilities = [
        _transform_vulnerability(name, vuln)
        for name, vuln in raw_vulns.items()
        if isinstance(vuln, dict)
    ]

    metadata = data.get("metadata")
    counts = metadata.get("vulnerabilities") if isinstance(metadata, dict) else None
    if not isinstance(counts, dict):
        counts = {}
    try:
        summary = AuditSummary(**{k: v for k, v in counts.items() if k in AuditSummary.model_fields})
    except ValidationError as e:
        raise AuditError(f"Unexpected npm audit metadata: {e}") from e

    return NpmAuditResponse(vulnerabilities=vulnerabilities, summary=summary)


def find_lock_file(path: str) -> Path | None:
    root = Path(path)
    for lock in LOCK_FILES:
        candidate = root / lock
        if candidate.is_file():
            return candidate
    return None


async def run_npm_audit(
    path: str,
    include_dev_dependencies: bool = False,
    timeout: float = NPM_AUDIT_TIMEOUT,
) -> NpmAuditResponse:
    """Run npm audit on a directory.

    Args:
        path: Directory containing package.json and a lock file
        include_dev_dependencies: Include devDependencies in the audit
        timeout: Seconds before the audit is killed and reported as failed

    Returns:
        NpmAuditResponse; on failure ``error`` is set and results are empty
    """
    if find_lock_file(path) is None:
        return NpmAuditResponse(error=NO_LOCK_FILE_ERROR)

    cmd = ["npm", "audit", "--json"]
    if not include_dev_dependencies:
        cmd.append("--omit=dev")

    logger.info(f"Running {' '.join(cmd)} in {path}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=path,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Could not start npm audit: {e}")
        return NpmAuditResponse(error=f"npm audit failed: {e}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        logger.error(f"npm audit timed out after {timeout}s")
        return NpmAuditResponse(error=f"npm audit failed: timed out after {timeout} seconds")

    stdout = stdout_bytes.decode(errors="replace").strip()
    stderr = stderr_bytes.decode(errors="replace").strip()

    # npm audit exits non-zero when vulnerabilities are found; stdout is still the report
    if not stdout:
        message = stderr or f"npm audit exited with code {process.returncode}"
        logger.error(f"npm audit produced no output: {message}")
        return NpmAuditResponse(error=message)

    try:
        result = parse_audit_output(stdout)
    except AuditError as e:
        logger.error(str(e))
        return NpmAuditResponse(error=f"npm audit failed: {e}")

    logger.info(f"npm audit found {len(result.vulnerabilities)} vulnerable packages")
    return result


async def is_npm_available() -> bool:
    """Quick check if npm can be executed."""
    if shutil.which("npm") is None:
        return False

    try:
        process = await asyncio.create_subprocess_exec(
            "npm",
            "--version",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError:
        return False

    try:
        await asyncio.wait_for(process.communicate(), timeout=NPM_PROBE_TIMEOUT)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        return False

    return process.returncode == 0
