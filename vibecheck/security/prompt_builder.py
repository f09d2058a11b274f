"""
Expert security-review prompts for each hotspot category.

The system prompt frames the reviewer as a category specialist and carries
live CWE context plus OWASP references. The user prompt carries the file
contents, bounded per file and per hotspot. The reviewer's free-form answer
is parsed back with ``parse_ai_response``, which never raises.
"""

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ..clients.cwe_client import COMMON_CWES, fetch_cwes, normalize_cwe_id
from ..constants import (
    CWE_DESCRIPTION_PROMPT_CHARS,
    MAX_FILE_CONTENT_CHARS,
    MAX_PROMPT_CONTENT_CHARS,
    MAX_PROMPT_MITIGATIONS,
)
from ..scanners.models import HotspotCategory, ScannedFile, SecurityHotspot
from ..scanners.project_context import ProjectContext
from .findings import AISecurityResponse, SecurityFinding
from .owasp import get_category_owasp_ids, get_owasp_category

logger = logging.getLogger("vibecheck.prompts")

TRUNCATION_MARKER = "\n... [truncated]"

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class CategoryExpertise:
    """Reviewer persona for a hotspot category."""

    role: str
    focus: tuple[str, ...]
    cwes: tuple[str, ...]


CATEGORY_EXPERTISE: dict[HotspotCategory, CategoryExpertise] = {
    HotspotCategory.AUTH: CategoryExpertise(
        role="authentication and authorization security expert",
        focus=(
            "Missing or bypassed authentication checks",
            "Weak session management",
            "Insecure password handling",
            "JWT vulnerabilities",
            "OAuth/OIDC misconfigurations",
            "Privilege escalation paths",
            "IDOR vulnerabilities",
        ),
        cwes=(COMMON_CWES["BROKEN_AUTH"], COMMON_CWES["MISSING_AUTH"], "384", "613"),
    ),
    HotspotCategory.API: CategoryExpertise(
        role="API security expert",
        focus=(
            "Missing authentication on endpoints",
            "Broken object-level authorization",
            "Mass assignment vulnerabilities",
            "Rate limiting and resource consumption",
            "Input validation issues",
            "Injection vulnerabilities",
            "SSRF in fetch/request calls",
        ),
        cwes=(
            COMMON_CWES["MISSING_AUTH"],
            COMMON_CWES["SQL_INJECTION"],
            COMMON_CWES["SSRF"],
            COMMON_CWES["IMPROPER_INPUT_VALIDATION"],
        ),
    ),
    HotspotCategory.DATABASE_RULES: CategoryExpertise(
        role="database security rules expert",
        focus=(
            "Overly permissive read/write rules",
            "Missing authentication requirements",
            "Data validation in rules",
            "Cross-user data access",
            "Admin access patterns",
            "RLS policy gaps",
        ),
        cwes=("284", "285", COMMON_CWES["MISSING_AUTH"]),
    ),
    HotspotCategory.SECRETS_ENV: CategoryExpertise(
        role="secrets and configuration security expert",
        focus=(
            "Hardcoded credentials and API keys",
            "Secrets in client-side code",
            "Exposed environment variables",
            "Insecure default configurations",
            "Missing encryption for sensitive data",
        ),
        cwes=(COMMON_CWES["HARDCODED_CREDENTIALS"], "540", COMMON_CWES["SENSITIVE_DATA_EXPOSURE"]),
    ),
    HotspotCategory.DEPENDENCIES: CategoryExpertise(
        role="software supply chain security expert",
        focus=(
            "Known vulnerable packages",
            "Typosquatting packages",
            "Malware in dependencies",
            "Outdated packages with security issues",
            "Dependency confusion risks",
        ),
        cwes=("1035", "1104"),
    ),
    HotspotCategory.DATA_FLOW: CategoryExpertise(
        role="application security expert specializing in data flow",
        focus=(
            "SQL injection in queries",
            "Command injection in exec/spawn calls",
            "XSS in dangerouslySetInnerHTML",
            "Path traversal in file operations",
            "Unsafe deserialization",
            "Template injection",
        ),
        cwes=(
            COMMON_CWES["SQL_INJECTION"],
            COMMON_CWES["COMMAND_INJECTION"],
            COMMON_CWES["XSS"],
            COMMON_CWES["PATH_TRAVERSAL"],
        ),
    ),
}

OUTPUT_INSTRUCTIONS = """IMPORTANT INSTRUCTIONS:
1. Only report REAL vulnerabilities you can identify in the code
2. Provide specific file paths and line numbers when possible
3. Explain the vulnerability and how it could be exploited
4. Rate severity as: critical, high, medium, or low
5. Provide confidence score 0-100 based on how certain you are
6. Include remediation steps

DO NOT:
- Report hypothetical issues without evidence in the code
- Flag safe patterns as vulnerabilities (e.g., Firebase apiKey in client code is SAFE)
- Generate false positives

Respond with a JSON object matching this structure:
{
  "findings": [
    {
      "type": "string (e.g., missing-auth, sql-injection, hardcoded-secret)",
      "severity": "critical|high|medium|low",
      "title": "Brief title",
      "description": "Detailed description",
      "filePath": "path/to/file.ts",
      "lineNumber": 42,
      "codeSnippet": "relevant code",
      "aiReasoning": "Why this is a vulnerability and how it could be exploited",
      "confidence": 85,
      "remediation": {
        "summary": "How to fix",
        "steps": ["Step 1", "Step 2"]
      }
    }
  ],
  "summary": "Overall security assessment for this category"
}

If no vulnerabilities are found, return: { "findings": [], "summary": "No vulnerabilities found" }"""


class HotspotPrompt(BaseModel):
    """System/user prompt pair for one hotspot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    system_prompt: str
    user_prompt: str


def get_category_cwe_ids(category: HotspotCategory | str) -> list[str]:
    """CWE IDs ("CWE-<n>") relevant to a hotspot category."""
    expertise = CATEGORY_EXPERTISE[HotspotCategory(category)]
    return [normalize_cwe_id(cwe) for cwe in expertise.cwes]


def truncate_content(content: str, max_chars: int = MAX_FILE_CONTENT_CHARS) -> str:
    """Cut content to ``max_chars`` and mark the cut."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + TRUNCATION_MARKER


def _language_tag(file: ScannedFile) -> str:
    return file.extension.lstrip(".") or "text"


def format_files_for_prompt(
    files: Sequence[ScannedFile], max_total_chars: int = MAX_PROMPT_CONTENT_CHARS
) -> str:
    """Serialize files as fenced blocks, smallest first.

    Once the serialized content already exceeds ``max_total_chars``, the
    remaining files are summarized in one line instead of being included.
    """
    ordered = sorted(files, key=lambda f: f.size)
    parts: list[str] = []
    total_chars = 0

    for index, file in enumerate(ordered):
        if total_chars > max_total_chars:
            parts.append(f"\n... and {len(ordered) - index} more files (truncated for size)")
            break

        content = truncate_content(file.content)
        parts.append(f"\n### File: {file.path}\n```{_language_tag(file)}\n{content}\n```")
        total_chars += len(content)

    return "\n".join(parts)


def _cwe_context(cwe_data: dict, cwe_ids: Sequence[str]) -> str:
    lines = []
    for cwe_id in cwe_ids:
        data = cwe_data.get(cwe_id)
        if data is None:
            continue
        lines.append(f"{data.id} - {data.name}: {data.description[:CWE_DESCRIPTION_PROMPT_CHARS]}")
        if data.mitigations:
            lines.append(f"Mitigations: {'; '.join(data.mitigations[:MAX_PROMPT_MITIGATIONS])}")
    return "\n".join(lines)


def _owasp_context(category: HotspotCategory) -> str:
    lines = []
    for owasp_id in get_category_owasp_ids(category):
        owasp = get_owasp_category(owasp_id)
        lines.append(f"{owasp.id} - {owasp.name}" if owasp else owasp_id)
    return "\n".join(lines)


def _project_context_lines(project_context: ProjectContext | None) -> list[str]:
    if project_context is None:
        return []
    lines = []
    if project_context.framework:
        lines.append(f"Framework: {project_context.framework}")
    if project_context.database:
        lines.append(f"Database: {project_context.database}")
    if project_context.auth_provider:
        lines.append(f"Auth Provider: {project_context.auth_provider}")
    return lines


async def build_system_prompt(
    category: HotspotCategory | str, project_context: ProjectContext | None = None
) -> str:
    """Build the reviewer system prompt for a category.

    CWE details are fetched live; lookups that fail are simply left out.
    """
    category = HotspotCategory(category)
    expertise = CATEGORY_EXPERTISE[category]
    cwe_ids = [normalize_cwe_id(cwe) for cwe in expertise.cwes]

    cwe_data = await fetch_cwes(cwe_ids)
    logger.debug(
        f"Loaded {len(cwe_data)}/{len(cwe_ids)} CWEs for {category.value}",
        extra={"category": category.value},
    )

    focus = "\n".join(f"- {item}" for item in expertise.focus)
    cwe_context = _cwe_context(cwe_data, cwe_ids) or "No specific CWEs loaded"
    owasp_context = _owasp_context(category) or "No specific OWASP categories"

    project_lines = _project_context_lines(project_context)
    project_section = ""
    if project_lines:
        project_section = "\nProject Context:\n" + "\n".join(project_lines) + "\n"

    return f"""You are a {expertise.role} performing a security code review.

Your focus areas for this analysis:
{focus}

Relevant CWEs:
{cwe_context}

Relevant OWASP Categories:
{owasp_context}
{project_section}
{OUTPUT_INSTRUCTIONS}"""


def build_user_prompt(hotspot: SecurityHotspot) -> str:
    """Build the user prompt carrying the hotspot's file contents."""
    files_content = format_files_for_prompt(hotspot.files)

    return f"""Analyze these {hotspot.category.value} files for security vulnerabilities:

{files_content}

Respond with a JSON object containing your findings."""


async def build_all_prompts(
    hotspots: Sequence[SecurityHotspot], project_context: ProjectContext | None = None
) -> dict[HotspotCategory, HotspotPrompt]:
    """Build prompt pairs for each hotspot, sequentially in the given order."""
    prompts: dict[HotspotCategory, HotspotPrompt] = {}
    for hotspot in hotspots:
        prompts[hotspot.category] = HotspotPrompt(
            system_prompt=await build_system_prompt(hotspot.category, project_context),
            user_prompt=build_user_prompt(hotspot),
        )
    return prompts


def parse_ai_response(response: str) -> AISecurityResponse:
    """Parse the reviewer's answer into typed findings.

    The answer is untrusted free-form text: this never raises. Without a
    parseable JSON object the result has no findings and a diagnostic
    summary. Individual findings that do not fit the schema are dropped.
    """
    match = _JSON_OBJECT.search(response or "")
    if not match:
        return AISecurityResponse(findings=[], summary="Could not parse AI response")

    try:
        parsed = json.loads(match.group())
    except (json.JSONDecodeError, RecursionError):
        return AISecurityResponse(findings=[], summary="Could not parse AI response as JSON")

    if not isinstance(parsed, dict):
        return AISecurityResponse(findings=[], summary="Could not parse AI response as JSON")

    raw_findings = parsed.get("findings")
    findings: list[SecurityFinding] = []
    if isinstance(raw_findings, list):
        for raw in raw_findings:
            try:
                findings.append(SecurityFinding.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Dropping malformed finding: {e.error_count()} validation error(s)")

    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary:
        summary = "Analysis complete"

    return AISecurityResponse(findings=findings, summary=summary)
