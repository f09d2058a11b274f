"""Security reference data, review prompts, and finding models."""

from .findings import AISecurityResponse, Remediation, SecurityFinding
from .owasp import (
    ALL_OWASP_CATEGORIES,
    FINDING_TO_OWASP,
    OWASP_API_TOP_10,
    OWASP_TOP_10_WEB,
    OWASPCategory,
    get_category_owasp_ids,
    get_owasp_category,
    get_relevant_owasp,
)
from .prompt_builder import (
    CATEGORY_EXPERTISE,
    HotspotPrompt,
    build_all_prompts,
    build_system_prompt,
    build_user_prompt,
    get_category_cwe_ids,
    parse_ai_response,
)

__all__ = [
    # Findings
    "SecurityFinding",
    "Remediation",
    "AISecurityResponse",
    # OWASP
    "OWASPCategory",
    "OWASP_TOP_10_WEB",
    "OWASP_API_TOP_10",
    "ALL_OWASP_CATEGORIES",
    "FINDING_TO_OWASP",
    "get_owasp_category",
    "get_relevant_owasp",
    "get_category_owasp_ids",
    # Prompts
    "CATEGORY_EXPERTISE",
    "HotspotPrompt",
    "build_system_prompt",
    "build_user_prompt",
    "build_all_prompts",
    "get_category_cwe_ids",
    "parse_ai_response",
]
