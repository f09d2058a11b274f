"""Pydantic models for findings returned by the external security reviewer.

The reviewer answers with camelCase JSON (``filePath``, ``lineNumber``,
``aiReasoning``); models accept both camelCase and snake_case.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FindingSeverity = Literal["critical", "high", "medium", "low"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Remediation(_CamelModel):
    """How to fix a finding: a summary plus ordered steps."""

    summary: str = ""
    steps: list[str] = Field(default_factory=list)


class SecurityFinding(_CamelModel):
    """A single vulnerability reported by the reviewer.

    Attributes:
        type: Finding type such as "missing-auth" or "sql-injection".
        severity: One of "critical", "high", "medium", "low".
        title: Short human-readable title.
        description: Detailed description.
        file_path: File the finding refers to.
        line_number: Optional 1-based line number.
        code_snippet: Optional relevant code.
        ai_reasoning: Why this is exploitable.
        confidence: 0-100 certainty score.
        remediation: Fix summary and steps.
    """

    type: str
    severity: FindingSeverity
    title: str
    description: str = ""
    file_path: str
    line_number: int | None = None
    code_snippet: str | None = None
    ai_reasoning: str = ""
    confidence: int = 0
    remediation: Remediation = Field(default_factory=Remediation)

    @field_validator("severity", mode="before")
    @classmethod
    def _lowercase_severity(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return max(0, min(100, int(value)))
        return value


class AISecurityResponse(_CamelModel):
    """Parsed reviewer response for one hotspot category."""

    findings: list[SecurityFinding] = Field(default_factory=list)
    summary: str
