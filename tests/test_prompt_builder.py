from unittest.mock import AsyncMock, patch

import pytest

from vibecheck.clients.cwe_client import CWEData
from vibecheck.scanners.models import HotspotCategory, HotspotPriority, SecurityHotspot
from vibecheck.scanners.project_context import ProjectContext
from vibecheck.security.prompt_builder import (
    CATEGORY_EXPERTISE,
    TRUNCATION_MARKER,
    build_all_prompts,
    build_system_prompt,
    build_user_prompt,
    format_files_for_prompt,
    get_category_cwe_ids,
    parse_ai_response,
    truncate_content,
)

CWE_287 = CWEData(
    id="CWE-287",
    name="Improper Authentication",
    description="x" * 500,
    mitigations=["Use a framework", "Use MFA", "Rotate keys"],
)


def _hotspot(files, category=HotspotCategory.AUTH):
    return SecurityHotspot(
        category=category,
        files=files,
        priority=HotspotPriority.CRITICAL,
        reason="Authentication, authorization, and session management",
    )


class TestCategoryExpertise:
    def test_every_category_has_expertise(self):
        assert set(CATEGORY_EXPERTISE) == set(HotspotCategory)

    def test_get_category_cwe_ids(self):
        assert get_category_cwe_ids("auth") == ["CWE-287", "CWE-862", "CWE-384", "CWE-613"]
        assert get_category_cwe_ids(HotspotCategory.DEPENDENCIES) == ["CWE-1035", "CWE-1104"]


class TestSystemPrompt:
    @pytest.mark.asyncio
    async def test_contents(self):
        context = ProjectContext(framework="nextjs", database="firebase")
        with patch(
            "vibecheck.security.prompt_builder.fetch_cwes",
            new=AsyncMock(return_value={"CWE-287": CWE_287}),
        ) as mock_fetch:
            prompt = await build_system_prompt(HotspotCategory.AUTH, context)

        mock_fetch.assert_awaited_once_with(["CWE-287", "CWE-862", "CWE-384", "CWE-613"])
        assert prompt.startswith("You are a authentication and authorization security expert")
        assert "- JWT vulnerabilities" in prompt
        # Description is cut to 300 characters, at most two mitigations
        assert f"CWE-287 - Improper Authentication: {'x' * 300}\n" in prompt
        assert "Mitigations: Use a framework; Use MFA\n" in prompt
        assert "Rotate keys" not in prompt
        assert "A07:2021 - Identification and Authentication Failures" in prompt
        assert "Framework: nextjs" in prompt
        assert "Database: firebase" in prompt
        assert "Auth Provider" not in prompt
        assert "Firebase apiKey in client code is SAFE" in prompt
        assert '"findings": [' in prompt

    @pytest.mark.asyncio
    async def test_no_cwes_loaded(self):
        with patch("vibecheck.security.prompt_builder.fetch_cwes", new=AsyncMock(return_value={})):
            prompt = await build_system_prompt("secrets-env")

        assert "No specific CWEs loaded" in prompt
        assert "Project Context" not in prompt

    @pytest.mark.asyncio
    async def test_build_all_prompts_in_order(self, make_file):
        hotspots = [
            _hotspot([make_file("auth/login.ts", "authenticate()")]),
            _hotspot([make_file("package.json", "{}")], category=HotspotCategory.DEPENDENCIES),
        ]
        with patch("vibecheck.security.prompt_builder.fetch_cwes", new=AsyncMock(return_value={})):
            prompts = await build_all_prompts(hotspots)

        assert list(prompts) == [HotspotCategory.AUTH, HotspotCategory.DEPENDENCIES]
        assert "### File: package.json" in prompts[HotspotCategory.DEPENDENCIES].user_prompt


class TestUserPrompt:
    def test_truncate_content(self):
        assert truncate_content("short") == "short"
        truncated = truncate_content("a" * 8001)
        assert truncated == "a" * 8000 + TRUNCATION_MARKER

    def test_single_large_file_truncated(self, make_file):
        prompt = build_user_prompt(_hotspot([make_file("auth/big.ts", "a" * 20000)]))

        assert prompt.startswith("Analyze these auth files for security vulnerabilities:")
        assert "### File: auth/big.ts\n```ts\n" in prompt
        assert "a" * 8000 + "\n... [truncated]" in prompt
        assert "a" * 8001 not in prompt

    def test_files_sorted_by_size(self, make_file):
        prompt = build_user_prompt(
            _hotspot([make_file("auth/large.ts", "b" * 50), make_file("auth/small.ts", "a")])
        )
        assert prompt.index("auth/small.ts") < prompt.index("auth/large.ts")

    def test_language_tag_falls_back_to_text(self, make_file):
        prompt = build_user_prompt(_hotspot([make_file("auth/Dockerfile", "FROM node")]))
        assert "```text\nFROM node\n```" in prompt

    def test_total_budget(self, make_file):
        # 13 files of 8000 chars reach 104000; the cut happens before the 14th
        files = [make_file(f"auth/f{i:02d}.ts", "a" * 8000) for i in range(20)]
        content = format_files_for_prompt(files)

        assert content.count("### File:") == 13
        assert "... and 7 more files (truncated for size)" in content

    def test_within_budget_has_no_truncation_line(self, make_file):
        files = [make_file(f"auth/f{i}.ts", "a" * 100) for i in range(3)]
        assert "more files" not in format_files_for_prompt(files)


class TestParseAIResponse:
    def test_no_json(self):
        result = parse_ai_response("no json here")
        assert result.findings == []
        assert result.summary == "Could not parse AI response"

    def test_invalid_json(self):
        result = parse_ai_response("{bad json}")
        assert result.findings == []
        assert result.summary == "Could not parse AI response as JSON"

    def test_missing_summary(self):
        result = parse_ai_response('{"findings": []}')
        assert result.findings == []
        assert result.summary == "Analysis complete"

    def test_non_list_findings(self):
        result = parse_ai_response('{"findings": "none", "summary": "ok"}')
        assert result.findings == []
        assert result.summary == "ok"

    def test_json_embedded_in_prose(self):
        text = """Here is my analysis:
```json
{
  "findings": [
    {
      "type": "missing-auth",
      "severity": "HIGH",
      "title": "Unprotected admin route",
      "description": "No session check",
      "filePath": "src/app/api/admin/route.ts",
      "lineNumber": 12,
      "aiReasoning": "Anyone can call it",
      "confidence": 140,
      "remediation": {"summary": "Add a session check", "steps": ["Call getServerSession", "Return 401"]}
    }
  ],
  "summary": "One issue"
}
```
Let me know if you need more."""
        result = parse_ai_response(text)

        assert result.summary == "One issue"
        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.type == "missing-auth"
        assert finding.severity == "high"
        assert finding.file_path == "src/app/api/admin/route.ts"
        assert finding.line_number == 12
        assert finding.confidence == 100
        assert finding.remediation.steps == ["Call getServerSession", "Return 401"]

    def test_malformed_finding_dropped(self):
        text = (
            '{"findings": ['
            '{"type": "xss", "severity": "low", "title": "t", "filePath": "a.tsx"},'
            '{"type": "xss", "severity": "catastrophic", "title": "t", "filePath": "b.tsx"},'
            '{"title": "missing fields"}'
            '], "summary": "s"}'
        )
        result = parse_ai_response(text)
        assert [f.file_path for f in result.findings] == ["a.tsx"]

    def test_empty_input(self):
        assert parse_ai_response("").summary == "Could not parse AI response"

    def test_prose_wrapped_object(self):
        result = parse_ai_response('here you go: {"findings": [], "summary": "ok"}')
        assert result.findings == []
        assert result.summary == "ok"

    def test_deeply_nested_json_does_not_raise(self):
        text = '{"findings": ' + "[" * 100000 + "]" * 100000 + ', "summary": "x"}'
        result = parse_ai_response(text)
        assert result.findings == []
        assert result.summary == "Could not parse AI response as JSON"
