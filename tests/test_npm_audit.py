import asyncio
import json
from unittest.mock import AsyncMock, Mock, patch

import pytest

from vibecheck.core.exceptions import AuditError
from vibecheck.scanners.npm_audit import (
    NO_LOCK_FILE_ERROR,
    is_npm_available,
    map_severity,
    parse_audit_output,
    run_npm_audit,
)

AUDIT_REPORT = {
    "auditReportVersion": 2,
    "vulnerabilities": {
        "lodash": {
            "name": "lodash",
            "severity": "moderate",
            "via": [
                {
                    "source": 1096305,
                    "name": "lodash",
                    "title": "Prototype Pollution in lodash",
                    "url": "https://github.com/advisories/GHSA-p6mc-m468-83gw",
                    "severity": "moderate",
                    "cve": ["CVE-2020-8203"],
                }
            ],
            "range": "<4.17.19",
            "fixAvailable": {"name": "lodash", "version": "4.17.21", "isSemVerMajor": False},
        },
        "express": {
            "name": "express",
            "severity": "high",
            "via": ["body-parser", "qs"],
            "range": "4.0.0 - 4.19.1",
            "fixAvailable": True,
        },
        "mystery": {"name": "mystery", "severity": "weird", "via": []},
    },
    "metadata": {
        "vulnerabilities": {"info": 0, "low": 0, "moderate": 1, "high": 1, "critical": 0, "total": 2}
    },
}


def _process(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> AsyncMock:
    process = AsyncMock()
    process.returncode = returncode
    process.communicate.return_value = (stdout, stderr)
    process.kill = Mock()
    return process


@pytest.fixture
def project(tmp_path):
    (tmp_path / "package.json").write_text('{"name": "app"}')
    (tmp_path / "package-lock.json").write_text("{}")
    return tmp_path


class TestMapSeverity:
    def test_moderate_is_medium(self):
        assert map_severity("moderate") == "medium"

    def test_known_values(self):
        assert map_severity("critical") == "critical"
        assert map_severity("info") == "info"

    def test_unknown_is_low(self):
        assert map_severity("weird") == "low"
        assert map_severity(None) == "low"


class TestParseAuditOutput:
    def test_transforms_vulnerabilities(self):
        result = parse_audit_output(json.dumps(AUDIT_REPORT))
        by_name = {v.package_name: v for v in result.vulnerabilities}

        lodash = by_name["lodash"]
        assert lodash.severity == "medium"
        assert lodash.title == "MODERATE: lodash"
        assert lodash.version == "<4.17.19"
        assert lodash.cve_ids == ["CVE-2020-8203"]
        assert lodash.patched_version == "4.17.21"
        assert lodash.description == "Prototype Pollution in lodash"
        assert lodash.url == "https://github.com/advisories/GHSA-p6mc-m468-83gw"

        express = by_name["express"]
        assert express.severity == "high"
        assert express.description == "body-parser, qs"
        assert express.patched_version is None

        mystery = by_name["mystery"]
        assert mystery.severity == "low"
        assert mystery.description == "Vulnerability in mystery"

    def test_summary(self):
        result = parse_audit_output(json.dumps(AUDIT_REPORT))
        assert result.summary.moderate == 1
        assert result.summary.high == 1
        assert result.summary.total == 2
        assert result.error is None

    def test_camel_case_output(self):
        result = parse_audit_output(json.dumps(AUDIT_REPORT))
        lodash = result.vulnerabilities[0].model_dump(by_alias=True, exclude_none=True)
        assert lodash["packageName"] == "lodash"
        assert lodash["cveIds"] == ["CVE-2020-8203"]
        assert lodash["patchedVersion"] == "4.17.21"

    def test_not_json(self):
        with pytest.raises(AuditError):
            parse_audit_output("npm ERR! something")

    def test_npm_error_payload(self):
        with pytest.raises(AuditError, match="ENOLOCK"):
            parse_audit_output(json.dumps({"error": {"code": "ENOLOCK", "summary": "ENOLOCK: lock missing"}}))

    def test_empty_report(self):
        result = parse_audit_output("{}")
        assert result.vulnerabilities == []
        assert result.summary.total == 0


class TestRunNpmAudit:
    @pytest.mark.asyncio
    async def test_requires_lock_file(self, tmp_path):
        with patch("asyncio.create_subprocess_exec") as mock_exec:
            result = await run_npm_audit(str(tmp_path))

        assert result.error == NO_LOCK_FILE_ERROR
        assert result.vulnerabilities == []
        mock_exec.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_with_nonzero_exit(self, project):
        process = _process(stdout=json.dumps(AUDIT_REPORT).encode(), returncode=1)
        with patch("asyncio.create_subprocess_exec", return_value=process) as mock_exec:
            result = await run_npm_audit(str(project))

        assert result.error is None
        assert len(result.vulnerabilities) == 3
        args = mock_exec.call_args[0]
        assert args == ("npm", "audit", "--json", "--omit=dev")
        assert mock_exec.call_args[1]["cwd"] == str(project)

    @pytest.mark.asyncio
    async def test_include_dev_dependencies(self, project):
        process = _process(stdout=b"{}")
        with patch("asyncio.create_subprocess_exec", return_value=process) as mock_exec:
            await run_npm_audit(str(project), include_dev_dependencies=True)

        assert "--omit=dev" not in mock_exec.call_args[0]

    @pytest.mark.asyncio
    async def test_stderr_without_stdout(self, project):
        process = _process(stderr=b"npm ERR! code ENOTFOUND", returncode=1)
        with patch("asyncio.create_subprocess_exec", return_value=process):
            result = await run_npm_audit(str(project))

        assert result.error == "npm ERR! code ENOTFOUND"
        assert result.vulnerabilities == []

    @pytest.mark.asyncio
    async def test_unparseable_output(self, project):
        process = _process(stdout=b"not json")
        with patch("asyncio.create_subprocess_exec", return_value=process):
            result = await run_npm_audit(str(project))

        assert result.error.startswith("npm audit failed:")

    @pytest.mark.asyncio
    async def test_npm_missing(self, project):
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("npm")):
            result = await run_npm_audit(str(project))

        assert result.error.startswith("npm audit failed:")

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, project):
        async def never_finishes():
            await asyncio.sleep(10)

        process = _process()
        process.communicate.side_effect = never_finishes
        with patch("asyncio.create_subprocess_exec", return_value=process):
            result = await run_npm_audit(str(project), timeout=0.01)

        assert "timed out" in result.error
        process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeout_after_process_exited(self, project):
        async def never_finishes():
            await asyncio.sleep(10)

        process = _process()
        process.communicate.side_effect = never_finishes
        process.kill.side_effect = ProcessLookupError()
        with patch("asyncio.create_subprocess_exec", return_value=process):
            result = await run_npm_audit(str(project), timeout=0.01)

        assert "timed out" in result.error
        process.wait.assert_awaited_once()


class TestIsNpmAvailable:
    @pytest.mark.asyncio
    async def test_not_on_path(self):
        with patch("vibecheck.scanners.npm_audit.shutil.which", return_value=None):
            assert await is_npm_available() is False

    @pytest.mark.asyncio
    async def test_version_probe_succeeds(self):
        with patch("vibecheck.scanners.npm_audit.shutil.which", return_value="/usr/bin/npm"), patch(
            "asyncio.create_subprocess_exec", return_value=_process(stdout=b"10.2.0")
        ):
            assert await is_npm_available() is True

    @pytest.mark.asyncio
    async def test_version_probe_fails(self):
        with patch("vibecheck.scanners.npm_audit.shutil.which", return_value="/usr/bin/npm"), patch(
            "asyncio.create_subprocess_exec", return_value=_process(returncode=1)
        ):
            assert await is_npm_available() is False

    @pytest.mark.asyncio
    async def test_version_probe_timeout_after_process_exited(self):
        async def never_finishes():
            await asyncio.sleep(10)

        process = _process()
        process.communicate.side_effect = never_finishes
        process.kill.side_effect = ProcessLookupError()
        with patch("vibecheck.scanners.npm_audit.shutil.which", return_value="/usr/bin/npm"), patch(
            "asyncio.create_subprocess_exec", return_value=process
        ), patch("vibecheck.scanners.npm_audit.NPM_PROBE_TIMEOUT", 0.01):
            assert await is_npm_available() is False
