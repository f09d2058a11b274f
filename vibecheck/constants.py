"""Constants and configuration values for VibeCheck.

This module centralizes magic numbers and configuration values
that are used across the codebase for easier maintenance.
"""

import os

# =============================================================================
# Reference Data APIs
# =============================================================================

# MITRE CWE REST API (no authentication required)
CWE_API_BASE = os.environ.get("CWE_API_BASE", "https://cwe-api.mitre.org/api/v1")

# Default HTTP request timeout in seconds
DEFAULT_REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", 30))


# =============================================================================
# Dependency Audit
# =============================================================================

# npm audit timeout in seconds
NPM_AUDIT_TIMEOUT = int(os.environ.get("NPM_AUDIT_TIMEOUT", 60))

# Timeout for the `npm --version` availability probe
NPM_PROBE_TIMEOUT = 5

LOCK_FILES = ("package-lock.json", "yarn.lock", "pnpm-lock.yaml")


# =============================================================================
# File Reading
# =============================================================================

# Maximum file size to read (1MB)
MAX_FILE_SIZE = 1024 * 1024

# Maximum number of files collected from a directory walk
MAX_FILES = 500


# =============================================================================
# Prompt Budgets
# =============================================================================

# Per-file content limit in the user prompt
MAX_FILE_CONTENT_CHARS = 8000

# Serialized content limit across all files of one hotspot
MAX_PROMPT_CONTENT_CHARS = 100000

# CWE description length in the system prompt
CWE_DESCRIPTION_PROMPT_CHARS = 300

# Mitigations listed per CWE in the system prompt
MAX_PROMPT_MITIGATIONS = 2


# =============================================================================
# Server
# =============================================================================

# MCP transport: "stdio" or "http"
MCP_TRANSPORT = os.environ.get("VIBECHECK_TRANSPORT", "stdio")

# MCP server port (http transport only)
MCP_DEFAULT_PORT = int(os.environ.get("MCP_PORT", 3000))

LOG_LEVEL = os.environ.get("VIBECHECK_LOG_LEVEL", "INFO")

LOG_FILE = os.environ.get("VIBECHECK_LOG_FILE")

# Emit JSON lines instead of plain text log records
LOG_JSON = os.environ.get("VIBECHECK_LOG_JSON", "").lower() in ("1", "true", "yes")
