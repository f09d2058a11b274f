"""Reference data clients for querying external APIs."""

from .cwe_client import (
    COMMON_CWES,
    CWEClient,
    CWEData,
    fetch_cwe,
    fetch_cwes,
    get_cwe_cache,
    get_cwe_client,
    get_cwe_summary,
    normalize_cwe_id,
)

__all__ = [
    "CWEClient",
    "CWEData",
    "COMMON_CWES",
    "fetch_cwe",
    "fetch_cwes",
    "get_cwe_summary",
    "get_cwe_client",
    "get_cwe_cache",
    "normalize_cwe_id",
]
