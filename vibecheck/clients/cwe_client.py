"""MITRE CWE REST API client.

https://cwe-api.mitre.org/api/v1/ needs no authentication. Successful lookups
are cached for the life of the process; "not found" and failed lookups are
not cached so they can be retried later.
"""

import asyncio
import logging
import re
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..constants import CWE_API_BASE, DEFAULT_REQUEST_TIMEOUT
from ..core.cache import LookupCache
from ..core.exceptions import APIError, ClientError, NetworkError

logger = logging.getLogger("vibecheck.cwe")

_CWE_PREFIX = re.compile(r"^CWE-", re.IGNORECASE)

# Common CWEs for security scanning
COMMON_CWES = {
    "XSS": "79",
    "SQL_INJECTION": "89",
    "COMMAND_INJECTION": "78",
    "PATH_TRAVERSAL": "22",
    "HARDCODED_CREDENTIALS": "798",
    "MISSING_AUTH": "862",
    "BROKEN_AUTH": "287",
    "SSRF": "918",
    "INSECURE_DESERIALIZATION": "502",
    "SENSITIVE_DATA_EXPOSURE": "200",
    "INSUFFICIENT_LOGGING": "778",
    "IMPROPER_INPUT_VALIDATION": "20",
}


def normalize_cwe_id(cwe_id: str | int) -> str:
    """Return the canonical "CWE-<n>" form of "79", "cwe-79" or "CWE-79"."""
    return f"CWE-{cwe_number(cwe_id)}"


def cwe_number(cwe_id: str | int) -> str:
    return _CWE_PREFIX.sub("", str(cwe_id).strip())


class CWEData(BaseModel):
    """Normalized weakness definition."""

    id: str
    name: str
    description: str = ""
    extended_description: str | None = None
    mitigations: list[str] = Field(default_factory=list)
    detection_methods: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    related_weaknesses: list[str] = Field(default_factory=list)
    applicable_platforms: list[str] = Field(default_factory=list)


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return "\n".join(v.strip() for v in value if isinstance(v, str) and v.strip())
    return ""


def _entries(container: Any, wrapper_key: str) -> list[Any]:
    """Return the entry list of ``{wrapper_key: [...]}`` or a bare list."""
    if isinstance(container, dict):
        container = container.get(wrapper_key)
    if isinstance(container, dict):
        return [container]
    return container if isinstance(container, list) else []


def _leaves(container: Any, wrapper_key: str, leaf_key: str) -> list[str]:
    """Extract non-empty string leaves from a nested CWE array field."""
    leaves = []
    for entry in _entries(container, wrapper_key):
        if isinstance(entry, dict):
            text = _text(entry.get(leaf_key))
            if text:
                leaves.append(text)
    return leaves


class CWEApiResponse(BaseModel):
    """Raw weakness record as returned by the CWE API."""

    model_config = ConfigDict(extra="ignore")

    ID: str | int
    Name: str
    Description: str | None = None
    Extended_Description: Any = None
    Potential_Mitigations: Any = None
    Detection_Methods: Any = None
    Demonstrative_Examples: Any = None
    Related_Weaknesses: Any = None
    Applicable_Platforms: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CWEApiResponse":
        """Parse a response body, unwrapping a ``{"Weaknesses": [...]}`` envelope."""
        if isinstance(payload, dict) and "Weaknesses" in payload:
            weaknesses = payload["Weaknesses"]
            if not isinstance(weaknesses, list) or not weaknesses:
                raise ValueError("CWE API returned an empty Weaknesses list")
            payload = weaknesses[0]
        if not isinstance(payload, dict):
            raise ValueError("CWE API returned a non-object payload")
        return cls(**payload)

    @property
    def related_weaknesses(self) -> list[str]:
        related = []
        for entry in _entries(self.Related_Weaknesses, "Related_Weakness"):
            if isinstance(entry, dict) and entry.get("CWE_ID"):
                related.append(normalize_cwe_id(entry["CWE_ID"]))
        return related

    @property
    def applicable_platforms(self) -> list[str]:
        platforms = self.Applicable_Platforms if isinstance(self.Applicable_Platforms, dict) else {}
        return _leaves(platforms.get("Language"), "Language", "Name") + _leaves(
            platforms.get("Technology"), "Technology", "Name"
        )

    def to_cwe_data(self) -> CWEData:
        return CWEData(
            id=normalize_cwe_id(self.ID),
            name=self.Name,
            description=self.Description or "",
            extended_description=_text(self.Extended_Description) or None,
            mitigations=_leaves(self.Potential_Mitigations, "Mitigation", "Description"),
            detection_methods=_leaves(self.Detection_Methods, "Detection_Method", "Description"),
            examples=_leaves(self.Demonstrative_Examples, "Demonstrative_Example", "Body_Text"),
            related_weaknesses=self.related_weaknesses,
            applicable_platforms=self.applicable_platforms,
        )


# Process-wide cache shared by every client instance
_cwe_cache = LookupCache()


def get_cwe_cache() -> LookupCache:
    return _cwe_cache


class CWEClient:
    BASE_URL = CWE_API_BASE

    def __init__(
        self,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        base_url: str | None = None,
        cache: LookupCache | None = None,
    ) -> None:
        self.timeout = timeout
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.cache = cache if cache is not None else _cwe_cache

    async def _request_cwe(self, number: str) -> CWEData | None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/cwe/{number}")
            except httpx.RequestError as e:
                raise NetworkError(f"CWE API request failed: {e}") from e

        if response.status_code == 404:
            return None
        if not 200 <= response.status_code < 300:
            raise APIError(f"CWE API error: {response.status_code}", status_code=response.status_code)

        return CWEApiResponse.from_payload(response.json()).to_cwe_data()

    async def get_cwe(self, cwe_id: str | int) -> CWEData | None:
        """Fetch a CWE by ID ("79" or "CWE-79").

        Never raises: failures are logged and reported as ``None``.
        """
        number = cwe_number(cwe_id)
        cache_key = f"CWE-{number}"

        found, cached = self.cache.get(cache_key)
        if found:
            return cached  # type: ignore[no-any-return]

        if not number.isdigit():
            logger.warning(f"Ignoring malformed CWE identifier: {cwe_id!r}")
            return None

        try:
            data = await self._request_cwe(number)
        except (ClientError, httpx.HTTPError, ValueError, TypeError) as e:
            # ValueError covers JSON decoding and schema validation errors
            logger.error(f"Failed to fetch {cache_key}: {e}", extra={"cwe_id": cache_key})
            return None

        if data is None:
            logger.debug(f"{cache_key} not found")
            return None

        self.cache.set(cache_key, data)
        return data

    async def get_cwes(self, cwe_ids: Iterable[str | int]) -> dict[str, CWEData]:
        """Fetch several CWEs concurrently.

        Returns:
            Mapping of normalized ID to CWEData; missing entries are omitted
        """
        keys = list(dict.fromkeys(normalize_cwe_id(cwe_id) for cwe_id in cwe_ids))
        results = await asyncio.gather(*(self.get_cwe(key) for key in keys))
        return {key: data for key, data in zip(keys, results) if data is not None}

    async def get_cwe_summary(self, cwe_id: str | int) -> str:
        """Brief one-line description of a CWE for use in prompts."""
        cwe = await self.get_cwe(cwe_id)
        if cwe is None:
            return normalize_cwe_id(cwe_id)
        return f"{cwe.id}: {cwe.name} - {cwe.description[:200]}..."


# Global instance
_cwe_client: CWEClient | None = None


def get_cwe_client() -> CWEClient:
    """Get or create the global CWE client instance."""
    global _cwe_client
    if _cwe_client is None:
        _cwe_client = CWEClient()
    return _cwe_client


async def fetch_cwe(cwe_id: str | int) -> CWEData | None:
    return await get_cwe_client().get_cwe(cwe_id)


async def fetch_cwes(cwe_ids: Iterable[str | int]) -> dict[str, CWEData]:
    return await get_cwe_client().get_cwes(cwe_ids)


async def get_cwe_summary(cwe_id: str | int) -> str:
    return await get_cwe_client().get_cwe_summary(cwe_id)
