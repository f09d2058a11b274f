"""
OWASP Top 10 reference data.

OWASP publishes no API, so this is a small curated table: the 2021 Web
Application Top 10 and the 2023 API Security Top 10. Lookups are linear
scans; the table is closed and does not grow at runtime.
"""

from pydantic import BaseModel, ConfigDict

from ..scanners.models import HotspotCategory


class OWASPCategory(BaseModel):
    """A risk category from one of the OWASP Top 10 lists."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    year: int
    rank: int


# OWASP Top 10 Web Application Security Risks (2021)
OWASP_TOP_10_WEB: tuple[OWASPCategory, ...] = (
    OWASPCategory(
        id="A01:2021",
        name="Broken Access Control",
        description="Failures related to access control that allows users to act outside their intended permissions.",
        year=2021,
        rank=1,
    ),
    OWASPCategory(
        id="A02:2021",
        name="Cryptographic Failures",
        description="Failures related to cryptography which often lead to exposure of sensitive data.",
        year=2021,
        rank=2,
    ),
    OWASPCategory(
        id="A03:2021",
        name="Injection",
        description=(
            "Injection flaws such as SQL, NoSQL, OS, and LDAP injection occur when "
            "untrusted data is sent to an interpreter."
        ),
        year=2021,
        rank=3,
    ),
    OWASPCategory(
        id="A04:2021",
        name="Insecure Design",
        description="Missing or ineffective security controls, often from missing threat modeling during design.",
        year=2021,
        rank=4,
    ),
    OWASPCategory(
        id="A05:2021",
        name="Security Misconfiguration",
        description="Missing or incorrect security hardening, insecure default configurations, or verbose error messages.",
        year=2021,
        rank=5,
    ),
    OWASPCategory(
        id="A06:2021",
        name="Vulnerable and Outdated Components",
        description="Using components with known vulnerabilities or unsupported/outdated software.",
        year=2021,
        rank=6,
    ),
    OWASPCategory(
        id="A07:2021",
        name="Identification and Authentication Failures",
        description="Failures in confirming user identity, authentication, and session management.",
        year=2021,
        rank=7,
    ),
    OWASPCategory(
        id="A08:2021",
        name="Software and Data Integrity Failures",
        description="Code and infrastructure that does not protect against integrity violations.",
        year=2021,
        rank=8,
    ),
    OWASPCategory(
        id="A09:2021",
        name="Security Logging and Monitoring Failures",
        description="Insufficient logging, detection, monitoring, and active response.",
        year=2021,
        rank=9,
    ),
    OWASPCategory(
        id="A10:2021",
        name="Server-Side Request Forgery (SSRF)",
        description=(
            "SSRF flaws occur when a web application fetches a remote resource without "
            "validating the user-supplied URL."
        ),
        year=2021,
        rank=10,
    ),
)

# OWASP API Security Top 10 (2023)
OWASP_API_TOP_10: tuple[OWASPCategory, ...] = (
    OWASPCategory(
        id="API1:2023",
        name="Broken Object Level Authorization",
        description=(
            "APIs expose endpoints that handle object identifiers, creating attack "
            "surface for object level access control issues."
        ),
        year=2023,
        rank=1,
    ),
    OWASPCategory(
        id="API2:2023",
        name="Broken Authentication",
        description=(
            "Authentication mechanisms are often implemented incorrectly, allowing "
            "attackers to compromise authentication tokens."
        ),
        year=2023,
        rank=2,
    ),
    OWASPCategory(
        id="API3:2023",
        name="Broken Object Property Level Authorization",
        description=(
            "Lack of or improper authorization validation at object property level "
            "leading to information exposure or manipulation."
        ),
        year=2023,
        rank=3,
    ),
    OWASPCategory(
        id="API4:2023",
        name="Unrestricted Resource Consumption",
        description=(
            "API requests consume resources such as network bandwidth, CPU, memory, "
            "and storage without proper limits."
        ),
        year=2023,
        rank=4,
    ),
    OWASPCategory(
        id="API5:2023",
        name="Broken Function Level Authorization",
        description=(
            "Complex access control policies with different hierarchies, groups, and "
            "roles create authorization flaws."
        ),
        year=2023,
        rank=5,
    ),
    OWASPCategory(
        id="API6:2023",
        name="Unrestricted Access to Sensitive Business Flows",
        description="APIs vulnerable to abuse through excessive access to certain business flows, harming the business.",
        year=2023,
        rank=6,
    ),
    OWASPCategory(
        id="API7:2023",
        name="Server Side Request Forgery",
        description="SSRF can occur when an API fetches a remote resource without validating the user-supplied URI.",
        year=2023,
        rank=7,
    ),
    OWASPCategory(
        id="API8:2023",
        name="Security Misconfiguration",
        description="Complex and customizable API configurations can lead to insecure default settings and misconfigurations.",
        year=2023,
        rank=8,
    ),
    OWASPCategory(
        id="API9:2023",
        name="Improper Inventory Management",
        description=(
            "APIs tend to expose more endpoints than traditional web applications, "
            "making proper documentation important."
        ),
        year=2023,
        rank=9,
    ),
    OWASPCategory(
        id="API10:2023",
        name="Unsafe Consumption of APIs",
        description=(
            "Developers tend to trust data received from third-party APIs more than "
            "user input, adopting weaker security standards."
        ),
        year=2023,
        rank=10,
    ),
)

ALL_OWASP_CATEGORIES: tuple[OWASPCategory, ...] = OWASP_TOP_10_WEB + OWASP_API_TOP_10

# Finding types (as reported by the reviewer) -> OWASP category IDs
FINDING_TO_OWASP: dict[str, tuple[str, ...]] = {
    "missing-auth": ("A01:2021", "API1:2023", "API5:2023"),
    "broken-auth": ("A07:2021", "API2:2023"),
    "sql-injection": ("A03:2021",),
    "command-injection": ("A03:2021",),
    "xss": ("A03:2021",),
    "ssrf": ("A10:2021", "API7:2023"),
    "hardcoded-secret": ("A02:2021",),
    "exposed-env": ("A02:2021", "A05:2021"),
    "insecure-config": ("A05:2021", "API8:2023"),
    "vulnerable-dependency": ("A06:2021",),
    "missing-rate-limit": ("API4:2023",),
    "data-exposure": ("API3:2023",),
}

# Finding types each hotspot category is expected to surface
CATEGORY_FINDING_TYPES: dict[HotspotCategory, tuple[str, ...]] = {
    HotspotCategory.AUTH: ("missing-auth", "broken-auth"),
    HotspotCategory.API: ("missing-auth", "missing-rate-limit", "data-exposure", "ssrf"),
    HotspotCategory.DATABASE_RULES: ("missing-auth", "data-exposure"),
    HotspotCategory.SECRETS_ENV: ("hardcoded-secret", "exposed-env", "insecure-config"),
    HotspotCategory.DEPENDENCIES: ("vulnerable-dependency",),
    HotspotCategory.DATA_FLOW: ("sql-injection", "command-injection", "xss"),
}


def get_owasp_category(owasp_id: str) -> OWASPCategory | None:
    """Get an OWASP category by ID (e.g. "A01:2021", "API7:2023")."""
    for category in ALL_OWASP_CATEGORIES:
        if category.id == owasp_id:
            return category
    return None


def get_relevant_owasp(topic: str) -> list[OWASPCategory]:
    """Find categories whose name or description mentions the topic (case-insensitive)."""
    topic_lower = topic.lower()
    return [
        c
        for c in ALL_OWASP_CATEGORIES
        if topic_lower in c.name.lower() or topic_lower in c.description.lower()
    ]


def get_finding_owasp_ids(finding_type: str) -> list[str]:
    return list(FINDING_TO_OWASP.get(finding_type, ()))


def get_category_owasp_ids(category: HotspotCategory | str) -> list[str]:
    """OWASP IDs relevant to a hotspot category, de-duplicated in order."""
    key = HotspotCategory(category)
    ids: list[str] = []
    for finding_type in CATEGORY_FINDING_TYPES.get(key, ()):
        for owasp_id in FINDING_TO_OWASP.get(finding_type, ()):
            if owasp_id not in ids:
                ids.append(owasp_id)
    return ids
