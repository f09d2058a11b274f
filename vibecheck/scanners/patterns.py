"""
Path and content patterns used to triage files by security relevance.

Two ordered tables drive the hotspot collector:

- ``CATEGORY_PATTERNS``: one row per security category. A file belongs to
  a category when any path pattern matches its path or any content pattern
  matches its content. A category may have only path patterns
  (dependencies) or only content patterns (data-flow).
- ``SKIP_PATTERNS``: files whose path matches any row are excluded from
  categorization entirely. Rows are evaluated top to bottom and the first
  match wins.

Adding a category or pattern is a data change only; the collector iterates
both tables uniformly. All patterns are case-insensitive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import HotspotCategory, HotspotPriority


@dataclass(frozen=True)
class CategoryPattern:
    """Patterns that place a file in a security category.

    Attributes:
        category: The hotspot category.
        priority: Review priority of the category.
        description: Human-readable reason reported on the hotspot.
        path_patterns: Regexes tested against the relative file path.
        content_patterns: Regexes tested against the full file content.
    """

    category: HotspotCategory
    priority: HotspotPriority
    description: str
    path_patterns: tuple[re.Pattern[str], ...] = ()
    content_patterns: tuple[re.Pattern[str], ...] = ()

    def matches_path(self, path: str) -> bool:
        return any(p.search(path) for p in self.path_patterns)

    def matches_content(self, content: str) -> bool:
        return any(p.search(content) for p in self.content_patterns)

    def matches(self, path: str, content: str) -> bool:
        return self.matches_path(path) or self.matches_content(content)


@dataclass(frozen=True)
class SkipPattern:
    """A rule that excludes a file from classification."""

    name: str
    pattern: re.Pattern[str]
    reason: str


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# ---------------------------------------------------------------------------
# Category patterns
# ---------------------------------------------------------------------------

CATEGORY_PATTERNS: tuple[CategoryPattern, ...] = (
    CategoryPattern(
        category=HotspotCategory.AUTH,
        priority=HotspotPriority.CRITICAL,
        description="Authentication, authorization, and session management",
        path_patterns=_compile(
            r"auth",
            r"login",
            r"session",
            r"middleware",
            r"guard",
            r"passport",
            r"oauth",
            r"jwt",
            r"token",
        ),
        content_patterns=_compile(
            r"verifyToken",
            r"getServerSession",
            r"useSession",
            r"signIn",
            r"signOut",
            r"authenticate",
            r"authorize",
            r"isAuthenticated",
            r"currentUser",
            r"getUser",
            r"requireAuth",
            r"checkPermission",
            r"bcrypt",
            r"argon2",
            r"password",
            r"credential",
        ),
    ),
    CategoryPattern(
        category=HotspotCategory.API,
        priority=HotspotPriority.CRITICAL,
        description="API routes and endpoints",
        path_patterns=_compile(
            r"/api/",
            r"routes?/",
            r"controllers?/",
            r"handlers?/",
            r"endpoints?/",
        ),
        content_patterns=_compile(
            r"NextRequest",
            r"NextResponse",
            r"Request\s*,",
            r"Response\s*\)",
            r"express\(\)",
            r"app\.(get|post|put|patch|delete)",
            r"router\.(get|post|put|patch|delete)",
            r"createServerAction",
            r"unstable_cache",
        ),
    ),
    CategoryPattern(
        category=HotspotCategory.DATABASE_RULES,
        priority=HotspotPriority.CRITICAL,
        description="Database security rules and schemas",
        path_patterns=_compile(
            r"firestore\.rules",
            r"storage\.rules",
            r"database\.rules",
            r"\.prisma$",
            r"schema\.",
        ),
        content_patterns=_compile(
            r"allow\s+(read|write|create|update|delete)",
            r"rules_version",
            r"@@map",
            r"createClient",
            r"supabase",
            r"RLS",
        ),
    ),
    CategoryPattern(
        category=HotspotCategory.SECRETS_ENV,
        priority=HotspotPriority.HIGH,
        description="Environment variables and secrets",
        path_patterns=_compile(
            r"\.env",
            r"config\.",
            r"secrets?\.",
            r"credentials?\.",
        ),
        content_patterns=_compile(
            r"process\.env",
            r"import\.meta\.env",
            r"NEXT_PUBLIC_",
            r"VITE_",
            r"REACT_APP_",
            r"API_KEY",
            r"SECRET",
            r"PASSWORD",
            r"TOKEN",
            r"PRIVATE_KEY",
            r"DATABASE_URL",
            r"MONGODB_URI",
            r"REDIS_URL",
        ),
    ),
    CategoryPattern(
        category=HotspotCategory.DEPENDENCIES,
        priority=HotspotPriority.HIGH,
        description="Package dependencies",
        path_patterns=_compile(r"package\.json$"),
    ),
    CategoryPattern(
        category=HotspotCategory.DATA_FLOW,
        priority=HotspotPriority.MEDIUM,
        description="User input handling and data flow",
        content_patterns=_compile(
            r"req\.body",
            r"req\.query",
            r"req\.params",
            r"request\.json\(\)",
            r"formData",
            r"searchParams",
            r"useSearchParams",
            r"params\.",
            r"dangerouslySetInnerHTML",
            r"innerHTML",
            r"eval\(",
            r"new Function\(",
            r"exec\(",
            r"spawn\(",
            r"child_process",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Skip patterns (first match wins)
# ---------------------------------------------------------------------------

# "UI components" and "public assets" can still hold client-side auth logic.
SKIP_PATTERNS: tuple[SkipPattern, ...] = (
    SkipPattern("node_modules", re.compile(r"node_modules", re.IGNORECASE), "Third-party dependencies"),
    SkipPattern("dist", re.compile(r"/dist/", re.IGNORECASE), "Build output"),
    SkipPattern("build", re.compile(r"/build/", re.IGNORECASE), "Build output"),
    SkipPattern(".next", re.compile(r"/\.next/", re.IGNORECASE), "Next.js build output"),
    SkipPattern("coverage", re.compile(r"/coverage/", re.IGNORECASE), "Test coverage"),
    SkipPattern("test files", re.compile(r"\.(test|spec)\.(ts|tsx|js|jsx)$", re.IGNORECASE), "Test files"),
    SkipPattern("__tests__", re.compile(r"__tests__", re.IGNORECASE), "Test directory"),
    SkipPattern("storybook", re.compile(r"\.stories\.(ts|tsx|js|jsx)$", re.IGNORECASE), "Storybook files"),
    SkipPattern("type declarations", re.compile(r"\.d\.ts$", re.IGNORECASE), "Type declarations only"),
    SkipPattern("CSS", re.compile(r"\.(css|scss|sass|less)$", re.IGNORECASE), "Stylesheets"),
    SkipPattern("images", re.compile(r"\.(png|jpg|jpeg|gif|svg|ico|webp)$", re.IGNORECASE), "Images"),
    SkipPattern("fonts", re.compile(r"\.(woff|woff2|ttf|eot|otf)$", re.IGNORECASE), "Fonts"),
    SkipPattern("markdown", re.compile(r"\.(md|mdx)$", re.IGNORECASE), "Documentation"),
    SkipPattern("UI components", re.compile(r"components/ui/", re.IGNORECASE), "UI component library"),
    SkipPattern("public assets", re.compile(r"/public/", re.IGNORECASE), "Static assets"),
    SkipPattern("lock files", re.compile(r"(package-lock|yarn\.lock|pnpm-lock)", re.IGNORECASE), "Lock files"),
)


def get_category_pattern(category: HotspotCategory) -> CategoryPattern | None:
    """Return the registry row for a category."""
    for pattern in CATEGORY_PATTERNS:
        if pattern.category == category:
            return pattern
    return None
