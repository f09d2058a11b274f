from vibecheck.scanners.models import HotspotCategory, HotspotPriority
from vibecheck.scanners.patterns import (
    CATEGORY_PATTERNS,
    SKIP_PATTERNS,
    get_category_pattern,
)


class TestCategoryPatterns:
    def test_registry_order_matches_category_declaration(self):
        assert [p.category for p in CATEGORY_PATTERNS] == list(HotspotCategory)

    def test_priorities(self):
        priorities = {p.category: p.priority for p in CATEGORY_PATTERNS}
        assert priorities[HotspotCategory.AUTH] == HotspotPriority.CRITICAL
        assert priorities[HotspotCategory.API] == HotspotPriority.CRITICAL
        assert priorities[HotspotCategory.DATABASE_RULES] == HotspotPriority.CRITICAL
        assert priorities[HotspotCategory.SECRETS_ENV] == HotspotPriority.HIGH
        assert priorities[HotspotCategory.DEPENDENCIES] == HotspotPriority.HIGH
        assert priorities[HotspotCategory.DATA_FLOW] == HotspotPriority.MEDIUM

    def test_data_flow_is_content_only(self):
        pattern = get_category_pattern(HotspotCategory.DATA_FLOW)
        assert pattern.path_patterns == ()
        assert pattern.matches("src/lib/db.ts", "const id = req.body.id")
        assert not pattern.matches("src/lib/db.ts", "const id = 1")

    def test_dependencies_is_package_json_only(self):
        pattern = get_category_pattern(HotspotCategory.DEPENDENCIES)
        assert pattern.content_patterns == ()
        assert pattern.matches_path("package.json")
        assert pattern.matches_path("apps/web/package.json")
        assert not pattern.matches_path("package.json.bak")

    def test_patterns_are_case_insensitive(self):
        auth = get_category_pattern(HotspotCategory.AUTH)
        assert auth.matches_path("src/AUTH/index.ts")
        assert auth.matches_content("await Bcrypt.hash(pw)")

    def test_path_or_content(self):
        api = get_category_pattern(HotspotCategory.API)
        assert api.matches("src/app/api/users/route.ts", "")
        assert api.matches("src/server.js", "const app = express()")
        assert not api.matches("src/util.js", "export const x = 1")

    def test_get_category_pattern_accepts_every_category(self):
        for category in HotspotCategory:
            assert get_category_pattern(category).category == category


class TestSkipPatterns:
    def test_skip_pattern_count(self):
        assert len(SKIP_PATTERNS) == 16

    def test_markdown_reason(self):
        markdown = next(p for p in SKIP_PATTERNS if p.name == "markdown")
        assert markdown.reason == "Documentation"
        assert markdown.pattern.search("docs/guide.MDX")

    def test_test_files_pattern(self):
        tests = next(p for p in SKIP_PATTERNS if p.name == "test files")
        assert tests.pattern.search("src/auth/login.test.ts")
        assert tests.pattern.search("src/auth/login.spec.jsx")
        assert not tests.pattern.search("src/auth/login.ts")

    def test_build_output_requires_directory_separators(self):
        dist = next(p for p in SKIP_PATTERNS if p.name == "dist")
        assert dist.pattern.search("apps/web/dist/index.js")
        assert not dist.pattern.search("src/distance.ts")
