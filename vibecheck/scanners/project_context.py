"""Project context detection from the package manifest.

The hints found here (framework, database, auth provider) are passed to the
prompt builder as free-text context. ``None`` means "could not determine",
never "not used".
"""

from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import LOCK_FILES
from .file_reader import get_package_json, has_package_lock
from .models import ScannedFile

# Ordered (dependency names, hint) tables; first match wins per field
FRAMEWORK_DEPENDENCIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("next",), "nextjs"),
    (("express",), "express"),
    (("@nestjs/core",), "nestjs"),
    (("fastify",), "fastify"),
    (("react",), "react"),
)

DATABASE_DEPENDENCIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("firebase", "@firebase/app"), "firebase"),
    (("@supabase/supabase-js",), "supabase"),
    (("mongodb", "mongoose"), "mongodb"),
    (("pg", "@prisma/client"), "postgresql"),
    (("mysql2",), "mysql"),
)

AUTH_PROVIDER_DEPENDENCIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("@clerk/nextjs",), "clerk"),
    (("auth0", "@auth0/nextjs-auth0"), "auth0"),
    (("next-auth",), "nextauth"),
    (("firebase",), "firebase"),
    (("@supabase/supabase-js",), "supabase"),
)

TYPESCRIPT_EXTENSIONS = {".ts", ".tsx"}


class ProjectContext(BaseModel):
    """What the manifest reveals about the project under review."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    has_package_json: bool = False
    has_package_lock: bool = False
    framework: str | None = None
    database: str | None = None
    auth_provider: str | None = None
    is_typescript: bool = Field(default=False, alias="isTypeScript")


def _first_match(
    dependencies: dict[str, object], table: tuple[tuple[tuple[str, ...], str], ...]
) -> str | None:
    for names, hint in table:
        if any(name in dependencies for name in names):
            return hint
    return None


def _lock_file_on_disk(root_path: str | None) -> bool:
    if not root_path:
        return False
    root = Path(root_path)
    return root.is_dir() and any((root / lock).is_file() for lock in LOCK_FILES)


def detect_project_context(
    files: Sequence[ScannedFile], root_path: str | None = None
) -> ProjectContext:
    """Detect framework, database and auth provider hints.

    Args:
        files: Scanned files
        root_path: Scanned directory, if the files came from disk. The file
            reader drops lock files, so their presence is also checked here.

    Returns:
        ProjectContext
    """
    package_json = get_package_json(files)
    dependencies = package_json.get("dependencies") if package_json else None
    if not isinstance(dependencies, dict):
        dependencies = {}

    return ProjectContext(
        has_package_json=package_json is not None,
        has_package_lock=has_package_lock(files) or _lock_file_on_disk(root_path),
        framework=_first_match(dependencies, FRAMEWORK_DEPENDENCIES),
        database=_first_match(dependencies, DATABASE_DEPENDENCIES),
        auth_provider=_first_match(dependencies, AUTH_PROVIDER_DEPENDENCIES),
        is_typescript=any(f.extension in TYPESCRIPT_EXTENSIONS for f in files),
    )
