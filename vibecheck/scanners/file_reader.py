"""Read source files from disk or from caller-supplied content."""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ..constants import LOCK_FILES, MAX_FILE_SIZE, MAX_FILES
from ..core.exceptions import InvalidInputError
from .models import ScannedFile

logger = logging.getLogger("vibecheck.files")

# File extensions to include
CODE_EXTENSIONS = {
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
    ".json", ".yaml", ".yml",
    ".prisma", ".graphql", ".gql",
    ".rules",  # Firebase rules
    ".sql",
    ".py", ".rb", ".go", ".java", ".rs", ".php",
}

SKIP_DIRECTORIES = {
    "node_modules",
    ".git",
    ".next",
    ".nuxt",
    "dist",
    "build",
    "out",
    "coverage",
    ".turbo",
    ".cache",
    "__pycache__",
    "vendor",
    ".idea",
    ".vscode",
}

SKIP_FILES = {
    *LOCK_FILES,
    "bun.lockb",
    ".DS_Store",
}


def _extension(path: str) -> str:
    return os.path.splitext(path)[1].lower()


def should_include_file(file_path: str, size: int) -> bool:
    """Check if a file should be included in the scan."""
    ext = _extension(file_path)
    file_name = file_path.replace("\\", "/").rsplit("/", 1)[-1]

    if file_name in SKIP_FILES:
        return False

    if size > MAX_FILE_SIZE:
        return False

    if ext in CODE_EXTENSIONS:
        return True

    if file_name.startswith(".env") or file_name == ".gitignore":
        return True

    # Extension-less files that look like config
    if not ext and (
        "config" in file_name
        or "rc" in file_name
        or file_name in ("Dockerfile", "Makefile")
    ):
        return True

    return False


def _read_directory(root: Path, max_files: int) -> list[ScannedFile]:
    files: list[ScannedFile] = []

    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk does not descend
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRECTORIES)

        for name in sorted(filenames):
            if len(files) >= max_files:
                logger.warning(f"File limit of {max_files} reached, stopping walk of {root}")
                return files

            full_path = Path(dirpath) / name
            try:
                if not full_path.is_file():
                    continue
                size = full_path.stat().st_size
                if not should_include_file(name, size):
                    continue
                content = full_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {full_path}: {e}")
                continue

            files.append(
                ScannedFile(
                    path=full_path.relative_to(root).as_posix(),
                    content=content,
                    size=size,
                    extension=_extension(name),
                )
            )

    return files


def read_files_from_path(path: str, max_files: int = MAX_FILES) -> list[ScannedFile]:
    """Read all scannable files from a directory, or a single file.

    Args:
        path: Directory or file path
        max_files: Maximum number of files collected from a directory

    Returns:
        List of ScannedFile records with paths relative to ``path``

    Raises:
        InvalidInputError: If the path does not exist or is not a file/directory
    """
    target = Path(path)
    if not target.exists():
        raise InvalidInputError(f"Path does not exist: {path}")

    if target.is_file():
        try:
            content = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidInputError(f"Could not read file {path}: {e}") from e
        return [
            ScannedFile(
                path=target.name,
                content=content,
                size=target.stat().st_size,
                extension=_extension(target.name),
            )
        ]

    if target.is_dir():
        return _read_directory(target, max_files)

    raise InvalidInputError(f"Path is neither a file nor a directory: {path}")


def parse_file_inputs(files: Iterable[Mapping[str, Any]]) -> list[ScannedFile]:
    """Convert ``{"path", "content"}`` objects to ScannedFile records."""
    parsed = []
    for item in files:
        file_path = str(item.get("path", "")).replace("\\", "/")
        content = item.get("content") or ""
        parsed.append(
            ScannedFile(
                path=file_path,
                content=content,
                size=len(content.encode("utf-8")),
                extension=_extension(file_path),
            )
        )
    return parsed


def _is_named(file: ScannedFile, name: str) -> bool:
    return file.path == name or file.path.endswith(f"/{name}")


def get_package_json(files: Iterable[ScannedFile]) -> dict[str, Any] | None:
    """Return the parsed first package.json among the files, if any."""
    for file in files:
        if _is_named(file, "package.json"):
            try:
                data = json.loads(file.content)
            except json.JSONDecodeError:
                logger.warning(f"Could not parse {file.path}")
                return None
            return data if isinstance(data, dict) else None
    return None


def has_package_lock(files: Iterable[ScannedFile]) -> bool:
    """Check whether any of the files is a package-manager lock file."""
    return any(_is_named(file, lock) for file in files for lock in LOCK_FILES)
