"""Output directory scanning for generator runs."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _relative_output_path(path: Path, root: Path) -> str | None:
    """Return the POSIX path of a regular file under root, or None."""
    if path.is_symlink() or not path.is_file():
        return None
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return None
    return path.relative_to(root).as_posix()


def _build_gitignore_matcher(root: Path) -> Callable[[str], bool] | None:
    gitignore_path = root / ".gitignore"
    if gitignore_path.is_file():
        return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
    return None


def list_output_files(
    directory: Path,
    *,
    exclude_patterns: list[str] | None = None,
    respect_gitignore: bool = True,
) -> list[str]:
    """List the files a generator run wrote, relative to its output directory.

    Args:
        directory: Output directory of one generator run
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        respect_gitignore: Skip files matched by the directory's own
            .gitignore (generators often emit one)

    Returns:
        POSIX relative paths, sorted lexicographically for deterministic
        ordering.

    Raises:
        NotADirectoryError: If directory does not exist or is not a directory.
    """
    if not directory.is_dir():
        msg = f"Output path is not a directory: {directory}"
        raise NotADirectoryError(msg)

    gitignore_matches = (
        _build_gitignore_matcher(directory) if respect_gitignore else None
    )

    files: list[str] = []
    for path in directory.rglob("*"):
        rel_path = _relative_output_path(path, directory)
        if rel_path is None:
            continue
        if gitignore_matches is not None and gitignore_matches(str(path)):
            continue
        if exclude_patterns and any(fnmatch(rel_path, pat) for pat in exclude_patterns):
            continue
        files.append(rel_path)
    return sorted(files)


__all__ = ["list_output_files"]
