"""File-type dispatch for output comparison.

Generated files are paired by relative path. Each pair is extracted and
compared with the extractor/comparator registered for the file extension;
files with an unregistered extension are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol

from compare.comparers import compare_source_details
from extract.python import PythonExtractor
from extract.typescript import TypeScriptExtractor
from report.differ import compare_items

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from extract.base import SourceExtractor
    from report.models import DiffNode
    from symbols.models import SourceDetails

logger = logging.getLogger(__name__)

OUTPUT_FILES_LABEL = "Generated Output Files"


class OutputResult(Protocol):
    """The files one generator run produced."""

    @property
    def output_path(self) -> Path: ...

    @property
    def output_files(self) -> Sequence[str]: ...


@dataclass(frozen=True)
class OutputFile:
    """A generated file: its path relative to the run's output directory."""

    name: str
    base_path: Path

    @property
    def path(self) -> Path:
        return self.base_path / self.name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.name).suffix.removeprefix(".")


@dataclass(frozen=True)
class LanguageSupport:
    extractor: SourceExtractor
    comparator: Callable[[str, SourceDetails, SourceDetails], DiffNode | None] = (
        compare_source_details
    )


@dataclass(frozen=True)
class ComparerRegistry:
    """Maps file extensions ("ts", "py", ...) to extractor/comparator pairs."""

    by_extension: dict[str, LanguageSupport] = field(default_factory=dict)

    def lookup(self, extension: str) -> LanguageSupport | None:
        return self.by_extension.get(extension)

    @property
    def extensions(self) -> list[str]:
        return sorted(self.by_extension)


def default_registry() -> ComparerRegistry:
    """Build the registry once per process; extractors are shared by reference."""
    typescript = LanguageSupport(TypeScriptExtractor())
    python = LanguageSupport(PythonExtractor())
    return ComparerRegistry(
        by_extension={
            "ts": typescript,
            "tsx": LanguageSupport(TypeScriptExtractor(tsx=True)),
            "py": python,
            "pyi": python,
        }
    )


def compare_file(
    old_file: OutputFile, new_file: OutputFile, registry: ComparerRegistry
) -> DiffNode | None:
    """Compare two versions of one generated file.

    Raises:
        ExtractionError: If either file cannot be reduced to symbols. The
            error is not caught here: a broken file fails the whole run.
    """
    support = registry.lookup(old_file.extension)
    if support is None:
        logger.debug("No comparer registered for %s, skipping", old_file.name)
        return None

    old_details = support.extractor.extract_file(old_file.path)
    new_details = support.extractor.extract_file(new_file.path)
    return support.comparator(old_file.name, old_details, new_details)


def compare_output_files(
    old_result: OutputResult,
    new_result: OutputResult,
    registry: ComparerRegistry,
) -> DiffNode | None:
    """Compare every file two generator runs produced."""
    old_base = Path(old_result.output_path)
    new_base = Path(new_result.output_path)
    old_files = [OutputFile(name, old_base) for name in old_result.output_files]
    new_files = [OutputFile(name, new_base) for name in new_result.output_files]
    logger.info(
        "Comparing %d old and %d new output files", len(old_files), len(new_files)
    )
    return compare_items(
        OUTPUT_FILES_LABEL,
        old_files,
        new_files,
        lambda old_file, new_file: compare_file(old_file, new_file, registry),
    )


__all__ = [
    "OUTPUT_FILES_LABEL",
    "ComparerRegistry",
    "LanguageSupport",
    "OutputFile",
    "OutputResult",
    "compare_file",
    "compare_output_files",
    "default_registry",
]
