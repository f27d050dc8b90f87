"""Comparison and baseline operations.

For every configured language and spec the generator is run twice, once
with the old arguments and once with the new ones, and the two output trees
are compared. Output from an earlier run can stand in for either side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from compare.dispatch import compare_output_files
from report.differ import prepare_result
from runner.generator import (
    GenerationRequest,
    GeneratorOptions,
    load_existing_output,
    run_pair,
    run_request,
)
from settings.config import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

    from compare.dispatch import ComparerRegistry
    from report.models import DiffNode
    from runner.generator import GeneratorResult
    from settings.config import (
        LanguageConfiguration,
        RunConfiguration,
        SpecConfiguration,
    )

logger = logging.getLogger(__name__)

COMPARISON_LABEL = "Comparison Results"
OLD_OUTPUT_DIR = "old"
NEW_OUTPUT_DIR = "new"


@dataclass(frozen=True)
class SpecComparison:
    language: str
    spec_path: str
    diff: DiffNode | None


@dataclass(frozen=True)
class ComparisonResult:
    diff: DiffNode | None
    spec_results: tuple[SpecComparison, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.diff is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


@dataclass(frozen=True)
class _SpecRun:
    language: LanguageConfiguration
    spec_path: str
    old: GenerationRequest
    new: GenerationRequest


def _plan(config: RunConfiguration) -> list[_SpecRun]:
    runs: list[_SpecRun] = []
    for language in config.languages:
        for spec in config.specs:
            for spec_path in spec.spec_paths:
                runs.append(_plan_spec(config, language, spec, spec_path))
    return runs


def _plan_spec(
    config: RunConfiguration,
    language: LanguageConfiguration,
    spec: SpecConfiguration,
    spec_path: str,
) -> _SpecRun:
    output_base = language.output_path / spec.output_subpath(spec_path)
    spec_file = spec.resolve(spec_path)
    command = tuple(config.generator)

    def request(output_dir: str, args: list[str]) -> GenerationRequest:
        return GenerationRequest(
            spec_path=spec_file,
            output_path=output_base / output_dir,
            options=GeneratorOptions(
                command=command, language=language.language, args=tuple(args)
            ),
        )

    return _SpecRun(
        language=language,
        spec_path=spec_path,
        old=request(OLD_OUTPUT_DIR, language.old_args),
        new=request(NEW_OUTPUT_DIR, language.new_args),
    )


def _require_output(path: Path) -> None:
    if not path.is_dir():
        msg = f"Existing output directory does not exist: {path}"
        raise ConfigurationError(msg)


def _check_existing_output(runs: list[_SpecRun]) -> None:
    for run in runs:
        reuse = run.language.use_existing_output
        if reuse in ("old", "all"):
            _require_output(run.old.output_path)
        if reuse == "all":
            _require_output(run.new.output_path)


def _generate(run: _SpecRun) -> tuple[GeneratorResult, GeneratorResult]:
    reuse = run.language.use_existing_output
    if reuse == "all":
        return (
            load_existing_output(run.old.output_path),
            load_existing_output(run.new.output_path),
        )
    if reuse == "old":
        return load_existing_output(run.old.output_path), run_request(run.new)
    return run_pair(run.old, run.new)


def compare_directories(
    old_dir: Path, new_dir: Path, registry: ComparerRegistry
) -> DiffNode | None:
    """Compare two output trees that already exist on disk."""
    _require_output(old_dir)
    _require_output(new_dir)
    return compare_output_files(
        load_existing_output(old_dir), load_existing_output(new_dir), registry
    )


def run_comparison(
    config: RunConfiguration, registry: ComparerRegistry
) -> ComparisonResult:
    """Generate old and new output for every language and spec and compare.

    Raises:
        ConfigurationError: If reused output is missing (checked before any
            generator runs).
        GeneratorProcessError: If a generator run fails.
        ExtractionError: If a generated file cannot be reduced to symbols.
    """
    runs = _plan(config)
    _check_existing_output(runs)

    spec_results: list[SpecComparison] = []
    by_language: dict[str, list[DiffNode | None]] = {}
    for run in runs:
        logger.info("Comparing %s output for %s", run.language.language, run.spec_path)
        old_result, new_result = _generate(run)
        diff = compare_output_files(old_result, new_result, registry)
        spec_results.append(
            SpecComparison(
                language=run.language.language, spec_path=run.spec_path, diff=diff
            )
        )
        by_language.setdefault(run.language.language, []).append(
            prepare_result(run.spec_path, "outline", [diff])
        )

    language_nodes = [
        prepare_result(language, "outline", spec_nodes)
        for language, spec_nodes in by_language.items()
    ]
    return ComparisonResult(
        diff=prepare_result(COMPARISON_LABEL, "outline", language_nodes),
        spec_results=tuple(spec_results),
    )


def generate_baseline(config: RunConfiguration) -> list[GeneratorResult]:
    """Generate only the old side so later runs can reuse it as a baseline."""
    results: list[GeneratorResult] = []
    for run in _plan(config):
        logger.info(
            "Generating %s baseline for %s", run.language.language, run.spec_path
        )
        results.append(run_request(run.old))
    return results


__all__ = [
    "COMPARISON_LABEL",
    "ComparisonResult",
    "SpecComparison",
    "compare_directories",
    "generate_baseline",
    "run_comparison",
]
