"""Code generator process runner.

Invokes the generator as a subprocess for one spec and records what it
produced. The old and new runs of a comparison are independent, so they are
started together and both are awaited before any result is used.
"""

from __future__ import annotations

import logging
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scan.files import list_output_files

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class GeneratorProcessError(Exception):
    """Raised when the code generator exits with a non-zero code."""

    def __init__(self, command: list[str], exit_code: int, output: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"{command[0]} exited with non-zero code {exit_code}:\n\n{output}"
        )


@dataclass(frozen=True)
class GeneratorOptions:
    command: tuple[str, ...]
    language: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class GeneratorResult:
    """Files produced by one generator run (or found from an earlier one)."""

    output_path: Path
    output_files: tuple[str, ...]
    process_output: str = ""
    time_elapsed: float = 0.0


@dataclass(frozen=True)
class GenerationRequest:
    spec_path: Path
    output_path: Path
    options: GeneratorOptions


def build_command(
    spec_path: Path, output_path: Path, options: GeneratorOptions
) -> list[str]:
    language = options.language
    return [
        *options.command,
        *options.args,
        f"--{language}",
        f"--{language}.output-folder={output_path}",
        f"--{language}.clear-output-folder",
        str(spec_path),
    ]


def run_generator(
    spec_path: Path, output_path: Path, options: GeneratorOptions
) -> GeneratorResult:
    """Run the generator once and list the files it wrote.

    Raises:
        GeneratorProcessError: If the generator exits with a non-zero code or
            leaves no output folder behind. The captured stderr (or stdout when
            stderr is empty) is attached.
    """
    command = build_command(spec_path, output_path, options)
    logger.debug("Invoking generator: %s", " ".join(command))

    start = time.monotonic()
    try:
        completed = subprocess.run(
            command, capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise GeneratorProcessError(command, 127, str(exc)) from exc
    elapsed = time.monotonic() - start

    if completed.returncode != 0:
        raise GeneratorProcessError(
            command, completed.returncode, completed.stderr or completed.stdout
        )
    if not output_path.is_dir():
        raise GeneratorProcessError(
            command,
            completed.returncode,
            f"generator produced no output folder at {output_path}\n"
            f"{completed.stderr or completed.stdout}",
        )

    logger.info(
        "Generated %s output for %s in %.1fs", options.language, spec_path, elapsed
    )
    return GeneratorResult(
        output_path=output_path,
        output_files=tuple(list_output_files(output_path)),
        process_output=completed.stdout,
        time_elapsed=elapsed,
    )


def run_request(request: GenerationRequest) -> GeneratorResult:
    return run_generator(request.spec_path, request.output_path, request.options)


def run_pair(
    old: GenerationRequest, new: GenerationRequest
) -> tuple[GeneratorResult, GeneratorResult]:
    """Run the old and new generations concurrently.

    Both runs are waited for even when one fails; the old side's failure is
    raised first.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        old_future = executor.submit(run_request, old)
        new_future = executor.submit(run_request, new)
        old_error = old_future.exception()
        new_error = new_future.exception()

    if old_error is not None:
        raise old_error
    if new_error is not None:
        raise new_error
    return old_future.result(), new_future.result()


def load_existing_output(output_path: Path) -> GeneratorResult:
    """Describe output left behind by an earlier run without regenerating it."""
    logger.info("Reusing existing output in %s", output_path)
    return GeneratorResult(
        output_path=output_path,
        output_files=tuple(list_output_files(output_path)),
    )


__all__ = [
    "GenerationRequest",
    "GeneratorOptions",
    "GeneratorProcessError",
    "GeneratorResult",
    "build_command",
    "load_existing_output",
    "run_generator",
    "run_pair",
    "run_request",
]
