"""Code generator process runner."""

from runner.generator import (
    GenerationRequest,
    GeneratorOptions,
    GeneratorProcessError,
    GeneratorResult,
    load_existing_output,
    run_generator,
    run_pair,
)

__all__ = [
    "GenerationRequest",
    "GeneratorOptions",
    "GeneratorProcessError",
    "GeneratorResult",
    "load_existing_output",
    "run_generator",
    "run_pair",
]
