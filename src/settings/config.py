"""Run configuration for codegen-compare.

A configuration names the specs to generate from, and for each generator
language the output location and the argument sets of the old and new runs.
It is read from a TOML file or assembled from command-line arguments; either
way it is validated before any generator is started.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, get_args

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

GeneratorLanguage = Literal["typescript", "python", "java", "csharp", "powershell", "go"]

GENERATOR_LANGUAGES: tuple[str, ...] = get_args(GeneratorLanguage)

UseExistingOutput = Literal["none", "old", "all"]

DEFAULT_GENERATOR = "autorest"


class ConfigurationError(Exception):
    """Raised when run parameters are missing or malformed."""


class SpecConfiguration(BaseModel):
    """The API specs to generate from."""

    model_config = ConfigDict(extra="forbid")

    spec_root_path: Path | None = Field(
        default=None,
        description="Root that spec paths are resolved against",
    )
    spec_paths: list[str] = Field(
        default_factory=list,
        description="Spec files to generate from (relative to spec_root_path)",
    )

    def resolve(self, spec_path: str) -> Path:
        if self.spec_root_path is None:
            return Path(spec_path)
        return self.spec_root_path / spec_path

    def output_subpath(self, spec_path: str) -> Path:
        """Directory under a language's output path used for ``spec_path``.

        With a spec root the spec's location relative to the root is kept;
        otherwise the spec's file stem is used.
        """
        relative = Path(spec_path)
        if self.spec_root_path is None or relative.is_absolute():
            return Path(relative.stem)
        return relative.parent / relative.stem


class LanguageConfiguration(BaseModel):
    """Generator settings for one target language."""

    model_config = ConfigDict(extra="forbid")

    language: GeneratorLanguage
    output_path: Path
    old_args: list[str] = Field(default_factory=list)
    new_args: list[str] = Field(default_factory=list)
    use_existing_output: UseExistingOutput = Field(
        default="none",
        description="Reuse output of earlier runs instead of generating: none, old or all",
    )


class RunConfiguration(BaseModel):
    """Everything one comparison (or baseline) run needs."""

    model_config = ConfigDict(extra="forbid")

    debug: bool = False
    generator: list[str] = Field(
        default_factory=lambda: [DEFAULT_GENERATOR],
        description="Command used to invoke the code generator",
    )
    specs: list[SpecConfiguration] = Field(default_factory=list)
    languages: list[LanguageConfiguration] = Field(default_factory=list)

    @field_validator("generator", mode="before")
    @classmethod
    def split_generator_command(cls, v: Any) -> Any:
        """Accept the generator command as a string or an argv list."""
        if isinstance(v, str):
            return v.split()
        return v

    def for_language(self, language: str) -> RunConfiguration:
        """Restrict the configuration to one language."""
        selected = [c for c in self.languages if c.language == language]
        if not selected:
            msg = f"No configuration for language '{language}'"
            raise ConfigurationError(msg)
        return self.model_copy(update={"languages": selected})

    def with_debug_args(self) -> RunConfiguration:
        """Pass ``--debug`` to both generator runs when debugging globally."""
        if not self.debug:
            return self
        languages = [
            c.model_copy(
                update={
                    "old_args": [*c.old_args, "--debug"],
                    "new_args": [*c.new_args, "--debug"],
                }
            )
            for c in self.languages
        ]
        return self.model_copy(update={"languages": languages})


def check_complete(config: RunConfiguration) -> RunConfiguration:
    """Ensure a configuration names at least one language and spec."""
    if not config.languages:
        msg = (
            "Missing language parameter. Please use one of: "
            f"{', '.join(GENERATOR_LANGUAGES)}"
        )
        raise ConfigurationError(msg)
    if not any(spec.spec_paths for spec in config.specs):
        msg = "A spec path must be provided with the --spec-path parameter."
        raise ConfigurationError(msg)
    return config


def _resolve_relative(base: Path, path: Path | None) -> Path | None:
    if path is None:
        return None
    return (base / path.expanduser()).resolve()


def resolve_paths(config: RunConfiguration, base: Path) -> RunConfiguration:
    """Resolve spec roots and output paths against ``base`` (the config dir)."""
    specs = [
        s.model_copy(update={"spec_root_path": _resolve_relative(base, s.spec_root_path)})
        for s in config.specs
    ]
    languages = [
        c.model_copy(update={"output_path": _resolve_relative(base, c.output_path)})
        for c in config.languages
    ]
    return config.model_copy(update={"specs": specs, "languages": languages})


def build_configuration(data: dict[str, Any]) -> RunConfiguration:
    """Validate raw settings into a complete ``RunConfiguration``."""
    try:
        config = RunConfiguration.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e
    return check_complete(config).with_debug_args()


def load_config(config_path: Path) -> RunConfiguration:
    """Load and validate a TOML run configuration.

    Relative paths inside the file are resolved against the file's directory.
    """
    if not config_path.is_file():
        msg = f"Configuration file does not exist: {config_path}"
        raise ConfigurationError(msg)

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigurationError(msg) from e

    try:
        config = RunConfiguration.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigurationError(msg) from e

    config = resolve_paths(config, config_path.resolve().parent)
    return check_complete(config).with_debug_args()


__all__ = [
    "DEFAULT_GENERATOR",
    "GENERATOR_LANGUAGES",
    "ConfigurationError",
    "GeneratorLanguage",
    "LanguageConfiguration",
    "RunConfiguration",
    "SpecConfiguration",
    "UseExistingOutput",
    "build_configuration",
    "check_complete",
    "load_config",
    "resolve_paths",
]
