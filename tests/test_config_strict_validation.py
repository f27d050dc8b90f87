from __future__ import annotations

from pathlib import Path

import pytest

from settings.config import (
    ConfigurationError,
    RunConfiguration,
    SpecConfiguration,
    build_configuration,
    load_config,
)


def _write_config(root: Path, toml_content: str) -> Path:
    config_path = root / "compare.toml"
    config_path.write_text(toml_content, encoding="utf-8")
    return config_path


VALID_CONFIG = """
generator = "npx autorest"

[[specs]]
spec_root_path = "specs"
spec_paths = ["storage/blob.json", "keyvault/secrets.json"]

[[languages]]
language = "typescript"
output_path = "out/ts"
old_args = ["--version=3.0.6187"]
new_args = ["--version=3.0.6200"]

[[languages]]
language = "python"
output_path = "out/py"
use_existing_output = "old"
""".strip()


def test_valid_config_accepted_and_paths_resolved(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, VALID_CONFIG))

    assert config.generator == ["npx", "autorest"]
    assert config.specs[0].spec_root_path == (tmp_path / "specs").resolve()
    assert [c.language for c in config.languages] == ["typescript", "python"]
    assert config.languages[0].output_path == (tmp_path / "out" / "ts").resolve()
    assert config.languages[0].old_args == ["--version=3.0.6187"]
    assert config.languages[1].use_existing_output == "old"


def test_for_language_filters_configurations(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, VALID_CONFIG)).for_language("python")

    assert [c.language for c in config.languages] == ["python"]


def test_for_language_rejects_unconfigured_language(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, VALID_CONFIG))

    with pytest.raises(ConfigurationError, match="No configuration for language 'go'"):
        config.for_language("go")


def test_debug_flag_is_passed_to_both_runs(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, "debug = true\n" + VALID_CONFIG))

    assert config.languages[0].old_args == ["--version=3.0.6187", "--debug"]
    assert config.languages[0].new_args == ["--version=3.0.6200", "--debug"]


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "bogus_key = true\n" + VALID_CONFIG)

    with pytest.raises(ConfigurationError, match="Invalid config"):
        load_config(config_path)


def test_unknown_language_rejected(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path, VALID_CONFIG.replace('language = "python"', 'language = "cobol"')
    )

    with pytest.raises(ConfigurationError):
        load_config(config_path)


def test_invalid_use_existing_output_rejected(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path, VALID_CONFIG.replace('"old"', '"some"')
    )

    with pytest.raises(ConfigurationError):
        load_config(config_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "[[specs]\n")

    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_config(config_path)


def test_missing_config_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_config(tmp_path / "missing.toml")


def test_missing_language_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Missing language parameter"):
        build_configuration({"specs": [{"spec_paths": ["a.json"]}]})


def test_missing_spec_path_rejected() -> None:
    with pytest.raises(ConfigurationError, match="--spec-path"):
        build_configuration(
            {"languages": [{"language": "typescript", "output_path": "out"}]}
        )


def test_default_generator_command() -> None:
    assert RunConfiguration().generator == ["autorest"]


def test_output_subpath_keeps_spec_layout_under_root(tmp_path: Path) -> None:
    with_root = SpecConfiguration(spec_root_path=tmp_path, spec_paths=[])
    without_root = SpecConfiguration(spec_paths=[])

    assert with_root.output_subpath("storage/blob.json") == Path("storage/blob")
    assert with_root.resolve("storage/blob.json") == tmp_path / "storage" / "blob.json"
    assert without_root.output_subpath("specs/storage/blob.json") == Path("blob")
